# models/card_models.py
"""Pydantic models for the style corpus and the card news plan."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PageType(str, Enum):
    """Kinds of card news pages."""

    COVER = "COVER"
    BODY = "BODY"
    OUTRO = "OUTRO"


class CardBaseModel(BaseModel):
    """Base model supporting mapping style access."""

    model_config = ConfigDict(from_attributes=True, extra="allow")

    def __getitem__(self, item: str) -> Any:  # pragma: no cover - convenience
        return getattr(self, item)

    def get(
        self, item: str, default: Any = None
    ) -> Any:  # pragma: no cover - convenience
        return getattr(self, item, default)


class ReferenceItem(CardBaseModel):
    """A catalogued design example used to steer generation style."""

    model_config = ConfigDict(frozen=True, extra="allow")

    index: int = -1
    page_type: str | None = None
    main_title: str | None = None
    tone_and_manner: str | None = None
    keywords: list[str] | str | None = None
    visual_vibe: str | None = None
    layout_feature: str | None = None
    color_palette_feel: str | None = None
    file_name: str | None = None
    file_url: str | None = None

    def style_summary(self) -> dict[str, Any]:
        """Fields forwarded to the plan prompt as a style example."""
        return {
            "page_type": self.page_type,
            "main_title": self.main_title,
            "tone_and_manner": self.tone_and_manner,
            "visual_vibe": self.visual_vibe,
            "layout_feature": self.layout_feature,
            "color_palette_feel": self.color_palette_feel,
        }


class QuantizedEmbedding(BaseModel):
    """8-bit quantized embedding with the range needed to reconstruct it."""

    model_config = ConfigDict(frozen=True)

    data: str
    min: float
    max: float


class DesignConcept(CardBaseModel):
    """A named visual direction proposed for the deck."""

    name: str
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CardPlan(CardBaseModel):
    """Page contents of a deck. Page payloads are passed through untouched."""

    cover: dict[str, Any] | None = None
    body: list[Any] = Field(default_factory=list)
    outro: dict[str, Any] | None = None


class PlanResult(CardBaseModel):
    """Structured output of the plan generation step."""

    structure_type: str = "MULTI"
    estimated_tone: str | None = None
    plan: CardPlan = Field(default_factory=CardPlan)
    design_concepts: list[DesignConcept] = Field(default_factory=list)
    is_sample: bool = False


class CardPage(CardBaseModel):
    """One page of the deck in generation order."""

    page_index: int
    page_type: PageType
    label: str
    content: Any = None
    body_number: int | None = None
