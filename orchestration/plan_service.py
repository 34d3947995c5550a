# orchestration/plan_service.py
"""Plan generation and plan-to-page conversion."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from config import settings
from models import CardPage, DesignConcept, PageType, PlanResult

if TYPE_CHECKING:  # pragma: no cover - type hints
    from core.gemini_client import GeminiService
    from retrieval import StyleRetriever

logger = structlog.get_logger(__name__)

DEFAULT_DESIGN_CONCEPTS: tuple[DesignConcept, ...] = (
    DesignConcept(
        name="Modern Clean", description="Generous whitespace and minimal typography"
    ),
    DesignConcept(
        name="Warm Illustration", description="Soft colours with a hand-drawn feel"
    ),
    DesignConcept(
        name="Bold Graphic", description="Strong colour contrast and oversized text"
    ),
)

COVER_LABEL = "Cover"
OUTRO_LABEL = "Closing"


def body_label(body_number: int) -> str:
    return f"Body {body_number}"


def sample_plan() -> PlanResult:
    """Built-in plan used when plan generation is unavailable (demo mode)."""
    return PlanResult.model_validate(
        {
            "structure_type": "MULTI",
            "estimated_tone": "friendly and warm",
            "plan": {
                "cover": {
                    "main_title": "A Healthy Spring Together",
                    "sub_title": "Citizen health campaign guide",
                },
                "body": [
                    {
                        "summary": [
                            "Why spring health care matters",
                            "Daily habits that strengthen immunity",
                        ]
                    },
                    {
                        "summary": [
                            "Free health check-up schedule",
                            "Key programmes for April and May",
                        ]
                    },
                    {
                        "summary": [
                            "Tips for a balanced diet",
                            "Recipes with seasonal ingredients",
                        ]
                    },
                ],
                "outro": {
                    "cta": "Get a free check-up at your public health centre!",
                    "contact": "Contact: 061-797-1234",
                },
            },
            "is_sample": True,
        }
    )


def design_concepts_for(plan: PlanResult) -> list[DesignConcept]:
    """Concepts proposed with the plan, or the built-in defaults."""
    if plan.design_concepts:
        return list(plan.design_concepts)
    return list(DEFAULT_DESIGN_CONCEPTS)


def build_pages(plan: PlanResult) -> list[CardPage]:
    """Pages in generation order: cover, body pages, outro."""
    pages: list[CardPage] = []
    card_plan = plan.plan
    if card_plan.cover:
        pages.append(
            CardPage(
                page_index=len(pages),
                page_type=PageType.COVER,
                label=COVER_LABEL,
                content=card_plan.cover,
            )
        )
    for i, body in enumerate(card_plan.body or []):
        pages.append(
            CardPage(
                page_index=len(pages),
                page_type=PageType.BODY,
                label=body_label(i + 1),
                content=body,
                body_number=i + 1,
            )
        )
    if card_plan.outro:
        pages.append(
            CardPage(
                page_index=len(pages),
                page_type=PageType.OUTRO,
                label=OUTRO_LABEL,
                content=card_plan.outro,
            )
        )
    return pages


def page_content_for(plan: PlanResult, page_index: int, page_type: PageType) -> Any:
    """Content of a page addressed by its deck index.

    A leading cover shifts body indices by one. Unknown pages fall back to the
    whole plan.
    """
    card_plan = plan.plan
    whole_plan = card_plan.model_dump()
    if page_type == PageType.COVER:
        return card_plan.cover if card_plan.cover is not None else whole_plan
    if page_type == PageType.OUTRO:
        return card_plan.outro if card_plan.outro is not None else whole_plan
    body_index = page_index - 1 if card_plan.cover else page_index
    if 0 <= body_index < len(card_plan.body):
        return card_plan.body[body_index]
    logger.warning(
        "Body page %d not found in plan. Using the whole plan as content.",
        page_index,
    )
    return whole_plan


class PlanService:
    """Produce a plan for a document, steered by style examples."""

    def __init__(self, client: GeminiService, retriever: StyleRetriever) -> None:
        self.client = client
        self.retriever = retriever

    async def generate_plan(
        self, document_text: str, detail_level: str = "simple"
    ) -> PlanResult:
        rag_examples = []
        if self.retriever.rag_loaded:
            logger.info("Searching style examples for plan...")
            rag_examples = await self.retriever.search(
                document_text[: settings.PLAN_QUERY_CHARS],
                None,
                settings.PLAN_EXAMPLE_COUNT,
            )
            logger.info("Style search complete: %d references.", len(rag_examples))

        logger.info("Plan generation started (detail level: %s).", detail_level)
        try:
            plan = await self.client.async_generate_plan(
                document_text, detail_level, rag_examples
            )
        except Exception as e:
            logger.warning(
                "Plan generation failed (%s). Falling back to the sample plan.", e
            )
            return sample_plan()

        logger.info(
            "Plan generation complete.",
            body_pages=len(plan.plan.body),
            concepts=len(plan.design_concepts),
        )
        return plan
