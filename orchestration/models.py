# orchestration/models.py
"""Shared dataclasses for orchestration services."""

from dataclasses import dataclass, field

from models import DesignConcept, GeneratedImage


@dataclass
class RunContext:
    """State shared between the pages of one generation run.

    Created fresh for every run and passed to each task explicitly.
    """

    tone: str
    concept: DesignConcept | None = None
    aspect_ratio: str = "4:5"
    cover_palette: str | None = None
    shared_body_refs: list[str] | None = None
    generated_images: list[GeneratedImage] = field(default_factory=list)

    def set_cover_palette(self, palette: str) -> bool:
        """Store the cover palette unless one was already set for this run."""
        if self.cover_palette is not None or not palette:
            return False
        self.cover_palette = palette
        return True

    def set_shared_body_refs(self, urls: list[str]) -> bool:
        if self.shared_body_refs is not None or not urls:
            return False
        self.shared_body_refs = list(urls)
        return True


@dataclass
class ResolvedReferences:
    """Reference image URLs picked for a task and the items they came from."""

    urls: list[str] = field(default_factory=list)
    palette_source: str | None = None
    reused: bool = False
