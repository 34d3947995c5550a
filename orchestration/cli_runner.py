# orchestration/cli_runner.py
"""Command-line runner for card news generation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

import structlog
from rich.console import Console
from rich.table import Table

from config import RAG_EMBEDDINGS_PATH, RAG_META_PATH
from core.gemini_client import gemini_service
from models import DesignConcept, GeneratedImage, PlanResult
from retrieval import QuantizedVectorStore, StyleRetriever
from storage.file_manager import FileManager
from ui.rich_display import RichDisplayManager
from utils.logging import setup_logging_cardnews

from .card_orchestrator import CardNewsOrchestrator
from .generation_stats import StatKind
from .plan_service import PlanService, build_pages, design_concepts_for

logger = structlog.get_logger(__name__)


@dataclass
class RunOptions:
    """Arguments of a single command-line run."""

    document: str
    detail_level: str = "simple"
    aspect_ratio: str | None = None
    concept_index: int = 0
    regenerate: int | None = None
    feedback: str | None = None


def read_document(path: str) -> str:
    """Read a plain-text document."""
    text = Path(path).read_text(encoding="utf-8")
    if not text.strip():
        raise ValueError(f"Document {path} is empty.")
    return text


def select_concept(
    concepts: list[DesignConcept], index: int
) -> DesignConcept | None:
    if not concepts:
        return None
    if not 0 <= index < len(concepts):
        logger.warning(
            "Concept %d out of range (%d available). Using the first concept.",
            index,
            len(concepts),
        )
        index = 0
    return concepts[index]


def _print_summary(
    plan: PlanResult, images: list[GeneratedImage], paths: list[str]
) -> None:
    table = Table(title="Generated Cards")
    table.add_column("#", justify="right")
    table.add_column("Page")
    table.add_column("Type")
    table.add_column("Result")
    for i, image in enumerate(images, start=1):
        table.add_row(
            str(i),
            image.label,
            image.page_type.value,
            "placeholder" if image.is_fallback else "generated",
        )
    console = Console()
    console.print(table)
    if plan.is_sample:
        console.print("Plan generation was unavailable. The sample plan was used.")
    console.print(f"Saved {len(paths)} file(s).")


async def _run(options: RunOptions) -> list[GeneratedImage]:
    file_manager = FileManager()
    stats = file_manager.load_stats()

    store = QuantizedVectorStore()
    await store.load_from_files_async(RAG_META_PATH, RAG_EMBEDDINGS_PATH)
    retriever = StyleRetriever(store, gemini_service)

    document_text = read_document(options.document)
    stats.record(StatKind.FILES)

    plan = await PlanService(gemini_service, retriever).generate_plan(
        document_text, options.detail_level
    )
    if not plan.is_sample:
        stats.record(StatKind.PLANS)
    concept = select_concept(design_concepts_for(plan), options.concept_index)

    display = RichDisplayManager()
    orchestrator = CardNewsOrchestrator(gemini_service, retriever, display, stats)
    display.start()
    try:
        await orchestrator.start_run(plan, concept, options.aspect_ratio)
        if options.regenerate is not None:
            pages = {page.page_index: page for page in build_pages(plan)}
            page = pages.get(options.regenerate)
            if page is None:
                logger.error(
                    "Page %d does not exist in the plan. Skipping regeneration.",
                    options.regenerate,
                )
            else:
                await orchestrator.enqueue_regeneration(
                    page.page_index, page.page_type, page.label, options.feedback
                )
    finally:
        await display.stop()

    images = orchestrator.generated_images
    paths = await file_manager.save_images(images)
    file_manager.save_stats(stats)
    _print_summary(plan, images, paths)
    return images


def run(options: RunOptions) -> None:
    """Set up logging and run one document through generation."""
    setup_logging_cardnews()
    try:
        asyncio.run(_run_and_close(options))
    except KeyboardInterrupt:
        logger.info("Card news generation interrupted. Shutting down...")
    except Exception as main_err:  # pragma: no cover - entry point catch
        logger.critical(
            "Card news generation encountered an unhandled exception: %s",
            main_err,
            exc_info=True,
        )


async def _run_and_close(options: RunOptions) -> None:
    try:
        await _run(options)
    finally:
        await gemini_service.aclose()
