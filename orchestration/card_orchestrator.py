# orchestration/card_orchestrator.py
"""Sequential page generation with run-scoped shared state."""

from __future__ import annotations

import asyncio
import itertools
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

import structlog

from config import settings
from core.gemini_client import DesignRequest
from models import (
    DesignConcept,
    GeneratedImage,
    GenerateTask,
    GenerationTask,
    PageType,
    PlanResult,
    RegenerateTask,
)
from utils.placeholder import create_placeholder_image

from .generation_stats import GenerationStats, StatKind
from .models import ResolvedReferences, RunContext
from .plan_service import build_pages, page_content_for
from .task_queue import TaskQueue

if TYPE_CHECKING:  # pragma: no cover - type hints
    from core.gemini_client import GeminiService
    from retrieval import StyleRetriever
    from ui.rich_display import RichDisplayManager

logger = structlog.get_logger(__name__)


class OrchestratorState(Enum):
    """States of the queue drain loop."""

    IDLE = auto()
    DRAINING = auto()


class NoActiveRunError(RuntimeError):
    """Raised when a regeneration is requested before any run was started."""


class CardNewsOrchestrator:
    """Drain the task queue one page at a time.

    Every task is processed against the :class:`RunContext` of the run it was
    queued in. ``pause`` and ``clear`` stop the next task from starting but do
    not cancel a request already in flight.
    """

    def __init__(
        self,
        client: GeminiService,
        retriever: StyleRetriever,
        display: RichDisplayManager | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        self.client = client
        self.retriever = retriever
        self.display = display
        self.stats = stats or GenerationStats()
        self.queue = TaskQueue()
        self.plan: PlanResult | None = None
        self.context: RunContext | None = None
        self._drain_ids = itertools.count(1)
        self._active_drain: int | None = None
        self._worker_idle = asyncio.Event()
        self._worker_idle.set()
        self._completed_this_drain = 0

    @property
    def state(self) -> OrchestratorState:
        if self._active_drain is not None:
            return OrchestratorState.DRAINING
        return OrchestratorState.IDLE

    @property
    def generated_images(self) -> list[GeneratedImage]:
        if self.context is None:
            return []
        return list(self.context.generated_images)

    async def start_run(
        self,
        plan: PlanResult,
        concept: DesignConcept | None = None,
        aspect_ratio: str | None = None,
    ) -> list[GeneratedImage]:
        """Generate every page of ``plan`` and return the records of the run."""
        self.pause()
        self.queue.clear()
        self.plan = plan
        context = RunContext(
            tone=plan.estimated_tone or settings.DEFAULT_TONE,
            concept=concept,
            aspect_ratio=aspect_ratio or settings.DEFAULT_ASPECT_RATIO,
        )
        self.context = context

        pages = build_pages(plan)
        logger.info(
            "Generation run started.",
            pages=len(pages),
            tone=context.tone,
            concept=concept.name if concept else None,
            aspect_ratio=context.aspect_ratio,
        )
        for page in pages:
            self.queue.enqueue(
                GenerateTask(
                    page_index=page.page_index,
                    page_type=page.page_type,
                    label=page.label,
                    content=page.content,
                )
            )

        await self.process_queue()
        return list(context.generated_images)

    async def enqueue_regeneration(
        self,
        page_index: int,
        page_type: PageType,
        label: str,
        feedback: str | None = None,
    ) -> RegenerateTask:
        """Queue a page for regeneration and drain if no drain is running."""
        if self.plan is None or self.context is None:
            raise NoActiveRunError("Start a generation run before regenerating pages.")

        task = RegenerateTask(
            page_index=page_index,
            page_type=page_type,
            label=label,
            content=page_content_for(self.plan, page_index, page_type),
            feedback=feedback or None,
        )
        self.queue.enqueue(task)
        await self.process_queue()
        return task

    def pause(self) -> None:
        """Stop the drain loop before its next task."""
        if self._active_drain is not None:
            logger.info("Queue paused.", remaining=len(self.queue))
        self._active_drain = None

    def clear(self) -> None:
        """Drop every queued task."""
        self.pause()
        self.queue.clear()
        logger.info("Queue cleared.")

    async def process_queue(self) -> None:
        """Run tasks until none is pending. Re-entrant calls return immediately."""
        if self._active_drain is not None:
            return
        drain_id = next(self._drain_ids)
        self._active_drain = drain_id
        self._completed_this_drain = 0
        try:
            # A paused or cleared drain may still have a request in flight.
            await self._worker_idle.wait()
            while self._active_drain == drain_id:
                task = self.queue.peek_next_pending()
                if task is None:
                    break
                context = self.context
                self._worker_idle.clear()
                try:
                    await self._process_task(task, context)
                finally:
                    self._worker_idle.set()
                removed = self.queue.compact()
                if self._active_drain != drain_id:
                    break
                self._completed_this_drain += 1
                logger.debug(
                    "Queue compacted.", removed=removed, remaining=len(self.queue)
                )
                if self.queue.peek_next_pending() is not None:
                    await asyncio.sleep(settings.INTER_TASK_DELAY_SECONDS)
        finally:
            if self._active_drain == drain_id:
                self._active_drain = None
                self._update_display(step="Idle")
                logger.info("Queue drained.", processed=self._completed_this_drain)

    async def _resolve_references(
        self, task: GenerationTask, context: RunContext
    ) -> ResolvedReferences:
        if task.page_type == PageType.BODY and context.shared_body_refs is not None:
            return ResolvedReferences(urls=list(context.shared_body_refs), reused=True)

        query = settings.REFERENCE_QUERY_TEMPLATE.format(
            tone=context.tone, page_type=task.page_type.value
        )
        items = await self.retriever.search(
            query, task.page_type.value, settings.REFERENCE_SAMPLE_SIZE
        )
        urls = [item.file_url for item in items if item.file_url]
        if task.page_type == PageType.BODY and context.set_shared_body_refs(urls):
            logger.info("Shared body references set.", count=len(urls))

        palette_source = next(
            (
                item.color_palette_feel
                for item in items
                if item.file_url and item.color_palette_feel
            ),
            None,
        )
        return ResolvedReferences(urls=urls, palette_source=palette_source)

    async def _process_task(
        self, task: GenerationTask, context: RunContext | None
    ) -> None:
        if context is None:
            raise NoActiveRunError(f"Task {task.id} has no run to belong to.")

        self.queue.start(task)
        self._update_display(current_page=task.label, step=f"{task.kind.value} started")
        logger.info("Processing %s - %s", task.kind.value, task.label, task_id=task.id)

        try:
            references = await self._resolve_references(task, context)
            logger.info(
                "References for %s: %d %s.",
                task.label,
                len(references.urls),
                "reused" if references.reused else "searched",
                task_id=task.id,
            )
            image_url = await self.client.async_generate_design(
                DesignRequest(
                    page_type=task.page_type.value,
                    content=task.content,
                    concept=context.concept,
                    aspect_ratio=context.aspect_ratio,
                    feedback=task.feedback,
                    ref_images=references.urls,
                    cover_palette=context.cover_palette,
                )
            )
        except Exception as e:
            logger.error(
                "Generation failed for %s: %s. Using a placeholder image.",
                task.label,
                e,
                task_id=task.id,
            )
            self.queue.advance(task)
            placeholder = create_placeholder_image(
                task.page_type.value, task.label, context.aspect_ratio
            )
            context.generated_images.append(
                self._record(task, placeholder, is_fallback=True)
            )
            self._update_display(step=f"{task.label} failed (placeholder used)")
            return

        self.queue.advance(task)
        if task.page_type == PageType.COVER and references.palette_source:
            if context.set_cover_palette(references.palette_source):
                logger.info("Cover palette set.", palette=references.palette_source)
        context.generated_images.append(self._record(task, image_url))
        self.stats.record(StatKind.IMAGES)
        self._update_display(step=f"{task.label} complete")
        logger.info("%s complete.", task.label, task_id=task.id)

    @staticmethod
    def _record(
        task: GenerationTask, url: str, is_fallback: bool = False
    ) -> GeneratedImage:
        return GeneratedImage(
            id=task.id,
            url=url,
            page_type=task.page_type,
            label=task.label,
            is_fallback=is_fallback,
        )

    def _update_display(self, **kwargs: Any) -> None:
        if self.display is None:
            return
        self.display.update(
            queued=len(self.queue),
            completed=self._completed_this_drain,
            total=self._completed_this_drain + len(self.queue),
            request_count=getattr(self.client, "request_count", None),
            **kwargs,
        )
