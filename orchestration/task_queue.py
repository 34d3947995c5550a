# orchestration/task_queue.py
"""Ordered queue of page generation tasks."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone

import structlog

from models import GenerationTask, TaskStatus, next_task_id

logger = structlog.get_logger(__name__)


class QueueInvariantError(RuntimeError):
    """Raised when a second task would be processing at the same time."""


class TaskQueue:
    """FIFO task list with per-task status. At most one task is processing."""

    def __init__(self) -> None:
        self._tasks: list[GenerationTask] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[GenerationTask]:
        return iter(list(self._tasks))

    @property
    def tasks(self) -> list[GenerationTask]:
        return list(self._tasks)

    @property
    def processing_count(self) -> int:
        return sum(1 for t in self._tasks if t.status == TaskStatus.PROCESSING)

    def enqueue(self, task: GenerationTask) -> GenerationTask:
        task.id = next_task_id()
        task.status = TaskStatus.PENDING
        task.added_at = datetime.now(timezone.utc)
        self._tasks.append(task)
        logger.info(
            "Queued %s - %s", task.kind.value, task.label, task_id=task.id
        )
        return task

    def peek_next_pending(self) -> GenerationTask | None:
        for task in self._tasks:
            if task.status == TaskStatus.PENDING:
                return task
        return None

    def start(self, task: GenerationTask) -> None:
        """Mark ``task`` as processing."""
        if any(
            t.status == TaskStatus.PROCESSING and t is not task for t in self._tasks
        ):
            raise QueueInvariantError(
                f"Cannot start {task.id}: another task is already processing."
            )
        task.status = TaskStatus.PROCESSING

    def advance(self, task: GenerationTask) -> None:
        task.status = TaskStatus.COMPLETED

    def compact(self) -> int:
        """Drop completed tasks. Returns how many were removed."""
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.status != TaskStatus.COMPLETED]
        return before - len(self._tasks)

    def clear(self) -> None:
        self._tasks = []
