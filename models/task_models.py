# models/task_models.py
"""Queue task records and generated image records."""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from .card_models import PageType

_task_ids = itertools.count(1)


def next_task_id() -> str:
    """Return a process-unique task identifier."""
    return f"task-{int(time.time() * 1000)}-{next(_task_ids)}"


class TaskKind(str, Enum):
    GENERATE = "GENERATE"
    REGENERATE = "REGENERATE"


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass
class BaseTask:
    """Fields shared by every queued page task."""

    page_index: int
    page_type: PageType
    label: str
    content: Any = None
    id: str = ""
    status: TaskStatus = TaskStatus.PENDING
    added_at: datetime | None = None


@dataclass
class GenerateTask(BaseTask):
    """First generation of a page in a run."""

    kind: TaskKind = field(default=TaskKind.GENERATE, init=False)

    @property
    def feedback(self) -> str | None:
        return None


@dataclass
class RegenerateTask(BaseTask):
    """Re-generation of a single page with optional user feedback."""

    feedback: str | None = None
    kind: TaskKind = field(default=TaskKind.REGENERATE, init=False)


GenerationTask = Union[GenerateTask, RegenerateTask]


@dataclass(frozen=True)
class GeneratedImage:
    """Image produced for a task. Mirrors the source task id."""

    id: str
    url: str
    page_type: PageType
    label: str
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    is_fallback: bool = False

