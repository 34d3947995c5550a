"""Central package for card news data models."""

from .card_models import (
    CardPage,
    CardPlan,
    DesignConcept,
    PageType,
    PlanResult,
    QuantizedEmbedding,
    ReferenceItem,
)
from .task_models import (
    GeneratedImage,
    GenerateTask,
    GenerationTask,
    RegenerateTask,
    TaskKind,
    TaskStatus,
    next_task_id,
)

__all__ = [
    "CardPage",
    "CardPlan",
    "DesignConcept",
    "PageType",
    "PlanResult",
    "QuantizedEmbedding",
    "ReferenceItem",
    "GeneratedImage",
    "GenerateTask",
    "GenerationTask",
    "RegenerateTask",
    "TaskKind",
    "TaskStatus",
    "next_task_id",
]
