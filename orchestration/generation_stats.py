from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class StatKind(str, Enum):
    """Counters kept across runs."""

    FILES = "files"
    PLANS = "plans"
    IMAGES = "images"


@dataclass
class GenerationStats:
    """Accumulate and log how many documents, plans and images were produced."""

    files: int = 0
    plans: int = 0
    images: int = 0

    def record(self, kind: StatKind | str, amount: int = 1) -> None:
        name = kind.value if isinstance(kind, StatKind) else kind
        if name not in {k.value for k in StatKind}:
            logger.warning("Unknown stat '%s' ignored.", name)
            return
        setattr(self, name, getattr(self, name) + amount)
        logger.info(
            "Activity: %s +%s (total %s)", name, amount, getattr(self, name)
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> GenerationStats:
        stats = cls()
        for kind in StatKind:
            value = (data or {}).get(kind.value)
            if isinstance(value, int):
                setattr(stats, kind.value, value)
        return stats
