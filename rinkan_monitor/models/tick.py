"""
Tick state and result models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class MonitorState:
    """Watermark carried from one tick to the next."""

    watermark: Optional[datetime] = None
    # Product codes already seen whose created_at is later than the watermark
    ahead_codes: FrozenSet[str] = frozenset()

    def advance(
        self, candidate: datetime, ahead_codes: Iterable[str] = ()
    ) -> "MonitorState":
        """Return the next state without moving the watermark backwards."""
        watermark = candidate
        if self.watermark is not None and candidate <= self.watermark:
            watermark = self.watermark
        return MonitorState(watermark=watermark, ahead_codes=frozenset(ahead_codes))


class TickOutcome(Enum):
    """Outcome of a single tick."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class TickResult:
    """Summary of one poll-filter-notify cycle."""

    outcome: TickOutcome
    started_at: datetime
    finished_at: datetime
    state: MonitorState
    watermark_before: Optional[datetime]
    pages_fetched: int = 0
    candidates: int = 0
    matched: int = 0
    notified: int = 0
    failed_notifications: List[str] = field(default_factory=list)
    skipped: int = 0
    truncated: bool = False
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == TickOutcome.SUCCESS

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "outcome": self.outcome.value,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "pages_fetched": self.pages_fetched,
            "candidates": self.candidates,
            "matched": self.matched,
            "notified": self.notified,
            "failed_notifications": list(self.failed_notifications),
            "skipped": self.skipped,
            "truncated": self.truncated,
            "error": self.error_message,
            "watermark_before": self.watermark_before.isoformat()
            if self.watermark_before
            else None,
            "watermark_after": self.state.watermark.isoformat()
            if self.state.watermark
            else None,
        }
