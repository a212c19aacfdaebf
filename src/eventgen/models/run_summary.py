"""
Run Summary Models

Results of one template generation run and of one periodic sweep.
"""
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from .event import Event


@dataclass
class RunSummary:
    """Outcome of generating events for a single template"""
    template_id: Optional[UUID] = None
    created: int = 0
    skipped_existing: int = 0
    events: List[Event] = field(default_factory=list)
    error: Optional[str] = None                         # set by the periodic trigger only

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self, include_events: bool = False) -> dict:
        data = {
            "template_id": str(self.template_id) if self.template_id else None,
            "created": self.created,
            "skipped_existing": self.skipped_existing,
            "error": self.error,
        }
        if include_events:
            data["events"] = [e.to_dict() for e in self.events]
        return data


@dataclass
class SchedulerRunReport:
    """Aggregate of one periodic sweep over all active templates"""
    summaries: List[RunSummary] = field(default_factory=list)

    @property
    def templates_processed(self) -> int:
        return len(self.summaries)

    @property
    def templates_failed(self) -> int:
        return sum(1 for s in self.summaries if s.failed)

    @property
    def total_created(self) -> int:
        return sum(s.created for s in self.summaries)

    @property
    def total_skipped(self) -> int:
        return sum(s.skipped_existing for s in self.summaries)

    def to_dict(self) -> dict:
        return {
            "templates_processed": self.templates_processed,
            "templates_failed": self.templates_failed,
            "total_created": self.total_created,
            "total_skipped": self.total_skipped,
            "summaries": [s.to_dict() for s in self.summaries],
        }
