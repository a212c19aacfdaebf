"""
Store Contracts

Protocols the generation engine depends on. The PostgreSQL storages
implement them; tests substitute in-memory stores.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Protocol, Set
from uuid import UUID

from ..models.event import Event
from ..models.recurring_template import RecurringEventTemplate


@dataclass
class InsertResult:
    """Outcome of a bulk insert"""
    created: List[Event] = field(default_factory=list)
    skipped: List[Event] = field(default_factory=list)   # rejected by the uniqueness constraint


class TemplateStore(Protocol):
    """Source of recurring event templates."""

    async def get_by_id(self, template_id: UUID) -> Optional[RecurringEventTemplate]:
        ...

    async def list_active(self) -> List[RecurringEventTemplate]:
        """Templates the periodic job should generate for."""
        ...


class EventStore(Protocol):
    """Sink for generated events, keyed by (source_template_id, event_date)."""

    async def existing_dates(self, template_id: UUID, dates: Iterable[date]) -> Set[date]:
        """Return the subset of `dates` already materialized for the template.

        Must be answered by a single query against the uniqueness index.
        """
        ...

    async def insert_many(self, events: List[Event]) -> InsertResult:
        """Insert events; rows violating the uniqueness constraint are reported as skipped."""
        ...
