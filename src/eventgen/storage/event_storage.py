"""
Event Storage

PostgreSQL storage for calendar events, including the idempotency
lookups used by the generator.
"""
import logging
from datetime import date, datetime
from typing import Iterable, Optional, List, Set
from uuid import UUID

import asyncpg

from .base import BaseStorage
from .interfaces import InsertResult
from ..models.event import Event, EventStatus

logger = logging.getLogger("eventgen.storage.events")


class EventStorage(BaseStorage):
    """Storage for Event entities"""

    async def existing_dates(self, template_id: UUID, dates: Iterable[date]) -> Set[date]:
        """Dates among `dates` that already have an event from this template"""
        dates = list(dates)
        if not dates:
            return set()
        query = """
            SELECT event_date FROM events
            WHERE recurring_event_id = $1 AND event_date = ANY($2::date[])
        """
        rows = await self.fetch(query, template_id, dates)
        return {row["event_date"] for row in rows}

    async def insert_many(self, events: List[Event]) -> InsertResult:
        """
        Insert events one row at a time.

        A unique violation on (recurring_event_id, event_date) means a
        concurrent run got there first; that row is reported as skipped.
        Any other database error propagates.
        """
        result = InsertResult()
        if not events:
            return result

        query = """
            INSERT INTO events (
                id, title, description, event_type, venue_id,
                event_date, event_time, image_url, status,
                recurring_event_id, created_at, updated_at
            )
            VALUES ($1,$2,$3,$4,$5,$6,$7,$8,$9,$10,$11,$12)
            RETURNING *
        """
        async with self.acquire() as conn:
            for event in events:
                try:
                    row = await conn.fetchrow(
                        query,
                        event.id, event.title, event.description, event.event_type,
                        event.venue_id, event.event_date, event.event_time,
                        event.image_url, event.status.value,
                        event.source_template_id, event.created_at, event.updated_at
                    )
                except asyncpg.UniqueViolationError:
                    logger.debug(
                        f"Event for template {event.source_template_id} on "
                        f"{event.event_date} already exists, skipping"
                    )
                    result.skipped.append(event)
                    continue
                result.created.append(self._row_to_event(row))
        return result

    async def get_by_id(self, event_id: UUID) -> Optional[Event]:
        """Get event by ID"""
        row = await self.fetchrow("SELECT * FROM events WHERE id = $1", event_id)
        return self._row_to_event(row) if row else None

    async def list_by_template(self, template_id: UUID) -> List[Event]:
        """List events generated from a template"""
        query = """
            SELECT * FROM events
            WHERE recurring_event_id = $1
            ORDER BY event_date
        """
        rows = await self.fetch(query, template_id)
        return [self._row_to_event(row) for row in rows]

    async def list_events(
        self,
        upcoming_from: Optional[date] = None,
        template_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Event]:
        """List events, optionally only from a date onwards or from one template"""
        conditions = []
        params = []
        if upcoming_from is not None:
            params.append(upcoming_from)
            conditions.append(f"event_date >= ${len(params)}")
        if template_id is not None:
            params.append(template_id)
            conditions.append(f"recurring_event_id = ${len(params)}")

        query = "SELECT * FROM events"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY event_date, event_time"
        if limit:
            params.append(limit)
            query += f" LIMIT ${len(params)}"

        rows = await self.fetch(query, *params)
        return [self._row_to_event(row) for row in rows]

    async def update(self, event: Event) -> Optional[Event]:
        """Update an event. Provenance is not editable."""
        event.updated_at = datetime.now()
        query = """
            UPDATE events
            SET title = $2, description = $3, event_type = $4, venue_id = $5,
                event_date = $6, event_time = $7, image_url = $8, status = $9,
                updated_at = $10
            WHERE id = $1
            RETURNING *
        """
        row = await self.fetchrow(
            query,
            event.id, event.title, event.description, event.event_type,
            event.venue_id, event.event_date, event.event_time,
            event.image_url, event.status.value, event.updated_at
        )
        return self._row_to_event(row) if row else None

    async def delete(self, event_id: UUID) -> bool:
        """Delete event"""
        result = await self.execute("DELETE FROM events WHERE id = $1", event_id)
        return result == "DELETE 1"

    def _row_to_event(self, row) -> Event:
        """Convert database row to Event"""
        return Event(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            event_type=row["event_type"],
            venue_id=row["venue_id"],
            event_date=row["event_date"],
            event_time=row["event_time"],
            image_url=row["image_url"],
            status=EventStatus(row["status"]),
            source_template_id=row["recurring_event_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
