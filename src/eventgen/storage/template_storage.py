"""
Template Storage

PostgreSQL storage for recurring event templates.
"""
import logging
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage
from ..models.event import EventStatus
from ..models.recurring_template import RecurringEventTemplate, RecurrenceType

logger = logging.getLogger("eventgen.storage.templates")

_SELECT_WITH_VENUE = """
    SELECT re.*, v.name AS venue_name
    FROM recurring_events re
    LEFT JOIN venues v ON re.venue_id = v.id
"""


class TemplateStorage(BaseStorage):
    """Storage for RecurringEventTemplate entities"""

    async def create(self, template: RecurringEventTemplate) -> RecurringEventTemplate:
        """Create a new recurring event template"""
        query = """
            INSERT INTO recurring_events (
                id, title, description, event_type, venue_id,
                recurrence_type, day_of_week, week_of_month, day_of_month,
                event_time, start_date, end_date, generate_weeks_ahead,
                default_image_url, default_status, is_active,
                created_at, updated_at
            )
            VALUES ($1,$2,$3,$4,$5,$6,$7,$8,$9,$10,$11,$12,$13,$14,$15,$16,$17,$18)
        """
        await self.execute(
            query,
            template.id, template.title, template.description, template.event_type,
            template.venue_id,
            template.recurrence_type.value, template.day_of_week,
            template.week_of_month, template.day_of_month,
            template.event_time, template.start_date, template.end_date,
            template.generate_weeks_ahead,
            template.default_image_url, template.default_status.value, template.is_active,
            template.created_at, template.updated_at
        )
        return await self.get_by_id(template.id)

    async def get_by_id(self, template_id: UUID) -> Optional[RecurringEventTemplate]:
        """Get template by ID"""
        row = await self.fetchrow(_SELECT_WITH_VENUE + " WHERE re.id = $1", template_id)
        return self._row_to_template(row) if row else None

    async def list_all(self) -> List[RecurringEventTemplate]:
        """List every template, newest first"""
        rows = await self.fetch(_SELECT_WITH_VENUE + " ORDER BY re.created_at DESC")
        return [self._row_to_template(row) for row in rows]

    async def list_active(self) -> List[RecurringEventTemplate]:
        """Templates due for generation"""
        rows = await self.fetch(
            _SELECT_WITH_VENUE + " WHERE re.is_active = true ORDER BY re.created_at"
        )
        return [self._row_to_template(row) for row in rows]

    async def update(self, template: RecurringEventTemplate) -> Optional[RecurringEventTemplate]:
        """Update template; generated events are left untouched"""
        template.updated_at = datetime.now()
        query = """
            UPDATE recurring_events
            SET title = $2, description = $3, event_type = $4, venue_id = $5,
                recurrence_type = $6, day_of_week = $7, week_of_month = $8, day_of_month = $9,
                event_time = $10, start_date = $11, end_date = $12, generate_weeks_ahead = $13,
                default_image_url = $14, default_status = $15, is_active = $16,
                updated_at = $17
            WHERE id = $1
        """
        result = await self.execute(
            query,
            template.id, template.title, template.description, template.event_type,
            template.venue_id,
            template.recurrence_type.value, template.day_of_week,
            template.week_of_month, template.day_of_month,
            template.event_time, template.start_date, template.end_date,
            template.generate_weeks_ahead,
            template.default_image_url, template.default_status.value, template.is_active,
            template.updated_at
        )
        if result != "UPDATE 1":
            return None
        return await self.get_by_id(template.id)

    async def set_active(self, template_id: UUID, is_active: bool) -> bool:
        """Activate or deactivate a template"""
        query = """
            UPDATE recurring_events
            SET is_active = $2, updated_at = $3
            WHERE id = $1
        """
        result = await self.execute(query, template_id, is_active, datetime.now())
        return result == "UPDATE 1"

    async def delete(self, template_id: UUID) -> bool:
        """Delete template. Its events survive with recurring_event_id set to NULL."""
        result = await self.execute("DELETE FROM recurring_events WHERE id = $1", template_id)
        return result == "DELETE 1"

    def _row_to_template(self, row) -> RecurringEventTemplate:
        """Convert database row to RecurringEventTemplate"""
        return RecurringEventTemplate(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            event_type=row["event_type"],
            venue_id=row["venue_id"],
            venue_name=row["venue_name"],
            recurrence_type=RecurrenceType(row["recurrence_type"]),
            day_of_week=row["day_of_week"],
            week_of_month=row["week_of_month"],
            day_of_month=row["day_of_month"],
            event_time=row["event_time"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            generate_weeks_ahead=row["generate_weeks_ahead"],
            default_image_url=row["default_image_url"],
            default_status=EventStatus(row["default_status"]),
            is_active=row["is_active"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
