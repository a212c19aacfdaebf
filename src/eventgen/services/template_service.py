"""
Template Service

Business logic for recurring event template management and the
manual "Generate Now" action.
"""
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..errors import TemplateNotFoundError, TemplateValidationError
from ..models.event import Event, EventStatus
from ..models.recurrence import validate_template
from ..models.recurring_template import RecurringEventTemplate, RecurrenceType
from ..models.run_summary import RunSummary
from ..storage.event_storage import EventStorage
from ..storage.template_storage import TemplateStorage
from .generation_service import GenerationService, occurrence_preview

logger = logging.getLogger("eventgen.services.templates")

EDITABLE_FIELDS = frozenset({
    "title", "description", "event_type", "venue_id",
    "recurrence_type", "day_of_week", "week_of_month", "day_of_month",
    "event_time", "start_date", "end_date", "generate_weeks_ahead",
    "default_image_url", "default_status", "is_active",
})

# Columns declared NOT NULL
REQUIRED_FIELDS = frozenset({
    "title", "recurrence_type", "event_time", "start_date",
    "generate_weeks_ahead", "default_status", "is_active",
})


class TemplateService:
    """Service for recurring event template operations"""

    def __init__(
        self,
        template_storage: TemplateStorage,
        event_storage: EventStorage,
        generation_service: GenerationService,
        default_weeks_ahead: int = 12,
    ):
        self.storage = template_storage
        self.event_storage = event_storage
        self.generation_service = generation_service
        self.default_weeks_ahead = default_weeks_ahead

    async def create_template(self, **fields: Any) -> RecurringEventTemplate:
        """
        Create a recurring event template.

        Raises TemplateValidationError when the recurrence fields do not
        form exactly one valid addressing mode.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        fields = {k: v for k, v in fields.items() if v is not None}
        fields.setdefault("generate_weeks_ahead", self.default_weeks_ahead)
        template = RecurringEventTemplate(**fields)
        self._normalize(template)
        validate_template(template)

        created = await self.storage.create(template)
        logger.info(
            f"Created {template.recurrence_type.value} template '{template.title}' "
            f"starting {template.start_date}"
        )
        return created

    async def get_template(self, template_id: UUID) -> Optional[RecurringEventTemplate]:
        """Get template by ID"""
        return await self.storage.get_by_id(template_id)

    async def list_templates(self) -> List[RecurringEventTemplate]:
        """List all templates"""
        return await self.storage.list_all()

    async def update_template(
        self,
        template_id: UUID,
        changes: Dict[str, Any],
    ) -> RecurringEventTemplate:
        """
        Apply field changes to a template.

        Only keys present in `changes` are touched, so an explicit None clears
        a field. Already generated events are never rewritten; the new values
        apply to future runs only.
        """
        template = await self.storage.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        for name in sorted(REQUIRED_FIELDS & set(changes)):
            if changes[name] is None:
                raise TemplateValidationError(name, "cannot be null")

        template = replace(template, **changes)
        self._normalize(template)
        validate_template(template)

        updated = await self.storage.update(template)
        if updated is None:
            raise TemplateNotFoundError(template_id)
        logger.info(f"Updated template {template_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return updated

    async def set_active(self, template_id: UUID, is_active: bool) -> RecurringEventTemplate:
        """Pause or resume generation; history is kept either way"""
        if not await self.storage.set_active(template_id, is_active):
            raise TemplateNotFoundError(template_id)
        logger.info(f"Template {template_id} {'activated' if is_active else 'deactivated'}")
        return await self.storage.get_by_id(template_id)

    async def delete_template(self, template_id: UUID) -> bool:
        """Delete template; generated events stay on the calendar"""
        deleted = await self.storage.delete(template_id)
        if deleted:
            logger.info(f"Deleted template {template_id}, generated events kept")
        return deleted

    async def generate_now(self, template_id: UUID) -> RunSummary:
        """Manual trigger: generate one template's events right away"""
        return await self.generation_service.generate_by_id(template_id)

    async def list_generated_events(self, template_id: UUID) -> List[Event]:
        """Events produced by a template that still reference it"""
        return await self.event_storage.list_by_template(template_id)

    async def preview(self, template_id: UUID, today: Optional[date] = None) -> List[datetime]:
        """Start times the next run would target"""
        template = await self.storage.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return occurrence_preview(template, today or date.today())

    @staticmethod
    def _normalize(template: RecurringEventTemplate):
        """Coerce raw values and drop fields the recurrence type ignores"""
        try:
            template.recurrence_type = RecurrenceType(template.recurrence_type)
        except ValueError:
            raise TemplateValidationError(
                "recurrence_type", f"unsupported value {template.recurrence_type!r}"
            )
        try:
            template.default_status = EventStatus(template.default_status)
        except ValueError:
            raise TemplateValidationError(
                "default_status", f"unsupported value {template.default_status!r}"
            )
        if template.recurrence_type != RecurrenceType.MONTHLY:
            template.week_of_month = None
            template.day_of_month = None
