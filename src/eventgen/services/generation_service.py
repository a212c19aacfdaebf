"""
Generation Service

Turns a recurring event template into newly persisted events.
Runs are idempotent: matching is by (template, date) existence, so
re-running never duplicates or rewrites events.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from ..errors import TemplateNotFoundError
from ..models.event import Event
from ..models.recurrence import template_occurrences, validate_template
from ..models.recurring_template import RecurringEventTemplate
from ..models.run_summary import RunSummary
from ..storage.interfaces import EventStore, TemplateStore

logger = logging.getLogger("eventgen.services.generation")


class GenerationService:
    """Materializes template occurrences into the events table"""

    def __init__(
        self,
        template_store: TemplateStore,
        event_store: EventStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.template_store = template_store
        self.event_store = event_store
        self._clock = clock or datetime.now

    async def generate(
        self,
        template: RecurringEventTemplate,
        today: Optional[date] = None,
    ) -> RunSummary:
        """
        Generate the missing events of a template inside its rolling window.

        - Inactive templates return an empty summary without touching the stores.
        - A malformed template raises TemplateValidationError before any insert.
        - Dates already materialized, or lost to a concurrent insert, count as
          skipped_existing.
        """
        summary = RunSummary(template_id=template.id)

        if not template.is_active:
            logger.info(f"Template {template.id} ('{template.title}') is inactive, nothing to generate")
            return summary

        rule = validate_template(template)

        now = self._clock()
        window_start, window_end = self.generation_window(template, today or now.date())
        candidates = list(template_occurrences(template, window_start, window_end, rule))

        if not candidates:
            logger.info(
                f"Template {template.id} ('{template.title}') has no occurrences "
                f"in [{window_start}, {window_end})"
            )
            return summary

        existing = await self.event_store.existing_dates(template.id, candidates)
        new_events = [
            self._build_event(template, event_date, now)
            for event_date in candidates
            if event_date not in existing
        ]

        result = await self.event_store.insert_many(new_events)
        if result.skipped:
            logger.debug(
                f"Template {template.id}: {len(result.skipped)} event(s) were inserted "
                f"concurrently by another run"
            )

        summary.created = len(result.created)
        summary.skipped_existing = len(existing) + len(result.skipped)
        summary.events = result.created

        logger.info(
            f"Generated events for '{template.title}' ({rule.describe()}): "
            f"created={summary.created}, skipped_existing={summary.skipped_existing}, "
            f"window=[{window_start}, {window_end})"
        )
        return summary

    async def generate_by_id(self, template_id: UUID, today: Optional[date] = None) -> RunSummary:
        """Load a template and generate its events"""
        template = await self.template_store.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return await self.generate(template, today=today)

    @staticmethod
    def generation_window(template: RecurringEventTemplate, today: date) -> Tuple[date, date]:
        """Half-open window [today, today + generate_weeks_ahead weeks), clipped by end_date"""
        window_end = today + timedelta(weeks=template.generate_weeks_ahead)
        if template.end_date is not None:
            window_end = min(window_end, template.end_date)
        return today, window_end

    @staticmethod
    def _build_event(template: RecurringEventTemplate, event_date: date, now: datetime) -> Event:
        """Copy template metadata into a new event for one occurrence"""
        return Event(
            title=template.title,
            description=template.description,
            event_type=template.event_type,
            venue_id=template.venue_id,
            event_date=event_date,
            event_time=template.event_time,
            image_url=template.default_image_url,
            status=template.default_status,
            source_template_id=template.id,
            created_at=now,
            updated_at=now,
        )


def occurrence_preview(
    template: RecurringEventTemplate,
    today: date,
) -> List[datetime]:
    """Start times the next run would consider for a template, ignoring what exists"""
    rule = validate_template(template)
    window_start, window_end = GenerationService.generation_window(template, today)
    return [
        datetime.combine(d, template.event_time)
        for d in template_occurrences(template, window_start, window_end, rule)
    ]
