from datetime import date, datetime, time
from types import SimpleNamespace
from typing import Callable, Dict, Iterable, List, Set
from uuid import UUID

import pytest

from eventgen.models.event import Event
from eventgen.models.recurring_template import RecurringEventTemplate, RecurrenceType
from eventgen.services.generation_service import GenerationService
from eventgen.services.scheduler_service import SchedulerService
from eventgen.services.template_service import TemplateService
from eventgen.storage.interfaces import InsertResult

# Monday
TODAY = date(2024, 1, 1)
NOW = datetime(2024, 1, 1, 9, 30)


class InMemoryTemplateStore:
    """Template store backed by a dict, shaped like TemplateStorage"""

    def __init__(self, templates: Iterable[RecurringEventTemplate] = ()):
        self.templates: Dict[UUID, RecurringEventTemplate] = {t.id: t for t in templates}

    def add(self, template: RecurringEventTemplate) -> RecurringEventTemplate:
        self.templates[template.id] = template
        return template

    async def create(self, template):
        self.templates[template.id] = template
        return template

    async def get_by_id(self, template_id):
        return self.templates.get(template_id)

    async def list_all(self):
        return sorted(self.templates.values(), key=lambda t: t.created_at, reverse=True)

    async def list_active(self):
        return [t for t in self.templates.values() if t.is_active]

    async def update(self, template):
        if template.id not in self.templates:
            return None
        template.updated_at = datetime.now()
        self.templates[template.id] = template
        return template

    async def set_active(self, template_id, is_active):
        template = self.templates.get(template_id)
        if template is None:
            return False
        template.is_active = is_active
        return True

    async def delete(self, template_id):
        return self.templates.pop(template_id, None) is not None


class InMemoryEventStore:
    """Event store enforcing the (source_template_id, event_date) key like the unique index"""

    def __init__(self):
        self.events: Dict[UUID, Event] = {}
        self.existing_calls = 0
        self.insert_calls = 0

    def _keys(self) -> Set:
        return {
            (e.source_template_id, e.event_date)
            for e in self.events.values()
            if e.source_template_id is not None
        }

    async def existing_dates(self, template_id, dates):
        self.existing_calls += 1
        keys = self._keys()
        return {d for d in dates if (template_id, d) in keys}

    async def insert_many(self, events):
        self.insert_calls += 1
        result = InsertResult()
        for event in events:
            if (event.source_template_id, event.event_date) in self._keys():
                result.skipped.append(event)
                continue
            self.events[event.id] = event
            result.created.append(event)
        return result

    async def get_by_id(self, event_id):
        return self.events.get(event_id)

    async def list_by_template(self, template_id):
        return self.for_template(template_id)

    async def list_events(self, upcoming_from=None, template_id=None, limit=None):
        events = sorted(self.events.values(), key=lambda e: e.starts_at)
        if upcoming_from is not None:
            events = [e for e in events if e.event_date >= upcoming_from]
        if template_id is not None:
            events = [e for e in events if e.source_template_id == template_id]
        return events[:limit] if limit else events

    async def update(self, event):
        if event.id not in self.events:
            return None
        self.events[event.id] = event
        return event

    async def delete(self, event_id):
        return self.events.pop(event_id, None) is not None

    def for_template(self, template_id) -> List[Event]:
        return sorted(
            (e for e in self.events.values() if e.source_template_id == template_id),
            key=lambda e: e.event_date,
        )

    def dates_for(self, template_id) -> List[date]:
        return [e.event_date for e in self.for_template(template_id)]


@pytest.fixture
def make_template() -> Callable[..., RecurringEventTemplate]:
    """Factory for a valid weekly Tuesday 19:00 template starting on TODAY"""

    def _make(**overrides) -> RecurringEventTemplate:
        fields = dict(
            title="Pub Quiz",
            description="General knowledge quiz night",
            event_type="quiz",
            recurrence_type=RecurrenceType.WEEKLY,
            day_of_week=2,
            event_time=time(19, 0),
            start_date=TODAY,
            generate_weeks_ahead=4,
        )
        fields.update(overrides)
        return RecurringEventTemplate(**fields)

    return _make


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def generation_service(template_store, event_store) -> GenerationService:
    return GenerationService(template_store, event_store, clock=lambda: NOW)


@pytest.fixture
def template_service(template_store, event_store, generation_service) -> TemplateService:
    return TemplateService(template_store, event_store, generation_service)


@pytest.fixture
def scheduler_service(template_store, generation_service) -> SchedulerService:
    return SchedulerService(template_store, generation_service, max_workers=2)


@pytest.fixture
def fake_engine(template_store, event_store, generation_service, template_service, scheduler_service):
    """Stand-in for EngineService wired to in-memory stores"""

    async def _is_ready():
        return True

    return SimpleNamespace(
        template_storage=template_store,
        event_storage=event_store,
        generation_service=generation_service,
        template_service=template_service,
        scheduler_service=scheduler_service,
        is_ready=_is_ready,
    )
