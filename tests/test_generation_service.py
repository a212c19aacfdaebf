from datetime import date, time
from uuid import uuid4

import pytest

from eventgen.errors import TemplateNotFoundError, TemplateValidationError
from eventgen.models.event import Event, EventStatus
from eventgen.models.recurring_template import RecurrenceType
from eventgen.services.generation_service import GenerationService, occurrence_preview

from .conftest import NOW, TODAY, InMemoryEventStore


class RacingEventStore(InMemoryEventStore):
    """Another run inserts `race_date` between the existence check and the insert"""

    def __init__(self, race_date):
        super().__init__()
        self.race_date = race_date

    async def existing_dates(self, template_id, dates):
        found = await super().existing_dates(template_id, dates)
        await super().insert_many([
            _competing_event(template_id, self.race_date)
        ])
        return found


def _competing_event(template_id, event_date):
    return Event(title="from another run", source_template_id=template_id, event_date=event_date)


class FailingEventStore(InMemoryEventStore):
    async def existing_dates(self, template_id, dates):
        raise ConnectionError("database unavailable")


@pytest.mark.asyncio
async def test_generate_creates_events_in_window(generation_service, event_store, make_template):
    template = make_template()

    summary = await generation_service.generate(template, today=TODAY)

    assert summary.template_id == template.id
    assert summary.created == 4
    assert summary.skipped_existing == 0
    assert event_store.dates_for(template.id) == [
        date(2024, 1, 2), date(2024, 1, 9), date(2024, 1, 16), date(2024, 1, 23)
    ]


@pytest.mark.asyncio
async def test_generate_is_idempotent(generation_service, event_store, make_template):
    template = make_template()

    first = await generation_service.generate(template, today=TODAY)
    second = await generation_service.generate(template, today=TODAY)

    assert first.created == 4
    assert second.created == 0
    assert second.skipped_existing == 4
    assert second.events == []
    assert len(event_store.events) == 4


@pytest.mark.asyncio
async def test_generated_events_copy_template_metadata(generation_service, event_store, make_template):
    venue_id = uuid4()
    template = make_template(
        venue_id=venue_id,
        event_time=time(20, 30),
        default_image_url="/uploads/images/quiz.jpg",
        default_status=EventStatus.SCHEDULED,
        generate_weeks_ahead=1,
    )

    summary = await generation_service.generate(template, today=TODAY)

    [event] = summary.events
    assert event.title == "Pub Quiz"
    assert event.description == "General knowledge quiz night"
    assert event.event_type == "quiz"
    assert event.venue_id == venue_id
    assert event.event_time == time(20, 30)
    assert event.starts_at.isoformat() == "2024-01-02T20:30:00"
    assert event.image_url == "/uploads/images/quiz.jpg"
    assert event.status == EventStatus.SCHEDULED
    assert event.source_template_id == template.id
    assert event.created_at == NOW
    assert event.updated_at == NOW


@pytest.mark.asyncio
async def test_window_growth_only_adds_the_new_tail(generation_service, event_store, make_template):
    template = make_template(generate_weeks_ahead=4)
    first = await generation_service.generate(template, today=TODAY)
    original = {e.id: e.event_date for e in first.events}

    # Admin edits one generated event, then widens the window
    edited = first.events[0]
    edited.title = "Pub Quiz - Christmas Special"
    template.generate_weeks_ahead = 12

    second = await generation_service.generate(template, today=TODAY)

    assert second.created == 8
    assert second.skipped_existing == 4
    assert min(e.event_date for e in second.events) == date(2024, 1, 30)
    assert len(event_store.events) == 12
    for event_id, event_date in original.items():
        assert event_store.events[event_id].event_date == event_date
    assert event_store.events[edited.id].title == "Pub Quiz - Christmas Special"


@pytest.mark.asyncio
async def test_template_edits_do_not_rewrite_existing_events(generation_service, event_store, make_template):
    template = make_template()
    await generation_service.generate(template, today=TODAY)

    template.title = "Quiz Night"
    template.event_time = time(21, 0)
    summary = await generation_service.generate(template, today=TODAY)

    assert summary.created == 0
    assert {e.title for e in event_store.events.values()} == {"Pub Quiz"}
    assert {e.event_time for e in event_store.events.values()} == {time(19, 0)}


@pytest.mark.asyncio
async def test_deactivated_template_is_a_true_noop(generation_service, event_store, make_template):
    template = make_template(generate_weeks_ahead=10)
    await generation_service.generate(template, today=TODAY)
    assert len(event_store.events) == 10
    calls_before = (event_store.existing_calls, event_store.insert_calls)

    template.is_active = False
    summary = await generation_service.generate(template, today=TODAY)

    assert summary.created == 0
    assert summary.skipped_existing == 0
    assert (event_store.existing_calls, event_store.insert_calls) == calls_before
    # History stays and remains editable
    assert len(event_store.for_template(template.id)) == 10
    event = event_store.for_template(template.id)[0]
    event.status = EventStatus.CANCELLED
    assert await event_store.update(event) is event


@pytest.mark.asyncio
async def test_malformed_template_fails_before_any_store_call(generation_service, event_store, make_template):
    template = make_template(recurrence_type=RecurrenceType.MONTHLY, day_of_month=15, week_of_month=2)

    with pytest.raises(TemplateValidationError) as exc_info:
        await generation_service.generate(template, today=TODAY)

    assert exc_info.value.field == "week_of_month"
    assert event_store.existing_calls == 0
    assert event_store.insert_calls == 0
    assert event_store.events == {}


@pytest.mark.asyncio
async def test_constraint_race_counts_as_skipped(template_store, make_template):
    template = make_template()
    store = RacingEventStore(race_date=date(2024, 1, 9))
    service = GenerationService(template_store, store, clock=lambda: NOW)

    summary = await service.generate(template, today=TODAY)

    assert summary.created == 3
    assert summary.skipped_existing == 1
    assert date(2024, 1, 9) not in [e.event_date for e in summary.events]
    assert len(store.for_template(template.id)) == 4


@pytest.mark.asyncio
async def test_store_failure_propagates(template_store, make_template):
    service = GenerationService(template_store, FailingEventStore(), clock=lambda: NOW)

    with pytest.raises(ConnectionError):
        await service.generate(make_template(), today=TODAY)


@pytest.mark.asyncio
async def test_window_clipped_by_end_date(generation_service, event_store, make_template):
    template = make_template(generate_weeks_ahead=12, end_date=date(2024, 1, 16))

    summary = await generation_service.generate(template, today=TODAY)

    assert summary.created == 2
    assert event_store.dates_for(template.id) == [date(2024, 1, 2), date(2024, 1, 9)]


@pytest.mark.asyncio
async def test_no_occurrences_skips_the_stores(generation_service, event_store, make_template):
    template = make_template(start_date=date(2023, 1, 3), end_date=date(2023, 12, 1))

    summary = await generation_service.generate(template, today=TODAY)

    assert (summary.created, summary.skipped_existing) == (0, 0)
    assert event_store.existing_calls == 0


@pytest.mark.asyncio
async def test_future_start_date_limits_window(generation_service, event_store, make_template):
    template = make_template(start_date=date(2024, 1, 20), generate_weeks_ahead=4)

    await generation_service.generate(template, today=TODAY)

    assert event_store.dates_for(template.id) == [date(2024, 1, 23)]


@pytest.mark.asyncio
async def test_monthly_fixed_day_generation(generation_service, event_store, make_template):
    template = make_template(
        recurrence_type=RecurrenceType.MONTHLY,
        day_of_week=None,
        day_of_month=31,
        generate_weeks_ahead=17,
    )

    summary = await generation_service.generate(template, today=TODAY)

    assert summary.created == 2
    assert event_store.dates_for(template.id) == [date(2024, 1, 31), date(2024, 3, 31)]


@pytest.mark.asyncio
async def test_today_defaults_to_clock(generation_service, event_store, make_template):
    template = make_template(generate_weeks_ahead=1)

    await generation_service.generate(template)

    assert event_store.dates_for(template.id) == [date(2024, 1, 2)]


@pytest.mark.asyncio
async def test_generate_by_id(generation_service, template_store, event_store, make_template):
    template = template_store.add(make_template())

    summary = await generation_service.generate_by_id(template.id, today=TODAY)

    assert summary.created == 4
    with pytest.raises(TemplateNotFoundError):
        await generation_service.generate_by_id(uuid4())


def test_generation_window(make_template):
    template = make_template(generate_weeks_ahead=2)
    assert GenerationService.generation_window(template, TODAY) == (TODAY, date(2024, 1, 15))

    template.end_date = date(2024, 1, 10)
    assert GenerationService.generation_window(template, TODAY) == (TODAY, date(2024, 1, 10))


def test_occurrence_preview_composes_event_time(make_template):
    template = make_template(generate_weeks_ahead=2, event_time=time(19, 45))

    starts = occurrence_preview(template, TODAY)

    assert [s.isoformat() for s in starts] == ["2024-01-02T19:45:00", "2024-01-09T19:45:00"]

