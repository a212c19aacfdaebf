"""
Event Generator Data Models

Domain models for recurring event templates and generated events.
"""
from .event import Event, EventStatus
from .recurring_template import RecurringEventTemplate, RecurrenceType
from .run_summary import RunSummary, SchedulerRunReport
from .recurrence import (
    RecurrenceRule,
    WeeklyRule,
    BiweeklyRule,
    MonthlyFixedDayRule,
    MonthlyNthWeekdayRule,
    rule_from_template,
    validate_template,
    template_occurrences,
)

__all__ = [
    'Event',
    'EventStatus',
    'RecurringEventTemplate',
    'RecurrenceType',
    'RunSummary',
    'SchedulerRunReport',
    'RecurrenceRule',
    'WeeklyRule',
    'BiweeklyRule',
    'MonthlyFixedDayRule',
    'MonthlyNthWeekdayRule',
    'rule_from_template',
    'validate_template',
    'template_occurrences',
]
