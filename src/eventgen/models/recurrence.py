"""
Recurrence Rules

Pure evaluators for the supported recurrence patterns. Each rule maps a
half-open date window [window_start, window_end) to the ascending sequence
of matching dates. Rules know nothing about what has already been generated.

Weekdays follow the admin panel convention: Sunday=0 ... Saturday=6.
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, Optional, Tuple, Union

from ..errors import TemplateValidationError
from .recurring_template import RecurrenceType, RecurringEventTemplate

ONE_WEEK = timedelta(weeks=1)
TWO_WEEKS = timedelta(weeks=2)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MAX_WEEKS_AHEAD = 52


def to_python_weekday(day_of_week: int) -> int:
    """Sunday=0 weekday -> date.weekday() (Monday=0)"""
    return (day_of_week - 1) % 7


def from_python_weekday(weekday: int) -> int:
    """date.weekday() (Monday=0) -> Sunday=0 weekday"""
    return (weekday + 1) % 7


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _first_on_or_after(start: date, day_of_week: int) -> date:
    """First date >= start falling on day_of_week (Sunday=0)"""
    delta = (to_python_weekday(day_of_week) - start.weekday()) % 7
    return start + timedelta(days=delta)


def _week_start(d: date) -> date:
    """Sunday that opens the week containing d"""
    return d - timedelta(days=from_python_weekday(d.weekday()))


def _months_between(window_start: date, window_end: date) -> Iterator[Tuple[int, int]]:
    """(year, month) of every month overlapping [window_start, window_end)"""
    year, month = window_start.year, window_start.month
    while date(year, month, 1) < window_end:
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


@dataclass(frozen=True)
class WeeklyRule:
    """Every <day_of_week>"""
    day_of_week: int

    def occurrences(self, window_start: date, window_end: date) -> Iterator[date]:
        current = _first_on_or_after(window_start, self.day_of_week)
        while current < window_end:
            yield current
            current += ONE_WEEK

    def describe(self) -> str:
        return f"Every {DAY_NAMES[self.day_of_week]}"


@dataclass(frozen=True)
class BiweeklyRule:
    """
    Every second <day_of_week>.

    Phase is anchored at the week containing `anchor` (the template's
    start_date), so moving the window never shifts which weeks match.
    """
    day_of_week: int
    anchor: date

    def occurrences(self, window_start: date, window_end: date) -> Iterator[date]:
        current = _first_on_or_after(window_start, self.day_of_week)
        if self._week_index(current) % 2:
            current += ONE_WEEK
        while current < window_end:
            yield current
            current += TWO_WEEKS

    def _week_index(self, d: date) -> int:
        return (_week_start(d) - _week_start(self.anchor)).days // 7

    def describe(self) -> str:
        return f"Every other {DAY_NAMES[self.day_of_week]}"


@dataclass(frozen=True)
class MonthlyFixedDayRule:
    """The <day_of_month> of each month; months without that day are skipped"""
    day_of_month: int

    def occurrences(self, window_start: date, window_end: date) -> Iterator[date]:
        for year, month in _months_between(window_start, window_end):
            if self.day_of_month > calendar.monthrange(year, month)[1]:
                continue
            candidate = date(year, month, self.day_of_month)
            if window_start <= candidate < window_end:
                yield candidate

    def describe(self) -> str:
        return f"Monthly on the {ordinal(self.day_of_month)}"


@dataclass(frozen=True)
class MonthlyNthWeekdayRule:
    """The <week_of_month>-th <day_of_week> of each month; skipped when the month has fewer"""
    week_of_month: int
    day_of_week: int

    def occurrences(self, window_start: date, window_end: date) -> Iterator[date]:
        for year, month in _months_between(window_start, window_end):
            first = _first_on_or_after(date(year, month, 1), self.day_of_week)
            candidate = first + timedelta(weeks=self.week_of_month - 1)
            if candidate.month != month:
                continue
            if window_start <= candidate < window_end:
                yield candidate

    def describe(self) -> str:
        return f"{ordinal(self.week_of_month)} {DAY_NAMES[self.day_of_week]} of every month"


RecurrenceRule = Union[WeeklyRule, BiweeklyRule, MonthlyFixedDayRule, MonthlyNthWeekdayRule]


def _require_int(name: str, value: Optional[int], low: int, high: int, context: str) -> int:
    if value is None:
        raise TemplateValidationError(name, f"is required for {context}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise TemplateValidationError(name, f"must be an integer, got {value!r}")
    if not low <= value <= high:
        raise TemplateValidationError(name, f"must be between {low} and {high}, got {value}")
    return value


def rule_from_template(template: RecurringEventTemplate) -> RecurrenceRule:
    """
    Build the recurrence rule for a template.

    Raises TemplateValidationError naming the offending field when the
    addressing fields do not match the recurrence type.
    """
    try:
        recurrence_type = RecurrenceType(template.recurrence_type)
    except ValueError:
        raise TemplateValidationError(
            "recurrence_type",
            f"must be one of weekly, biweekly, monthly, got {template.recurrence_type!r}"
        )

    if recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
        context = f"{recurrence_type.value} recurrence"
        day_of_week = _require_int("day_of_week", template.day_of_week, 0, 6, context)
        if recurrence_type == RecurrenceType.WEEKLY:
            return WeeklyRule(day_of_week)
        if template.start_date is None:
            raise TemplateValidationError("start_date", "is required")
        return BiweeklyRule(day_of_week, template.start_date)

    # Monthly: exactly one of the two addressing forms
    has_fixed_day = template.day_of_month is not None
    has_nth_weekday = template.week_of_month is not None or template.day_of_week is not None

    if has_fixed_day and has_nth_weekday:
        conflicting = "week_of_month" if template.week_of_month is not None else "day_of_week"
        raise TemplateValidationError(
            conflicting,
            "cannot be combined with day_of_month for monthly recurrence"
        )
    if has_fixed_day:
        context = "monthly fixed-day recurrence"
        return MonthlyFixedDayRule(_require_int("day_of_month", template.day_of_month, 1, 31, context))
    if has_nth_weekday:
        context = "monthly nth-weekday recurrence"
        week_of_month = _require_int("week_of_month", template.week_of_month, 1, 5, context)
        day_of_week = _require_int("day_of_week", template.day_of_week, 0, 6, context)
        return MonthlyNthWeekdayRule(week_of_month, day_of_week)

    raise TemplateValidationError(
        "day_of_month",
        "monthly recurrence needs either day_of_month or week_of_month with day_of_week"
    )


def validate_template(template: RecurringEventTemplate) -> RecurrenceRule:
    """Check every field generation depends on and return the template's rule"""
    if not template.title or not template.title.strip():
        raise TemplateValidationError("title", "is required")
    if template.event_time is None:
        raise TemplateValidationError("event_time", "is required")
    if template.start_date is None:
        raise TemplateValidationError("start_date", "is required")
    if template.end_date is not None and template.end_date <= template.start_date:
        raise TemplateValidationError("end_date", "must be after start_date")
    _require_int("generate_weeks_ahead", template.generate_weeks_ahead, 1, MAX_WEEKS_AHEAD, "generation")
    return rule_from_template(template)


def template_occurrences(
    template: RecurringEventTemplate,
    window_start: date,
    window_end: date,
    rule: Optional[RecurrenceRule] = None,
) -> Iterator[date]:
    """
    Occurrences of a template inside [window_start, window_end).

    The window is further bounded by the template's start_date (inclusive)
    and end_date (exclusive).
    """
    if rule is None:
        rule = rule_from_template(template)

    start = max(window_start, template.start_date)
    end = window_end if template.end_date is None else min(window_end, template.end_date)
    if start >= end:
        return iter(())
    return rule.occurrences(start, end)
