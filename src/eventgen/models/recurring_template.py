"""
Recurring Event Template Model

A persisted recurrence rule plus the event metadata copied into
every event generated from it.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .event import EventStatus


class RecurrenceType(str, Enum):
    """Supported recurrence patterns"""
    WEEKLY = "weekly"        # every <day_of_week>
    BIWEEKLY = "biweekly"    # every second <day_of_week>, phased from start_date
    MONTHLY = "monthly"      # <day_of_month>, or <week_of_month>-th <day_of_week>


@dataclass
class RecurringEventTemplate:
    """
    Recurring event template entity.

    Addressing fields by recurrence type:
    - weekly / biweekly: day_of_week (0-6, Sunday=0)
    - monthly: either day_of_month (1-31) alone,
      or week_of_month (1-5) together with day_of_week

    Edits only affect future generation runs. Deactivating a template stops
    generation but keeps every event it already produced.
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    description: Optional[str] = None
    event_type: Optional[str] = None
    venue_id: Optional[UUID] = None
    venue_name: Optional[str] = None                    # joined from venues, read-only

    # Recurrence pattern
    recurrence_type: RecurrenceType = RecurrenceType.WEEKLY
    day_of_week: Optional[int] = None
    week_of_month: Optional[int] = None
    day_of_month: Optional[int] = None

    # Scheduling
    event_time: time = field(default_factory=lambda: time(19, 0))
    start_date: date = field(default_factory=date.today)
    end_date: Optional[date] = None                     # exclusive
    generate_weeks_ahead: int = 12

    # Defaults for generated events
    default_image_url: Optional[str] = None
    default_status: EventStatus = EventStatus.SCHEDULED

    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "event_type": self.event_type,
            "venue_id": str(self.venue_id) if self.venue_id else None,
            "venue_name": self.venue_name,
            "recurrence_type": self.recurrence_type.value,
            "day_of_week": self.day_of_week,
            "week_of_month": self.week_of_month,
            "day_of_month": self.day_of_month,
            "event_time": self.event_time.strftime("%H:%M"),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "generate_weeks_ahead": self.generate_weeks_ahead,
            "default_image_url": self.default_image_url,
            "default_status": self.default_status.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
