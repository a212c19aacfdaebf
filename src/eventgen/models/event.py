"""
Event Model

A calendar event shown on the site. Events produced by the generator
carry the ID of their source template.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class EventStatus(str, Enum):
    """Lifecycle status of a calendar event"""
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass
class Event:
    """
    Calendar event entity.

    source_template_id is provenance only: once created, a generated event
    is edited and deleted like any manually created event, and the pair
    (source_template_id, event_date) is unique.
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    description: Optional[str] = None
    event_type: Optional[str] = None
    venue_id: Optional[UUID] = None

    event_date: date = field(default_factory=date.today)
    event_time: Optional[time] = None
    image_url: Optional[str] = None
    status: EventStatus = EventStatus.SCHEDULED

    source_template_id: Optional[UUID] = None

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def starts_at(self) -> datetime:
        """Local wall-clock start of the event"""
        return datetime.combine(self.event_date, self.event_time or time(0, 0))

    def to_dict(self) -> dict:
        """Convert to dictionary for API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "event_type": self.event_type,
            "venue_id": str(self.venue_id) if self.venue_id else None,
            "event_date": self.event_date.isoformat(),
            "event_time": self.event_time.strftime("%H:%M") if self.event_time else None,
            "starts_at": self.starts_at.isoformat(),
            "image_url": self.image_url,
            "status": self.status.value,
            "source_template_id": str(self.source_template_id) if self.source_template_id else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
