"""
Event Routes

Endpoints for calendar events. Generated events are ordinary events here:
they can be edited or deleted without touching their template.
"""
import logging
from datetime import date, time
from typing import Optional, List
from uuid import UUID

import asyncpg
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..models.event import EventStatus
from ..services.engine_service import EngineService, get_engine_service

logger = logging.getLogger("eventgen.routes.events")
router = APIRouter(prefix="/events", tags=["events"])

# Event columns declared NOT NULL
REQUIRED_FIELDS = ("title", "event_date", "status")


# ============================================
# Request/Response Models
# ============================================

class UpdateEventRequest(BaseModel):
    """Update event request; only sent fields change"""
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    venue_id: Optional[UUID] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    image_url: Optional[str] = None
    status: Optional[EventStatus] = None


class EventResponse(BaseModel):
    """Event response"""
    id: str
    title: str
    description: Optional[str]
    event_type: Optional[str]
    venue_id: Optional[str]
    event_date: str
    event_time: Optional[str]
    starts_at: str
    image_url: Optional[str]
    status: str
    source_template_id: Optional[str]
    created_at: str
    updated_at: str


def _parse_event_id(event_id: str) -> UUID:
    try:
        return UUID(event_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid event ID")


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[EventResponse])
async def list_events(
    upcoming: bool = False,
    template_id: Optional[UUID] = None,
    limit: Optional[int] = None,
    engine: EngineService = Depends(get_engine_service),
):
    """List events, optionally only upcoming ones or those from one template"""
    events = await engine.event_storage.list_events(
        upcoming_from=date.today() if upcoming else None,
        template_id=template_id,
        limit=limit,
    )
    return [EventResponse(**e.to_dict()) for e in events]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Get an event by ID"""
    event = await engine.event_storage.get_by_id(_parse_event_id(event_id))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventResponse(**event.to_dict())


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    request: UpdateEventRequest,
    engine: EngineService = Depends(get_engine_service),
):
    """Edit an event; later generation runs never overwrite these edits"""
    event = await engine.event_storage.get_by_id(_parse_event_id(event_id))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    changes = request.model_dump(exclude_unset=True)
    for name in REQUIRED_FIELDS:
        if name in changes and changes[name] is None:
            raise HTTPException(status_code=400, detail=f"{name}: cannot be null")

    for name, value in changes.items():
        setattr(event, name, value)

    try:
        updated = await engine.event_storage.update(event)
    except asyncpg.UniqueViolationError:
        raise HTTPException(
            status_code=409,
            detail="Another event from the same recurring template is already on that date",
        )
    if not updated:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventResponse(**updated.to_dict())


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Delete an event"""
    deleted = await engine.event_storage.delete(_parse_event_id(event_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"success": True, "message": "Event deleted successfully"}
