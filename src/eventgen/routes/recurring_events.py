"""
Recurring Event Routes

Endpoints for recurring event templates and event generation.
"""
import logging
from datetime import date, time
from typing import Optional, List
from uuid import UUID

import asyncpg
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..errors import TemplateNotFoundError, TemplateValidationError
from ..models.event import EventStatus
from ..models.recurring_template import RecurrenceType
from ..services.engine_service import EngineService, get_engine_service
from .events import EventResponse

logger = logging.getLogger("eventgen.routes.recurring_events")
router = APIRouter(prefix="/recurring-events", tags=["recurring-events"])


# ============================================
# Request/Response Models
# ============================================

class CreateTemplateRequest(BaseModel):
    """Create recurring event template request"""
    title: str
    description: Optional[str] = None
    event_type: Optional[str] = None
    venue_id: Optional[UUID] = None
    recurrence_type: RecurrenceType
    day_of_week: Optional[int] = None         # 0-6, Sunday=0
    week_of_month: Optional[int] = None       # 1-5, monthly "Nth weekday"
    day_of_month: Optional[int] = None        # 1-31, monthly fixed day
    event_time: time
    start_date: date
    end_date: Optional[date] = None
    generate_weeks_ahead: Optional[int] = None
    default_image_url: Optional[str] = None
    default_status: Optional[EventStatus] = None
    is_active: bool = True


class UpdateTemplateRequest(BaseModel):
    """Update recurring event template request; only sent fields change"""
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    venue_id: Optional[UUID] = None
    recurrence_type: Optional[RecurrenceType] = None
    day_of_week: Optional[int] = None
    week_of_month: Optional[int] = None
    day_of_month: Optional[int] = None
    event_time: Optional[time] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    generate_weeks_ahead: Optional[int] = None
    default_image_url: Optional[str] = None
    default_status: Optional[EventStatus] = None
    is_active: Optional[bool] = None


class SetActiveRequest(BaseModel):
    """Toggle template generation"""
    is_active: bool


class TemplateResponse(BaseModel):
    """Recurring event template response"""
    id: str
    title: str
    description: Optional[str]
    event_type: Optional[str]
    venue_id: Optional[str]
    venue_name: Optional[str]
    recurrence_type: str
    day_of_week: Optional[int]
    week_of_month: Optional[int]
    day_of_month: Optional[int]
    event_time: str
    start_date: str
    end_date: Optional[str]
    generate_weeks_ahead: int
    default_image_url: Optional[str]
    default_status: str
    is_active: bool
    created_at: str
    updated_at: str


class GenerateResponse(BaseModel):
    """Result of a manual generation run"""
    message: str
    template_id: str
    created: int
    skipped_existing: int
    events: List[EventResponse]


class GenerateAllResponse(BaseModel):
    """Result of a sweep over all active templates"""
    templates_processed: int
    templates_failed: int
    total_created: int
    total_skipped: int
    summaries: List[dict]


class PreviewResponse(BaseModel):
    """Start times the next run would target"""
    template_id: str
    occurrences: List[str]


# ============================================
# Helpers
# ============================================

def _parse_template_id(template_id: str) -> UUID:
    try:
        return UUID(template_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid recurring event ID")


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[TemplateResponse])
async def list_templates(engine: EngineService = Depends(get_engine_service)):
    """List all recurring event templates"""
    templates = await engine.template_service.list_templates()
    return [TemplateResponse(**t.to_dict()) for t in templates]


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    request: CreateTemplateRequest,
    engine: EngineService = Depends(get_engine_service),
):
    """Create a recurring event template"""
    try:
        template = await engine.template_service.create_template(**request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TemplateResponse(**template.to_dict())


@router.post("/generate-all", response_model=GenerateAllResponse)
async def generate_all(engine: EngineService = Depends(get_engine_service)):
    """Run the periodic generation sweep now"""
    try:
        report = await engine.scheduler_service.run_once()
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Generation sweep failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to generate events: {e}")
    return GenerateAllResponse(**report.to_dict())


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Get a recurring event template by ID"""
    template = await engine.template_service.get_template(_parse_template_id(template_id))
    if not template:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    return TemplateResponse(**template.to_dict())


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    request: UpdateTemplateRequest,
    engine: EngineService = Depends(get_engine_service),
):
    """Update a recurring event template; affects future generation only"""
    template_uuid = _parse_template_id(template_id)
    try:
        template = await engine.template_service.update_template(
            template_uuid, request.model_dump(exclude_unset=True)
        )
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TemplateResponse(**template.to_dict())


@router.patch("/{template_id}/active", response_model=TemplateResponse)
async def set_template_active(
    template_id: str,
    request: SetActiveRequest,
    engine: EngineService = Depends(get_engine_service),
):
    """Activate or deactivate a template"""
    try:
        template = await engine.template_service.set_active(
            _parse_template_id(template_id), request.is_active
        )
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    return TemplateResponse(**template.to_dict())


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Delete a template; already generated events are kept"""
    deleted = await engine.template_service.delete_template(_parse_template_id(template_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    return {"success": True, "message": "Recurring event deleted successfully"}


@router.post("/{template_id}/generate", response_model=GenerateResponse)
async def generate_events(
    template_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Generate Now: materialize the template's upcoming events"""
    template_uuid = _parse_template_id(template_id)
    try:
        summary = await engine.template_service.generate_now(template_uuid)
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    except TemplateValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Generate events failed for {template_uuid}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to generate events: {e}")

    return GenerateResponse(
        message=f"Generated {summary.created} events",
        template_id=str(template_uuid),
        created=summary.created,
        skipped_existing=summary.skipped_existing,
        events=[EventResponse(**e.to_dict()) for e in summary.events],
    )


@router.get("/{template_id}/events", response_model=List[EventResponse])
async def list_generated_events(
    template_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """List events generated from a template"""
    events = await engine.template_service.list_generated_events(_parse_template_id(template_id))
    return [EventResponse(**e.to_dict()) for e in events]


@router.get("/{template_id}/preview", response_model=PreviewResponse)
async def preview_occurrences(
    template_id: str,
    engine: EngineService = Depends(get_engine_service),
):
    """Show the start times the next generation run would target"""
    template_uuid = _parse_template_id(template_id)
    try:
        occurrences = await engine.template_service.preview(template_uuid)
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail="Recurring event not found")
    except TemplateValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PreviewResponse(
        template_id=str(template_uuid),
        occurrences=[o.isoformat() for o in occurrences],
    )
