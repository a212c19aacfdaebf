"""
Event Generator API Routes

FastAPI route handlers for the event generation engine.
"""
from .health import router as health_router
from .events import router as events_router
from .recurring_events import router as recurring_events_router

__all__ = [
    'health_router',
    'events_router',
    'recurring_events_router',
]
