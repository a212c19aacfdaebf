"""
Health Check Routes

Endpoints for service health monitoring.
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from ..services.engine_service import EngineService, get_engine_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "eventgen",
        "timestamp": datetime.now().isoformat()
    }


@router.get("/ready")
async def readiness_check(engine: EngineService = Depends(get_engine_service)):
    """
    Readiness check - database reachable and scheduler state.
    Used by orchestrators for readiness probes.
    """
    scheduler = engine.scheduler_service
    return {
        "ready": await engine.is_ready(),
        "scheduler_running": scheduler.is_running,
        "last_generation_run": scheduler.last_run_at.isoformat() if scheduler.last_run_at else None,
        "timestamp": datetime.now().isoformat()
    }


@router.get("/live")
async def liveness_check():
    """
    Liveness check - indicates if service is running.
    Used by orchestrators for liveness probes.
    """
    return {
        "alive": True,
        "timestamp": datetime.now().isoformat()
    }
