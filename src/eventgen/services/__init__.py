"""
Event Generator Services

Business logic services for recurring event generation.
"""
from .generation_service import GenerationService
from .template_service import TemplateService
from .scheduler_service import SchedulerService
from .engine_service import EngineService

__all__ = [
    'GenerationService',
    'TemplateService',
    'SchedulerService',
    'EngineService',
]
