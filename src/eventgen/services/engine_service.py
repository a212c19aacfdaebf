"""
Engine Service

Main composite service that manages all storages and services.
Singleton pattern - one instance per process.
"""
import logging
from typing import Optional

from ..config import Config
from ..storage.template_storage import TemplateStorage
from ..storage.event_storage import EventStorage
from .generation_service import GenerationService
from .template_service import TemplateService
from .scheduler_service import SchedulerService

logger = logging.getLogger("eventgen.services.engine")

# Singleton instance
_engine_service: Optional["EngineService"] = None


class EngineService:
    """
    Composite engine service.

    Manages:
    - Storage connections (PostgreSQL)
    - Generation and template services
    - The periodic generation scheduler
    - Graceful shutdown
    """

    def __init__(self):
        """Initialize engine service with all storages"""
        self.postgres_dsn = Config.get_postgres_dsn()

        # Initialize storages
        self.template_storage = TemplateStorage(self.postgres_dsn)
        self.event_storage = EventStorage(self.postgres_dsn)

        # Generation engine shared by the manual and periodic triggers
        self.generation_service = GenerationService(
            template_store=self.template_storage,
            event_store=self.event_storage,
        )

        self.template_service = TemplateService(
            template_storage=self.template_storage,
            event_storage=self.event_storage,
            generation_service=self.generation_service,
            default_weeks_ahead=Config.DEFAULT_WEEKS_AHEAD,
        )

        # Initialize scheduler (started in initialize(), stopped in close())
        self.scheduler_service = SchedulerService(
            template_store=self.template_storage,
            generation_service=self.generation_service,
            cron_expression=Config.GENERATION_CRON,
            max_workers=Config.GENERATION_MAX_WORKERS,
            run_on_start=Config.GENERATION_RUN_ON_START,
            enabled=Config.SCHEDULER_ENABLED,
        )

        self._initialized = False
        logger.info("EngineService created")

    async def initialize(self):
        """Initialize all storages and start the scheduler"""
        if self._initialized:
            logger.info("EngineService already initialized")
            return

        logger.info("Initializing EngineService...")

        await self.template_storage.init()
        await self.event_storage.init()

        await self.scheduler_service.start()

        self._initialized = True
        logger.info("EngineService initialized successfully")

    async def close(self):
        """Stop the scheduler and close all connections"""
        logger.info("Closing EngineService...")

        await self.scheduler_service.stop()
        await self.template_storage.close()
        await self.event_storage.close()

        self._initialized = False
        logger.info("EngineService closed")

    async def is_ready(self) -> bool:
        """True when the database answers"""
        return self._initialized and await self.event_storage.ping()

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized


def get_engine_service() -> EngineService:
    """Get or create engine service singleton"""
    global _engine_service
    if _engine_service is None:
        _engine_service = EngineService()
    return _engine_service


async def init_engine_service() -> EngineService:
    """Initialize and return engine service"""
    service = get_engine_service()
    await service.initialize()
    return service
