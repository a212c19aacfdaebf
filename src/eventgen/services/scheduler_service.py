"""
Scheduler Service

Background asyncio task that periodically generates events for every
active recurring template.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from croniter import croniter

from ..errors import TemplateValidationError
from ..models.recurring_template import RecurringEventTemplate
from ..models.run_summary import RunSummary, SchedulerRunReport
from ..storage.interfaces import TemplateStore
from .generation_service import GenerationService

logger = logging.getLogger("eventgen.services.scheduler")


class SchedulerService:
    """
    Periodic generation job.

    Sleeps until the next tick of cron_expression, then:
    1. Lists active templates
    2. Runs GenerationService.generate for each, at most max_workers at a time
    3. Logs a summary per template and for the whole sweep

    A failing template is logged and recorded in the report; the other
    templates are still processed.
    """

    def __init__(
        self,
        template_store: TemplateStore,
        generation_service: GenerationService,
        cron_expression: str = "0 3 * * *",
        max_workers: int = 4,
        run_on_start: bool = False,
        enabled: bool = True,
    ):
        if not croniter.is_valid(cron_expression):
            raise ValueError(f"Invalid cron expression: {cron_expression}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.template_store = template_store
        self.generation_service = generation_service
        self.cron_expression = cron_expression
        self.max_workers = max_workers
        self.run_on_start = run_on_start
        self.enabled = enabled
        self.last_report: Optional[SchedulerRunReport] = None
        self.last_run_at: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None
        self._running = False

    async def start(self):
        """Start the scheduler background task"""
        if not self.enabled:
            logger.info("Scheduler is disabled (SCHEDULER_ENABLED=false)")
            return

        if self._running:
            logger.warning("Scheduler is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Scheduler started (cron='{self.cron_expression}', next run at {self.next_run_at()})")

    async def stop(self):
        """Stop the scheduler background task"""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Scheduler stopped")

    def next_run_at(self, base_time: Optional[datetime] = None) -> datetime:
        """Next sweep time from the cron expression, in local wall-clock time"""
        base = base_time or datetime.now()
        return croniter(self.cron_expression, base).get_next(datetime)

    async def _run_loop(self):
        """Main scheduling loop"""
        if self.run_on_start:
            await self._run_sweep()

        while self._running:
            delay = (self.next_run_at() - datetime.now()).total_seconds()
            try:
                await asyncio.sleep(max(delay, 0))
            except asyncio.CancelledError:
                break
            await self._run_sweep()

    async def _run_sweep(self):
        try:
            await self.run_once()
        except Exception as e:
            logger.error(f"Generation sweep failed: {e}")

    async def run_once(self) -> SchedulerRunReport:
        """
        Generate events for every active template.

        Failing to list templates propagates; failures of individual
        templates are captured in their RunSummary.
        """
        templates = await self.template_store.list_active()
        logger.info(f"Generation sweep over {len(templates)} active template(s)")

        semaphore = asyncio.Semaphore(self.max_workers)

        async def _bounded(template: RecurringEventTemplate) -> RunSummary:
            async with semaphore:
                return await self._generate_one(template)

        summaries = await asyncio.gather(*(_bounded(t) for t in templates))

        report = SchedulerRunReport(summaries=list(summaries))
        self.last_report = report
        self.last_run_at = datetime.now()

        logger.info(
            f"Generation sweep done: templates={report.templates_processed}, "
            f"failed={report.templates_failed}, created={report.total_created}, "
            f"skipped_existing={report.total_skipped}"
        )
        return report

    async def _generate_one(self, template: RecurringEventTemplate) -> RunSummary:
        """Run one template, converting its failure into a summary"""
        try:
            summary = await self.generation_service.generate(template)
        except TemplateValidationError as e:
            logger.warning(f"Skipping invalid template {template.id} ('{template.title}'): {e}")
            return RunSummary(template_id=template.id, error=str(e))
        except Exception as e:
            logger.error(f"Failed to generate events for template {template.id}: {e}", exc_info=True)
            return RunSummary(template_id=template.id, error=str(e))

        logger.info(
            f"Template {template.id} ('{template.title}'): "
            f"created={summary.created}, skipped_existing={summary.skipped_existing}"
        )
        return summary

    @property
    def is_running(self) -> bool:
        return self._running
