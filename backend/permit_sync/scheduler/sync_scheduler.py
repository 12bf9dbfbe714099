"""Sync Scheduler - Periodic PEACH permit status sync

Runs the PEACH sync on an APScheduler interval job. A failing run is logged
and the next interval tries again.
"""
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config.settings import settings
from ..domain.models import PeachSyncResult
from ..services.peach_sync_service import PeachSyncService
from ..utils.logger import get_logger, set_correlation_id
from ..utils.idgen import generate_correlation_id, generate_run_id

logger = get_logger(__name__)

SYNC_JOB_ID = "sync_peach_records"


class PeachSyncScheduler:
    """
    Scheduler for the PEACH sync job

    Only one sync runs at a time per scheduler (max_instances=1); an interval
    that fires while a run is still going is skipped.
    """

    def __init__(
        self,
        sync_service: Optional[PeachSyncService] = None,
        interval_minutes: Optional[int] = None
    ):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._sync_service = sync_service
        self.interval_minutes = interval_minutes or settings.peach_sync_interval_minutes
        self._is_running = False
        self._run_id = generate_run_id()
        self._run_count = 0

    @property
    def sync_service(self) -> PeachSyncService:
        # Built lazily so the database is only touched once a job runs
        if self._sync_service is None:
            self._sync_service = PeachSyncService()
        return self._sync_service

    def start(self) -> None:
        """Start the scheduler"""
        if self._is_running:
            logger.warning("Scheduler already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_sync,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=SYNC_JOB_ID,
            name="Sync permit status from PEACH",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        self._is_running = True
        logger.info(f"PEACH sync scheduler {self._run_id} started, every {self.interval_minutes} minutes")

    def stop(self) -> None:
        """Stop the scheduler"""
        if self.scheduler:
            self.scheduler.shutdown()
            self.scheduler = None
        self._is_running = False
        logger.info("PEACH sync scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running"""
        return self._is_running

    async def run_sync(self) -> Optional[PeachSyncResult]:
        """Run one sync; errors are logged, not raised"""
        correlation_id = generate_correlation_id()
        set_correlation_id(correlation_id)
        self._run_count += 1

        try:
            logger.info(f"Starting PEACH sync run {self._run_count}")
            return await self.sync_service.sync_peach_records()
        except Exception as e:
            logger.error(
                f"Error in PEACH sync job: {e}",
                extra={"error_type": type(e).__name__, "error": str(e)},
                exc_info=True
            )
            return None
        finally:
            set_correlation_id(None)


# Global scheduler instance
_scheduler: Optional[PeachSyncScheduler] = None


def get_scheduler() -> PeachSyncScheduler:
    """Get or create the global scheduler"""
    global _scheduler
    if _scheduler is None:
        _scheduler = PeachSyncScheduler()
    return _scheduler


def start_scheduler() -> None:
    """Start the global scheduler"""
    if not settings.peach_sync_enabled:
        logger.info("PEACH sync disabled, scheduler not started")
        return
    get_scheduler().start()


def stop_scheduler() -> None:
    """Stop the global scheduler"""
    global _scheduler
    if _scheduler:
        _scheduler.stop()
        _scheduler = None
