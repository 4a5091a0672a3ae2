import logging
from datetime import datetime, timedelta
from typing import Callable, List

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from tzlocal import get_localzone

logger = logging.getLogger(__name__)

JOB_PREFIX = "checkup:"


def build_scheduler() -> AsyncIOScheduler:
    """Create the scheduler instance driving check-up reminders."""
    return AsyncIOScheduler(timezone=get_localzone())


async def _run_callback(callback: Callable[[], None]) -> None:
    # coroutine jobs run on the event loop, not in the executor thread pool
    callback()


class APSchedulerTimers:
    """One-shot delayed callbacks backed by APScheduler date jobs."""

    def __init__(self, scheduler: AsyncIOScheduler) -> None:
        self._scheduler = scheduler

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("APScheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("APScheduler stopped")

    def schedule(self, key: str, delay: timedelta, callback: Callable[[], None]) -> None:
        run_date = datetime.now(self._scheduler.timezone) + delay
        self._scheduler.add_job(
            _run_callback,
            trigger=DateTrigger(run_date=run_date),
            id=key,
            replace_existing=True,
            misfire_grace_time=None,
            kwargs={"callback": callback},
        )
        logger.debug("Scheduled %s at %s", key, run_date.isoformat())

    def cancel(self, key: str) -> None:
        try:
            self._scheduler.remove_job(key)
        except JobLookupError:
            # date jobs are dropped by APScheduler once they have run
            logger.debug("Job %s already gone", key)

    def pending(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs() if job.id.startswith(JOB_PREFIX)]
