"""APScheduler entry point that re-runs the pipeline on a randomized cadence."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from typing import Any

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

log = logging.getLogger(__name__)

JOB_ID = "curate_lists"


class RandomIntervalScheduler:
    """Run ``job`` every N hours, drawing a fresh N in [min_hours, max_hours] after each run.

    A run that would overlap one still in progress is skipped.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        min_hours: int = 1,
        max_hours: int = 16,
        scheduler: Any = None,
        rng: random.Random | None = None,
    ):
        if min_hours < 1 or max_hours < min_hours:
            raise ValueError(f"invalid hour range {min_hours}-{max_hours}")
        self.job = job
        self.min_hours = min_hours
        self.max_hours = max_hours
        self.scheduler = scheduler if scheduler is not None else BlockingScheduler(timezone="UTC")
        self._rng = rng or random.Random()
        self._running = threading.Lock()
        self.current_hours: int | None = None

    def pick_hours(self) -> int:
        return self._rng.randint(self.min_hours, self.max_hours)

    def schedule_next(self) -> int:
        hours = self.pick_hours()
        trigger = CronTrigger(hour=f"*/{hours}", minute=0, timezone="UTC")
        if self.scheduler.get_job(JOB_ID) is None:
            self.scheduler.add_job(self._run, trigger, id=JOB_ID, max_instances=1, coalesce=True)
        else:
            self.scheduler.reschedule_job(JOB_ID, trigger=trigger)
        self.current_hours = hours
        log.info("Scheduled pipeline to run every %d hours", hours)
        return hours

    def run_now(self) -> bool:
        """Run the job unless a previous run is still going. Returns whether it ran."""
        if not self._running.acquire(blocking=False):
            log.warning("Previous run still in progress, skipping")
            return False
        try:
            self.job()
        except Exception:
            log.exception("Scheduled pipeline run failed")
        finally:
            self._running.release()
        return True

    def _run(self) -> None:
        self.run_now()
        self.schedule_next()

    def start(self, run_initial: bool = True) -> None:
        if run_initial:
            log.info("Running initial pipeline")
            self.run_now()
        self.schedule_next()
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
