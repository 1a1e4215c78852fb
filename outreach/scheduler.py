"""Daily scheduler for outreach campaigns."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta

from config import parse_run_at

from .campaign import CampaignResult, CampaignRunner

logger = logging.getLogger(__name__)


class CampaignScheduler:
    """
    Fires a campaign once a day at a fixed local time.

    The scheduler is either stopped or running; while running it holds
    exactly one armed timer. Scheduled and manual runs share one worker
    thread, so two campaigns never overlap. Stopping only prevents future
    firings; a run already in progress finishes.
    """

    def __init__(
        self,
        runner: CampaignRunner,
        run_at: str = "10:00",
        timezone: str = "Asia/Seoul",
        clock: Optional[Callable[[], datetime]] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.runner = runner
        self.run_at = run_at
        self._hour, self._minute = parse_run_at(run_at)
        self.tz = tz.gettz(timezone)
        if self.tz is None:
            raise ValueError(f"Unknown timezone '{timezone}'")
        self.timezone = timezone
        self.clock = clock or (lambda: datetime.now(self.tz))
        self._timer_factory = timer_factory
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="campaign")
        self._lock = threading.Lock()
        self._timer = None
        self._token = None
        self._next_run: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def next_run(self) -> Optional[datetime]:
        """When the armed timer fires, or None while stopped."""
        return self._next_run if self.running else None

    def next_run_at(self, now: Optional[datetime] = None) -> datetime:
        """The first daily firing time strictly after now."""
        now = now or self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.tz)
        local = now.astimezone(self.tz)
        candidate = local + relativedelta(
            hour=self._hour, minute=self._minute, second=0, microsecond=0
        )
        if candidate <= local:
            candidate += relativedelta(days=1)
        return candidate

    def start(self) -> bool:
        """Arm the daily timer. Returns False if it was already running."""
        with self._lock:
            if self._timer is not None:
                return False
            self._arm()
        logger.info(
            "Scheduler started: daily at %s (%s), next run %s",
            self.run_at,
            self.timezone,
            self._next_run.isoformat(),
        )
        return True

    def stop(self) -> bool:
        """Cancel the daily timer. Returns False if it was not running."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._token = None
            self._next_run = None
        logger.info("Scheduler stopped")
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop the timer and release the worker thread."""
        self.stop()
        self._executor.shutdown(wait=wait)

    def trigger(self) -> "Future[CampaignResult]":
        """
        Run a campaign now, outside the schedule.

        Returns a future for the run; the next scheduled firing is unchanged.
        """
        logger.info("Manual campaign run requested")
        future = self._executor.submit(self.runner.run)
        future.add_done_callback(self._log_manual_failure)
        return future

    def _arm(self, after: Optional[datetime] = None) -> None:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.tz)
        # A timer can fire slightly before its wall-clock target; never
        # schedule the same target twice.
        base = now if after is None else max(now, after)
        self._next_run = self.next_run_at(base)
        delay = max(0.0, (self._next_run - now).total_seconds())
        token = object()
        timer = self._timer_factory(delay, self._fire, args=(token,))
        timer.daemon = True
        self._timer = timer
        self._token = token
        timer.start()

    def _fire(self, token) -> None:
        with self._lock:
            if self._token is not token:
                return
            self._arm(after=self._next_run)
        logger.info("Scheduled campaign run firing")
        self._executor.submit(self._run_scheduled)

    def _run_scheduled(self) -> Optional[CampaignResult]:
        try:
            return self.runner.run()
        except Exception:
            logger.exception("Scheduled campaign run failed")
            return None

    @staticmethod
    def _log_manual_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Manual campaign run failed: %s", error)
