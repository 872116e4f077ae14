"""
Poll scheduling around market hours.

The scheduler never loops. It arms a single one-shot wake-up: a short poll
while the market is open, or one wake-up at the next open while it is
closed. Re-arming replaces the pending wake-up.
"""

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from loguru import logger

from mocktrade.core.constants import MIN_WAKEUP_DELAY_SECONDS
from mocktrade.core.enums import SchedulerState
from mocktrade.core.interfaces.orders import IOrderStore
from mocktrade.core.interfaces.quotes import IQuoteSource
from mocktrade.core.interfaces.scheduling import IWakeupTimer

WAKEUP_JOB_ID = "execution_pass_wakeup"


class SchedulerWakeupTimer(IWakeupTimer):
    """Wake-up timer backed by an APScheduler background scheduler.

    The wake-up is a single date-triggered job under a fixed id, so arming
    again replaces it.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None, job_id: str = WAKEUP_JOB_ID) -> None:
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self.job_id = job_id
        self._start_lock = threading.Lock()

    def _ensure_started(self) -> None:
        with self._start_lock:
            if not self.scheduler.running:
                self.scheduler.start()

    def arm(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self._ensure_started()
        run_date = datetime.now(UTC) + timedelta(seconds=max(delay_seconds, 0.0))
        self.scheduler.add_job(
            callback,
            DateTrigger(run_date=run_date),
            id=self.job_id,
            name="execution pass wake-up",
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True,
        )

    def cancel(self) -> None:
        try:
            self.scheduler.remove_job(self.job_id)
        except JobLookupError:
            # Already fired or never armed
            pass

    @property
    def is_armed(self) -> bool:
        return self.scheduler.get_job(self.job_id) is not None

    def shutdown(self) -> None:
        self.cancel()
        with self._start_lock:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)


class PollScheduler:
    """Decides when the next execution pass runs.

    State machine: IDLE -> ARMED -> FIRING -> IDLE.
    """

    def __init__(
        self,
        order_store: IOrderStore,
        quote_source: IQuoteSource,
        run_pass: Callable[[], object],
        timer: IWakeupTimer | None = None,
        poll_interval_seconds: float = 60,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.order_store = order_store
        self.quote_source = quote_source
        self.run_pass = run_pass
        self.timer = timer or SchedulerWakeupTimer()
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock or (lambda: datetime.now(UTC))
        self._state = SchedulerState.IDLE
        self._state_lock = threading.RLock()
        self._firing = 0
        self.next_wakeup: datetime | None = None

    @property
    def state(self) -> SchedulerState:
        with self._state_lock:
            return self._state

    def schedule_if_needed(self) -> bool:
        """Arm a wake-up only while OPEN orders exist.

        Returns:
            True if a wake-up was armed
        """
        if not self.order_store.get_open_orders():
            with self._state_lock:
                self.timer.cancel()
                self.next_wakeup = None
                if self._state == SchedulerState.ARMED:
                    self._state = SchedulerState.IDLE
            logger.debug("No open orders, scheduler stays idle")
            return False

        self.schedule()
        return True

    def schedule(self) -> datetime:
        """Arm the next wake-up according to market hours.

        Returns:
            The time the wake-up is due
        """
        now = self._clock()
        if self.quote_source.is_market_open():
            delay = float(self.poll_interval_seconds)
            reason = "market open, polling"
        else:
            next_open = self.quote_source.next_market_open()
            delay = max((next_open - now).total_seconds(), MIN_WAKEUP_DELAY_SECONDS)
            reason = f"market closed, waking at next open {next_open.isoformat()}"

        with self._state_lock:
            self.timer.arm(delay, self._on_wakeup)
            self.next_wakeup = now + timedelta(seconds=delay)
            if self._state != SchedulerState.FIRING:
                self._state = SchedulerState.ARMED

        logger.info(f"Scheduler armed in {delay:.0f}s ({reason})")
        return self.next_wakeup

    def force_run(self) -> object:
        """Fire immediately, ignoring market hours."""
        logger.info("Forced execution pass requested")
        with self._state_lock:
            self.timer.cancel()
            self.next_wakeup = None
        return self._fire()

    def process_orders(self, force: bool = False) -> object | None:
        """Run a pass now when forced or the market is open, else arm for the open."""
        if force or self.quote_source.is_market_open():
            return self._fire()
        self.schedule()
        return None

    def _on_wakeup(self) -> None:
        try:
            self._fire()
        except Exception as e:
            # Timer threads have no caller to propagate to
            logger.exception(f"Scheduled execution pass failed: {e}")

    def _fire(self) -> object:
        with self._state_lock:
            self._firing += 1
            self._state = SchedulerState.FIRING
            self.next_wakeup = None

        try:
            return self.run_pass()
        finally:
            # Only the last overlapping firing leaves FIRING and re-arms
            with self._state_lock:
                self._firing -= 1
                last_out = self._firing == 0
                if last_out:
                    self._state = SchedulerState.IDLE
            if last_out:
                self.schedule_if_needed()
