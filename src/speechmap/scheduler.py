"""Recurring ingestion: once at start, then on every interval boundary."""

from __future__ import annotations

import threading
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.clock import Clock, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

log = getLogger(__name__)

DEFAULT_INTERVAL = timedelta(hours=1)


class StartToken:
    """Owned by the entry point; guards against starting the schedule twice."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def claim(self) -> bool:
        """Return ``True`` exactly once."""

        with self._lock:
            if self._claimed:
                return False
            self._claimed = True
            return True


def seconds_until_next_run(now: datetime, interval: timedelta, *, align: bool) -> float:
    """Delay before the next run; aligned runs fall on multiples of ``interval`` since the epoch."""

    period = interval.total_seconds()
    if not align:
        return period
    remainder = now.timestamp() % period
    return period - remainder if remainder else period


class IntervalScheduler:
    """Run ``job`` in a background thread until ``stop()`` is called.

    A failing run is logged and the schedule continues. Runs never overlap.
    """

    def __init__(
        self,
        job: Callable[[], object],
        interval: timedelta = DEFAULT_INTERVAL,
        *,
        align_to_interval: bool = True,
        clock: Clock = utcnow,
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self._job = job
        self._interval = interval
        self._align = align_to_interval
        self._clock = clock
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, token: StartToken) -> bool:
        if not token.claim():
            log.info("Scheduler already started; ignoring start request")
            return False

        log.info(
            "Scheduler started: interval=%s, aligned=%s",
            self._interval,
            self._align,
        )
        self._thread = threading.Thread(target=self._loop, name="speechmap-scheduler", daemon=True)
        self._thread.start()
        return True

    def stop(self, *, timeout: float | None = None) -> None:
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        log.info("Scheduler stopped")

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _loop(self) -> None:
        self._run_once("initial")
        while not self._stopped.is_set():
            delay = seconds_until_next_run(self._clock(), self._interval, align=self._align)
            if self._stopped.wait(delay):
                break
            self._run_once("scheduled")

    def _run_once(self, label: str) -> None:
        log.info("Running %s ingestion", label)
        try:
            self._job()
        except Exception:  # noqa: BLE001
            log.exception("%s ingestion failed", label.capitalize())
        finally:
            self.runs += 1
