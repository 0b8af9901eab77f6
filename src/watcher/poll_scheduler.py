"""
Fixed-interval poll scheduler.

A daemon ticker thread fires every ``interval`` seconds and hands the cycle to
a single worker thread. A tick that arrives while a cycle is still running is
dropped, so at most one cycle is ever in flight and a slow cycle never queues
up a backlog of catch-up runs.

stop() halts the ticker and refuses further submissions. A cycle already
running is not interrupted; the owner decides whether its result still counts.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

log = logging.getLogger(__name__)


class PollScheduler:
    """
    Usage:
        scheduler = PollScheduler(watcher.run_cycle, interval=0.1)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(self, cycle: Callable[[], None], interval: float, name: str = "fs-poll") -> None:
        self._cycle = cycle
        self._interval = interval
        self._name = name
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._ticker: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._in_flight = False

        self.ticks = 0
        self.skipped_ticks = 0
        self.cycles_started = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None

    @property
    def is_processing(self) -> bool:
        return self._in_flight

    def start(self) -> bool:
        """Start ticking. Returns False (and does nothing) if already running."""
        with self._lock:
            if self._stop_event is not None:
                return False
            stop_event = threading.Event()
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self._name}-cycle")
            ticker = threading.Thread(
                target=self._tick_loop,
                args=(stop_event, executor),
                daemon=True,
                name=f"{self._name}-ticker",
            )
            self._stop_event = stop_event
            self._executor = executor
            self._ticker = ticker
            ticker.start()
        log.info("Poll scheduler started (every %.0fms)", self._interval * 1000)
        return True

    def stop(self) -> None:
        """Stop ticking. Safe to call from inside a cycle or when not running."""
        with self._lock:
            if self._stop_event is None:
                return
            self._stop_event.set()
            executor, ticker = self._executor, self._ticker
            self._stop_event = None
            self._executor = None
            self._ticker = None
        executor.shutdown(wait=False)
        if ticker is not threading.current_thread():
            ticker.join(timeout=self._interval + 1)
        log.info("Poll scheduler stopped")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _tick_loop(self, stop_event: threading.Event, executor: ThreadPoolExecutor) -> None:
        while not stop_event.wait(self._interval):
            self._tick(stop_event, executor)

    def _tick(self, stop_event: threading.Event, executor: ThreadPoolExecutor) -> None:
        with self._lock:
            if stop_event.is_set():
                return
            self.ticks += 1
            if self._in_flight:
                self.skipped_ticks += 1
                log.debug("Cycle still running, skipping tick")
                return
            self._in_flight = True
            self.cycles_started += 1
            try:
                executor.submit(self._run_cycle)
            except RuntimeError:
                # Executor shut down between the stop check and the submit
                self._in_flight = False

    def _run_cycle(self) -> None:
        try:
            self._cycle()
        except Exception:
            log.exception("Error during poll cycle")
        finally:
            with self._lock:
                self._in_flight = False
