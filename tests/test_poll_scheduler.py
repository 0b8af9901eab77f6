"""
Tests for watcher/poll_scheduler.py.

Timing-based: intervals are short and assertions leave generous slack.
"""

import sys
import threading
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from watcher.poll_scheduler import PollScheduler


class _SlowCycle:
    def __init__(self, duration: float):
        self.duration = duration
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.runs = 0

    def __call__(self):
        with self.lock:
            self.active += 1
            self.runs += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(self.duration)
        finally:
            with self.lock:
                self.active -= 1


class TestPollScheduler:
    def test_slow_cycles_never_overlap(self):
        cycle = _SlowCycle(0.25)
        scheduler = PollScheduler(cycle, interval=0.1)
        scheduler.start()
        try:
            time.sleep(0.9)
        finally:
            scheduler.stop()

        assert cycle.peak == 1
        assert scheduler.cycles_started >= 2
        assert scheduler.skipped_ticks >= 1
        assert scheduler.ticks == scheduler.cycles_started + scheduler.skipped_ticks

    def test_fast_cycles_run_every_tick(self):
        cycle = _SlowCycle(0.0)
        scheduler = PollScheduler(cycle, interval=0.05)
        scheduler.start()
        try:
            time.sleep(0.4)
        finally:
            scheduler.stop()

        assert cycle.runs >= 3

    def test_start_is_idempotent(self):
        scheduler = PollScheduler(lambda: None, interval=10)
        try:
            assert scheduler.start() is True
            assert scheduler.start() is False
            assert scheduler.is_running
        finally:
            scheduler.stop()
        assert not scheduler.is_running

    def test_stop_when_not_running_is_noop(self):
        scheduler = PollScheduler(lambda: None, interval=10)
        scheduler.stop()
        assert not scheduler.is_running

    def test_restart_after_stop(self):
        scheduler = PollScheduler(lambda: None, interval=10)
        scheduler.start()
        scheduler.stop()
        assert scheduler.start() is True
        scheduler.stop()

    def test_failing_cycle_keeps_scheduler_alive(self):
        calls = []

        def cycle():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler = PollScheduler(cycle, interval=0.05)
        scheduler.start()
        try:
            time.sleep(0.4)
        finally:
            scheduler.stop()

        assert len(calls) >= 2
        assert not scheduler.is_processing

    def test_stop_from_inside_a_cycle(self):
        stopped = threading.Event()
        scheduler = None

        def cycle():
            scheduler.stop()
            stopped.set()

        scheduler = PollScheduler(cycle, interval=0.05)
        scheduler.start()
        assert stopped.wait(2.0)
        assert not scheduler.is_running

    def test_no_ticks_after_stop(self):
        cycle = _SlowCycle(0.0)
        scheduler = PollScheduler(cycle, interval=0.05)
        scheduler.start()
        time.sleep(0.2)
        scheduler.stop()
        runs = cycle.runs

        time.sleep(0.2)
        assert cycle.runs == runs
