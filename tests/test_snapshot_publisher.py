"""Tests for watcher/snapshot_publisher.py."""

import sys
import threading
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from watcher.snapshot_publisher import SnapshotPublisher


class _Observer:
    def __init__(self):
        self.snapshots = []
        self.event = threading.Event()

    def __call__(self, snapshot):
        self.snapshots.append(snapshot)
        self.event.set()


class TestDebounce:
    def test_update_publishes_after_quiet_period(self):
        publisher = SnapshotPublisher(debounce_interval=0.05)
        observer = _Observer()
        publisher.subscribe(observer)

        publisher.update({"p/a": "1"})
        assert publisher.raw == {"p/a": "1"}
        assert publisher.published == {}
        assert publisher.pending

        assert observer.event.wait(1.0)
        assert publisher.published == {"p/a": "1"}
        assert not publisher.pending

    def test_burst_coalesces_into_one_publish(self):
        publisher = SnapshotPublisher(debounce_interval=0.1)
        observer = _Observer()
        publisher.subscribe(observer)

        for i in range(5):
            publisher.update({"p/a": str(i)})

        assert observer.event.wait(1.0)
        time.sleep(0.2)
        assert observer.snapshots == [{"p/a": "4"}]

    def test_zero_interval_publishes_immediately(self):
        publisher = SnapshotPublisher(debounce_interval=0)
        observer = _Observer()
        publisher.subscribe(observer)

        publisher.update({"p/a": "1"})

        assert publisher.published == {"p/a": "1"}
        assert observer.snapshots == [{"p/a": "1"}]


class TestPublishNow:
    def test_supersedes_pending_update(self):
        publisher = SnapshotPublisher(debounce_interval=0.05)
        observer = _Observer()
        publisher.subscribe(observer)

        publisher.update({"p/a": "stale"})
        publisher.publish_now({"p/a": "fresh"})
        assert publisher.published == {"p/a": "fresh"}

        time.sleep(0.15)
        assert publisher.published == {"p/a": "fresh"}
        assert observer.snapshots == [{"p/a": "fresh"}]

    def test_cancel_drops_pending_update(self):
        publisher = SnapshotPublisher(debounce_interval=0.05)
        publisher.update({"p/a": "1"})
        publisher.cancel()

        time.sleep(0.15)
        assert publisher.published == {}


class TestObservers:
    def test_snapshots_are_copies(self):
        publisher = SnapshotPublisher(debounce_interval=0)
        source = {"p/a": "1"}
        publisher.publish_now(source)

        source["p/b"] = "2"
        view = publisher.published
        view["p/c"] = "3"

        assert publisher.published == {"p/a": "1"}

    def test_failing_observer_does_not_block_others(self):
        publisher = SnapshotPublisher(debounce_interval=0)
        observer = _Observer()

        def broken(snapshot):
            raise RuntimeError("boom")

        publisher.subscribe(broken)
        publisher.subscribe(observer)
        publisher.publish_now({"p/a": "1"})

        assert observer.snapshots == [{"p/a": "1"}]

    def test_unsubscribe(self):
        publisher = SnapshotPublisher(debounce_interval=0)
        observer = _Observer()
        unsubscribe = publisher.subscribe(observer)

        publisher.publish_now({"p/a": "1"})
        unsubscribe()
        unsubscribe()
        publisher.publish_now({"p/a": "2"})

        assert observer.snapshots == [{"p/a": "1"}]
