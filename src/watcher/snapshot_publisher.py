"""
Two-stage snapshot: raw committed state and a debounced published view.

update() replaces the raw mapping and restarts a quiet-period timer; the
published view catches up only once updates stop arriving for
``debounce_interval`` seconds. publish_now() skips the wait. Mutations use it
so a caller sees its own write immediately.

Snapshots are replaced whole. Observers receive a copy of every published
mapping.
"""

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)

SnapshotObserver = Callable[[Dict[str, str]], None]


class SnapshotPublisher:
    def __init__(self, debounce_interval: float) -> None:
        self._debounce = debounce_interval
        self._lock = threading.Lock()
        self._raw: Dict[str, str] = {}
        self._published: Dict[str, str] = {}
        self._timer: Optional[threading.Timer] = None
        self._version = 0
        self._observers: List[SnapshotObserver] = []

    @property
    def raw(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._raw)

    @property
    def published(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._published)

    @property
    def pending(self) -> bool:
        """True while a debounced publish is waiting for its quiet period."""
        with self._lock:
            return self._timer is not None

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Register an observer; returns a function that unsubscribes it."""
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def update(self, mapping: Mapping[str, str]) -> None:
        """Replace the raw snapshot and (re)start the debounce timer."""
        if self._debounce <= 0:
            self.publish_now(mapping)
            return
        with self._lock:
            self._raw = dict(mapping)
            self._version += 1
            self._cancel_timer()
            timer = threading.Timer(self._debounce, self._flush, args=(self._version,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def publish_now(self, mapping: Mapping[str, str]) -> None:
        """Replace raw and published snapshots immediately, cancelling any pending publish."""
        with self._lock:
            self._raw = dict(mapping)
            self._version += 1
            self._cancel_timer()
            self._published = self._raw
            snapshot = self._published
        self._notify(snapshot)

    def cancel(self) -> None:
        with self._lock:
            self._version += 1
            self._cancel_timer()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _flush(self, version: int) -> None:
        with self._lock:
            # A newer update or publish superseded this timer while it fired
            if version != self._version:
                return
            self._timer = None
            self._published = self._raw
            snapshot = self._published
        self._notify(snapshot)

    def _notify(self, snapshot: Dict[str, str]) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(dict(snapshot))
            except Exception:
                log.exception("Snapshot observer failed")
