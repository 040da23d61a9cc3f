"""Debounced "something changed" notifications.

Writers call :meth:`ChangeBus.schedule` after every effective mutation. The
first call arms a timer for the debounce window; calls that arrive while the
timer is armed only replace the pending reason. When the timer fires a single
``db-changed`` event is delivered to every listener.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from ..core.constants import DEFAULT_DEBOUNCE_MS

log = logging.getLogger(__name__)

DEFAULT_REASON = "db-write"


@dataclass(frozen=True)
class ChangeEvent:
    reason: str
    ts: int
    type: str = "db-changed"

    def to_dict(self) -> dict:
        return asdict(self)


Listener = Callable[[ChangeEvent], None]


class ChangeBus:
    def __init__(
        self,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
        clock: Callable[[], float] = time.time,
    ):
        self._window = max(0, int(debounce_ms)) / 1000.0
        self._timer_factory = timer_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._listeners: set[Listener] = set()
        self._timer: Optional[threading.Timer] = None
        self._pending_reason = DEFAULT_REASON
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        if not callable(listener):
            return lambda: None
        with self._lock:
            self._listeners.add(listener)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.discard(listener)

        return unsubscribe

    def schedule(self, reason: str = DEFAULT_REASON) -> None:
        with self._lock:
            if self._closed:
                return
            self._pending_reason = reason or DEFAULT_REASON
            if self._timer is not None:
                return
            timer = self._timer_factory(self._window, self._fire)
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            reason = self._pending_reason
        self.notify(reason)

    def notify(self, reason: str = DEFAULT_REASON) -> ChangeEvent:
        event = ChangeEvent(reason=reason or DEFAULT_REASON, ts=int(self._clock() * 1000))
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                log.warning("db-change listener failed: %s", exc)
        return event

    def close(self) -> None:
        """Drop a pending notification and refuse new ones (shutdown)."""

        with self._lock:
            self._closed = True
            timer, self._timer = self._timer, None
            self._listeners.clear()
        if timer is not None:
            timer.cancel()
