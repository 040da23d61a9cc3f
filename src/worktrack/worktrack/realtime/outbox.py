"""Per-connection send queue.

Every desktop socket gets one writer thread draining a bounded queue, so a
peer that stops reading never blocks the bus timer, the heartbeat or other
clients. When the queue is full the frame is dropped for that peer only.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from ..core.constants import DEFAULT_OUTBOX_CAPACITY

log = logging.getLogger(__name__)


class Outbox:
    def __init__(self, *, capacity: int = DEFAULT_OUTBOX_CAPACITY, name: str = "desktop-outbox"):
        self._capacity = max(1, int(capacity))
        self._items: deque[Callable[[], None]] = deque()
        self._cond = threading.Condition()
        self._busy = False
        self._stopped = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._items) + (1 if self._busy else 0)

    def put(self, action: Callable[[], None]) -> bool:
        """Queue ``action`` for the writer thread; False when stopped or full."""

        with self._cond:
            if self._stopped or len(self._items) >= self._capacity:
                return False
            self._items.append(action)
            self._cond.notify_all()
            return True

    def drain(self, timeout: float) -> bool:
        """Wait until everything queued so far has been written."""

        deadline = time.monotonic() + timeout
        with self._cond:
            while self._items or self._busy:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True

    def stop(self) -> None:
        """Refuse new work; the writer exits once the queue is empty."""

        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    def join(self, timeout: float) -> None:
        self._thread.join(timeout=max(0.0, timeout))

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._items and not self._stopped:
                    self._cond.wait()
                if not self._items:
                    return
                action = self._items.popleft()
                self._busy = True
            try:
                action()
            except Exception:
                log.exception("Desktop outbox action failed")
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()
