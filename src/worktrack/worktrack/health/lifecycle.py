from __future__ import annotations

import threading
import time
from typing import Callable


class Lifecycle:
    """Process state shared by the health endpoints and the shutdown sequence."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started = clock()
        self._shutting_down = False
        self._in_flight = 0
        self._cond = threading.Condition()

    @property
    def uptime_seconds(self) -> float:
        return round(self._clock() - self._started, 3)

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    def begin_shutdown(self) -> None:
        with self._cond:
            self._shutting_down = True
            self._cond.notify_all()

    def request_started(self) -> None:
        with self._cond:
            self._in_flight += 1

    def request_finished(self) -> None:
        with self._cond:
            self._in_flight = max(0, self._in_flight - 1)
            if self._in_flight == 0:
                self._cond.notify_all()

    def wait_for_drain(self, timeout: float) -> bool:
        """Block until no request is in flight; False when the grace window ran out."""

        deadline = time.monotonic() + max(0.0, float(timeout))
        with self._cond:
            while self._in_flight > 0:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True
