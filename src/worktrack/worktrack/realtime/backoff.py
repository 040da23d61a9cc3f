from __future__ import annotations

import random
import time
from typing import Callable, Optional


class ReconnectBackoff:
    """Exponential reconnect delay with symmetric jitter.

    Delays double from ``minimum`` up to ``maximum``; each one is spread by
    ``±jitter``. A connection that stayed up for ``stable_after`` seconds
    resets the sequence.
    """

    def __init__(
        self,
        *,
        minimum: float = 1.0,
        maximum: float = 30.0,
        jitter: float = 0.2,
        stable_after: float = 60.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.minimum = float(minimum)
        self.maximum = float(maximum)
        self.jitter = float(jitter)
        self.stable_after = float(stable_after)
        self._rng = rng or random.Random()
        self._clock = clock
        self._attempt = 0
        self._connected_at: Optional[float] = None

    @property
    def attempt(self) -> int:
        return self._attempt

    def base_delay(self, attempt: Optional[int] = None) -> float:
        n = self._attempt if attempt is None else attempt
        return min(self.maximum, self.minimum * (2 ** n))

    def next_delay(self) -> float:
        base = self.base_delay()
        self._attempt += 1
        spread = base * self.jitter
        return max(0.0, base + self._rng.uniform(-spread, spread))

    def connected(self) -> None:
        self._connected_at = self._clock()

    def disconnected(self) -> None:
        if self._connected_at is not None and self._clock() - self._connected_at >= self.stable_after:
            self.reset()
        self._connected_at = None

    def reset(self) -> None:
        self._attempt = 0
