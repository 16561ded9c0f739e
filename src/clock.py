from __future__ import annotations

from config import MAX_TIME
from utils import clamp


class RoundClock:
    """Whole-second countdown for a round.

    ``tick`` and ``adjust`` return True only on the call that drains the
    clock; after that the clock is stopped and expiry is not reported again
    until the next ``start``.
    """

    def __init__(self, *, max_time: int = MAX_TIME) -> None:
        self.max_time = max_time
        self.time_remaining: int = 0
        self.running: bool = False
        self._expired: bool = False

    def start(self, initial: int) -> None:
        self.time_remaining = clamp(int(initial), 0, self.max_time)
        self.running = True
        self._expired = False

    def stop(self) -> None:
        self.running = False

    def tick(self) -> bool:
        if not self.running or self.time_remaining <= 0:
            return False
        self.time_remaining -= 1
        return self._check_expiry()

    def adjust(self, delta: int) -> bool:
        self.time_remaining = clamp(self.time_remaining + delta, 0, self.max_time)
        return self._check_expiry()

    @property
    def expired(self) -> bool:
        return self._expired

    def _check_expiry(self) -> bool:
        if self.running and self.time_remaining == 0 and not self._expired:
            self._expired = True
            self.running = False
            return True
        return False
