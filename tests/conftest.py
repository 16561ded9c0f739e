import heapq
import itertools
import os
import random
import sys

import pytest

# Ensure the flat modules under src/ are importable without installing
CURRENT_DIR = os.path.dirname(__file__)
SRC_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..', 'src'))
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from game import ColorSenseEngine  # noqa: E402


class ManualHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks only run when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay, callback):
        handle = ManualHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self):
        return [h for _, _, h in self._queue if not h.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                handle.callback()
        self.now = target


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def sounds():
    return []


@pytest.fixture()
def engine(scheduler, rng, sounds):
    session = ColorSenseEngine(scheduler=scheduler, rng=rng, on_sound=sounds.append)
    yield session
    session.close()


@pytest.fixture()
def miss_index():
    """Returns a helper picking any cell that is not the current target."""
    def pick(session):
        return (session.grid.target_index + 1) % len(session.grid)
    return pick
