from __future__ import annotations

import itertools
import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from config import (
    BURST_SIZE,
    CLICK_BURST_SIZE,
    PARTICLE_COLORS,
    PARTICLE_LIFETIME,
    PARTICLE_SPREAD,
    SHAKE_DURATION,
    TIME_FEEDBACK_LIFETIME,
)
from scheduler import Scheduler, TaskSet

logger = logging.getLogger(__name__)

CORRECT = "correct"
WRONG = "wrong"
CLICK = "click"
KINDS = (CORRECT, WRONG, CLICK)

Position = tuple[float, float]
Payload = Union[Position, int]

_SHAKE_KEY = "shake"


@dataclass(frozen=True)
class FeedbackEvent:
    id: int
    kind: str
    payload: Payload

    @property
    def is_time_delta(self) -> bool:
        return isinstance(self.payload, int)


@dataclass(frozen=True)
class Particle:
    id: int
    event_id: int
    kind: str
    x: float
    y: float
    dx: float
    dy: float
    rotation: float
    color: str


def burst_size(kind: str) -> int:
    return CLICK_BURST_SIZE if kind == CLICK else BURST_SIZE


class FeedbackEventBus:
    """Short-lived visual cues that retire themselves.

    Every emission schedules its own removal, so presentation only reads
    ``events``/``particles``/``shaking`` and never has to clean up.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        particle_lifetime: float = PARTICLE_LIFETIME,
        time_feedback_lifetime: float = TIME_FEEDBACK_LIFETIME,
        shake_duration: float = SHAKE_DURATION,
    ) -> None:
        self.rng = rng or random.Random()
        self.particle_lifetime = particle_lifetime
        self.time_feedback_lifetime = time_feedback_lifetime
        self.shake_duration = shake_duration
        self.shaking: bool = False

        self._tasks = TaskSet(scheduler)
        self._ids = itertools.count(1)
        self._particle_ids = itertools.count(1)
        self._events: dict[int, FeedbackEvent] = {}
        self._particles: dict[int, tuple[Particle, ...]] = {}
        self._pending: deque[FeedbackEvent] = deque()
        self._listeners: list[Callable[[FeedbackEvent], None]] = []
        self._retire_listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------#
    # Emission
    # ------------------------------------------------------------------#

    def emit(self, kind: str, payload: Payload) -> int:
        if kind not in KINDS:
            raise ValueError(f"Unknown feedback kind: {kind!r}")

        event = FeedbackEvent(id=next(self._ids), kind=kind, payload=payload)
        self._events[event.id] = event
        if event.is_time_delta:
            lifetime = self.time_feedback_lifetime
        else:
            self._particles[event.id] = tuple(self._burst(event))
            lifetime = self.particle_lifetime

        self._tasks.schedule(event.id, lifetime, lambda: self._expire(event.id))
        self._pending.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event.id

    def shake(self) -> None:
        self.shaking = True
        self._tasks.schedule(_SHAKE_KEY, self.shake_duration, self._stop_shaking)

    def _burst(self, event: FeedbackEvent) -> Iterator[Particle]:
        x, y = event.payload
        color = PARTICLE_COLORS[event.kind]
        still = event.kind == CLICK
        for _ in range(burst_size(event.kind)):
            yield Particle(
                id=next(self._particle_ids),
                event_id=event.id,
                kind=event.kind,
                x=x,
                y=y,
                dx=0.0 if still else self.rng.uniform(-PARTICLE_SPREAD, PARTICLE_SPREAD),
                dy=0.0 if still else self.rng.uniform(-PARTICLE_SPREAD, PARTICLE_SPREAD),
                rotation=0.0 if still else self.rng.uniform(0, 360),
                color=color,
            )

    # ------------------------------------------------------------------#
    # Views
    # ------------------------------------------------------------------#

    @property
    def events(self) -> list[FeedbackEvent]:
        return list(self._events.values())

    @property
    def time_feedbacks(self) -> list[FeedbackEvent]:
        return [event for event in self._events.values() if event.is_time_delta]

    @property
    def particles(self) -> list[Particle]:
        return [particle for batch in self._particles.values() for particle in batch]

    def particles_for(self, event_id: int) -> tuple[Particle, ...]:
        return self._particles.get(event_id, ())

    def drain(self) -> Iterator[FeedbackEvent]:
        """Yield live events emitted since the last drain, consuming them as it goes.

        Retired events are dropped from the queue, so undrained cues never pile up.
        """
        while self._pending:
            yield self._pending.popleft()

    def subscribe(self, listener: Callable[[FeedbackEvent], None]) -> None:
        self._listeners.append(listener)

    def on_retire(self, listener: Callable[[], None]) -> None:
        """Call ``listener`` whenever a cue disappears so views can redraw."""
        self._retire_listeners.append(listener)

    # ------------------------------------------------------------------#
    # Retirement
    # ------------------------------------------------------------------#

    def close(self) -> None:
        self._tasks.cancel_all()
        self._events.clear()
        self._particles.clear()
        self._pending.clear()
        self.shaking = False

    def _expire(self, event_id: int) -> None:
        self._events.pop(event_id, None)
        self._particles.pop(event_id, None)
        self._pending = deque(event for event in self._pending if event.id != event_id)
        logger.debug(f"Feedback event {event_id} expired")
        self._notify_retired()

    def _stop_shaking(self) -> None:
        self.shaking = False
        self._notify_retired()

    def _notify_retired(self) -> None:
        for listener in list(self._retire_listeners):
            listener()
