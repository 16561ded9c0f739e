from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from clock import RoundClock
from config import GRID_SIZE, MAX_TIME, START_TIME, TICK_INTERVAL
from feedback import CLICK, CORRECT, WRONG, FeedbackEventBus, Position
from palette import ColorPair, ColorPairGenerator, Grid, GridBuilder
from scheduler import LoopScheduler, Scheduler, TaskSet
from scoring import GuessOutcome, ScoringPolicy

logger = logging.getLogger(__name__)

IDLE = "idle"
PLAYING = "playing"
GAMEOVER = "gameover"

_TICK_KEY = "tick"
_ORIGIN: Position = (0.0, 0.0)


@dataclass(frozen=True)
class SessionSnapshot:
    score: int
    time_remaining: int
    state: str
    best_score: int
    cheat_mode: bool
    sound_enabled: bool


class ColorSenseEngine:
    """Runs the round lifecycle: idle -> playing -> gameover.

    All calls are expected on one event loop. The countdown is a single
    pending callback that is re-armed after each tick and cancelled whenever
    the session leaves ``playing``.
    """

    def __init__(
        self,
        *,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        grid_size: int = GRID_SIZE,
        start_time: int = START_TIME,
        max_time: int = MAX_TIME,
        tick_interval: float = TICK_INTERVAL,
        scoring: Optional[ScoringPolicy] = None,
        on_sound: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.scheduler = scheduler or LoopScheduler()
        self.rng = rng or random.Random()
        self.grid_size = grid_size
        self.start_time = start_time
        self.tick_interval = tick_interval
        self.on_sound = on_sound

        self.colors = ColorPairGenerator(self.rng)
        self.grids = GridBuilder(self.rng)
        self.clock = RoundClock(max_time=max_time)
        self.scoring = scoring or ScoringPolicy()
        self.feedback = FeedbackEventBus(scheduler=self.scheduler, rng=self.rng)

        self.state: str = IDLE
        self.score: int = 0
        self.best_score: int = 0
        self.cheat_mode: bool = False
        self.sound_enabled: bool = True
        self.pair: Optional[ColorPair] = None
        self.grid: Optional[Grid] = None

        self._tick = TaskSet(self.scheduler)
        self._listeners: list[Callable[[SessionSnapshot], None]] = []

    # ------------------------------------------------------------------#
    # Read side
    # ------------------------------------------------------------------#

    @property
    def time_remaining(self) -> int:
        return self.clock.time_remaining

    @property
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            score=self.score,
            time_remaining=self.clock.time_remaining,
            state=self.state,
            best_score=self.best_score,
            cheat_mode=self.cheat_mode,
            sound_enabled=self.sound_enabled,
        )

    @property
    def tick_pending(self) -> bool:
        return _TICK_KEY in self._tick

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------#
    # Intents
    # ------------------------------------------------------------------#

    def start_round(self, position: Position = _ORIGIN) -> None:
        self._tick.cancel(_TICK_KEY)
        self.score = 0
        self.cheat_mode = False
        self.clock.start(self.start_time)
        self.state = PLAYING
        self._new_grid()
        self._cue(CLICK, position)
        self._schedule_tick()
        logger.info(f"Round started, target at cell {self.grid.target_index}")
        self._publish()

    def submit_guess(self, cell_index: int, position: Position = _ORIGIN) -> Optional[GuessOutcome]:
        if self.state != PLAYING or self.grid is None:
            logger.debug(f"Ignoring guess on cell {cell_index} while {self.state}")
            return None
        if not self.grid.contains(cell_index):
            logger.debug(f"Ignoring guess on cell {cell_index} outside the grid")
            return None

        outcome = self.scoring.on_guess(self.grid[cell_index].is_target)
        self.score += outcome.score_delta
        expired = self.clock.adjust(outcome.time_delta)

        if outcome.hit:
            self._cue(CORRECT, position)
            self._new_grid()
        else:
            self._cue(WRONG, position)
            self.feedback.shake()
        self.feedback.emit(CORRECT if outcome.hit else WRONG, outcome.time_delta)

        if expired:
            self._game_over()
        self._publish()
        return outcome

    def set_cheat_mode(self, enabled: bool, position: Position = _ORIGIN) -> None:
        if self.state != PLAYING:
            return
        self.cheat_mode = bool(enabled)
        self._cue(CLICK, position)
        self._publish()

    def return_home(self, position: Position = _ORIGIN) -> None:
        if self.state == IDLE:
            return
        self._tick.cancel(_TICK_KEY)
        self.clock.stop()
        self.state = IDLE
        self._cue(CLICK, position)
        logger.info(f"Returned home with score {self.score}")
        self._publish()

    def toggle_sound(self, enabled: bool, position: Position = _ORIGIN) -> None:
        self.sound_enabled = bool(enabled)
        self._cue(CLICK, position)
        self._publish()

    def close(self) -> None:
        self._tick.cancel_all()
        self.clock.stop()
        self.feedback.close()

    # ------------------------------------------------------------------#
    # Internal helpers
    # ------------------------------------------------------------------#

    def _new_grid(self) -> None:
        self.pair = self.colors.generate(self.score)
        self.grid = self.grids.build(self.pair, self.grid_size)

    def _schedule_tick(self) -> None:
        self._tick.schedule(_TICK_KEY, self.tick_interval, self._on_tick)

    def _on_tick(self) -> None:
        if self.state != PLAYING:
            return
        expired = self.clock.tick()
        if expired:
            self._game_over()
        else:
            self._schedule_tick()
        self._publish()

    def _game_over(self) -> None:
        self._tick.cancel(_TICK_KEY)
        self.clock.stop()
        self.state = GAMEOVER
        if self.score > self.best_score:
            self.best_score = self.score
            logger.info(f"New best score: {self.best_score}")
        logger.info(f"Game over with score {self.score}")

    def _cue(self, kind: str, position: Position) -> None:
        self.feedback.emit(kind, position)
        if self.sound_enabled and self.on_sound is not None:
            self.on_sound(kind)

    def _publish(self) -> None:
        snapshot = self.snapshot
        for listener in list(self._listeners):
            listener(snapshot)
