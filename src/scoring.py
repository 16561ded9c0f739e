from __future__ import annotations

from dataclasses import dataclass

from config import CRITIQUES, HIT_SCORE, HIT_TIME_BONUS, LEVEL_STEP, MISS_TIME_PENALTY


@dataclass(frozen=True)
class GuessOutcome:
    hit: bool
    score_delta: int
    time_delta: int


class ScoringPolicy:
    """Maps a guess to its score and clock adjustments."""

    def __init__(
        self,
        *,
        hit_score: int = HIT_SCORE,
        hit_time_bonus: int = HIT_TIME_BONUS,
        miss_time_penalty: int = MISS_TIME_PENALTY,
    ) -> None:
        self.hit_score = hit_score
        self.hit_time_bonus = hit_time_bonus
        self.miss_time_penalty = miss_time_penalty

    def on_guess(self, hit: bool) -> GuessOutcome:
        if hit:
            return GuessOutcome(hit=True, score_delta=self.hit_score, time_delta=self.hit_time_bonus)
        return GuessOutcome(hit=False, score_delta=0, time_delta=-self.miss_time_penalty)


def level_for(score: int) -> int:
    return max(0, score) // LEVEL_STEP + 1


def critique_for(score: int) -> str:
    for limit, remark in CRITIQUES:
        if limit is None or score < limit:
            return remark
    return CRITIQUES[-1][1]
