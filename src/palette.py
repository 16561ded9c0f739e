from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from config import (
    CHANNEL_PIVOT,
    DIFF_STEP,
    GRID_SIZE,
    HUE_RANGE,
    LIGHTNESS_RANGE,
    MAX_DIFF,
    MIN_DIFF,
    SATURATION_RANGE,
)
from utils import clamp, hsl_to_hex

SATURATION = "saturation"
LIGHTNESS = "lightness"


@dataclass(frozen=True)
class Color:
    hue: int
    saturation: int
    lightness: int

    @property
    def css(self) -> str:
        return f"hsl({self.hue}, {self.saturation}%, {self.lightness}%)"

    @property
    def hex(self) -> str:
        return hsl_to_hex(self.hue, self.saturation, self.lightness)


@dataclass(frozen=True)
class ColorPair:
    base: Color
    target: Color

    @property
    def channel(self) -> str:
        """Name of the channel that differs between base and target."""
        if self.base.lightness != self.target.lightness:
            return LIGHTNESS
        return SATURATION

    @property
    def delta(self) -> int:
        lightness_delta = abs(self.base.lightness - self.target.lightness)
        return lightness_delta or abs(self.base.saturation - self.target.saturation)


@dataclass(frozen=True)
class Cell:
    index: int
    color: Color
    is_target: bool


@dataclass(frozen=True)
class Grid:
    size: int
    cells: tuple[Cell, ...]
    target_index: int

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def contains(self, index: int) -> bool:
        return 0 <= index < len(self.cells)

    def rows(self) -> list[tuple[Cell, ...]]:
        return [self.cells[i : i + self.size] for i in range(0, len(self.cells), self.size)]


def difficulty_delta(score: int) -> int:
    """Perceptual delta for a score: shrinks by one every few points, never below the floor."""
    if score < 0:
        raise ValueError("score must be non-negative.")
    return max(MIN_DIFF, MAX_DIFF - score // DIFF_STEP)


def _shift_away(value: int, diff: int) -> int:
    shifted = value - diff if value > CHANNEL_PIVOT else value + diff
    return clamp(shifted, 0, 100)


class ColorPairGenerator:
    """Produces base/target colors whose gap narrows as the score climbs."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def generate(self, score: int) -> ColorPair:
        diff = difficulty_delta(score)
        hue = self.rng.randrange(*HUE_RANGE)
        saturation = self.rng.randrange(*SATURATION_RANGE)
        lightness = self.rng.randrange(*LIGHTNESS_RANGE)

        base = Color(hue, saturation, lightness)
        if self.rng.random() < 0.5:
            target = Color(hue, saturation, _shift_away(lightness, diff))
        else:
            target = Color(hue, _shift_away(saturation, diff), lightness)
        return ColorPair(base=base, target=target)


class GridBuilder:
    """Lays out a square grid with a single odd cell."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def build(
        self,
        pair: ColorPair,
        size: int = GRID_SIZE,
        *,
        target_index: Optional[int] = None,
    ) -> Grid:
        if size < 1:
            raise ValueError("grid size must be at least 1.")
        count = size * size
        if target_index is None:
            target_index = self.rng.randrange(count)
        elif not 0 <= target_index < count:
            raise ValueError(f"target_index {target_index} outside a {size}x{size} grid.")

        cells = tuple(
            Cell(
                index=i,
                color=pair.target if i == target_index else pair.base,
                is_target=i == target_index,
            )
            for i in range(count)
        )
        return Grid(size=size, cells=cells, target_index=target_index)
