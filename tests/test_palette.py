import random

import pytest

from palette import (
    LIGHTNESS,
    SATURATION,
    Color,
    ColorPair,
    ColorPairGenerator,
    GridBuilder,
    difficulty_delta,
)


def test_difficulty_delta_steps_down_every_three_points():
    assert difficulty_delta(0) == 15
    assert difficulty_delta(2) == 15
    assert difficulty_delta(3) == 14
    assert difficulty_delta(41) == 2
    assert difficulty_delta(42) == 1
    assert difficulty_delta(1000) == 1


def test_difficulty_delta_is_non_increasing_and_floored():
    previous = difficulty_delta(0)
    for score in range(1, 200):
        current = difficulty_delta(score)
        assert current <= previous
        assert current >= 1
        previous = current


def test_difficulty_delta_rejects_negative_scores():
    with pytest.raises(ValueError):
        difficulty_delta(-1)


def test_generated_pairs_vary_exactly_one_channel(rng):
    generator = ColorPairGenerator(rng)
    channels = set()
    for score in range(0, 60):
        pair = generator.generate(score)
        base, target = pair.base, pair.target
        assert base.hue == target.hue
        changed = [
            base.saturation != target.saturation,
            base.lightness != target.lightness,
        ]
        assert changed.count(True) == 1
        assert pair.delta == difficulty_delta(score)
        channels.add(pair.channel)
    # Both channels show up over enough rounds
    assert channels == {SATURATION, LIGHTNESS}


def test_generated_base_stays_in_documented_ranges(rng):
    generator = ColorPairGenerator(rng)
    for _ in range(200):
        base = generator.generate(0).base
        assert 0 <= base.hue < 360
        assert 50 <= base.saturation < 80
        assert 40 <= base.lightness < 60


def test_target_moves_away_from_the_side_the_base_leans(rng):
    generator = ColorPairGenerator(rng)
    for _ in range(200):
        pair = generator.generate(0)
        channel = pair.channel
        base_value = getattr(pair.base, channel)
        target_value = getattr(pair.target, channel)
        if base_value > 50:
            assert target_value == base_value - 15
        else:
            assert target_value == base_value + 15
        assert 0 <= target_value <= 100


def test_same_seed_gives_same_pairs():
    first = ColorPairGenerator(random.Random(7)).generate(4)
    second = ColorPairGenerator(random.Random(7)).generate(4)
    assert first == second


def test_grid_has_n_squared_cells_and_one_target(rng):
    builder = GridBuilder(rng)
    pair = ColorPairGenerator(rng).generate(0)
    for size in (1, 2, 5, 8):
        grid = builder.build(pair, size)
        assert len(grid) == size * size
        targets = [cell for cell in grid if cell.is_target]
        assert len(targets) == 1
        assert targets[0].index == grid.target_index
        assert targets[0].color == pair.target
        assert all(cell.color == pair.base for cell in grid if not cell.is_target)
        assert [cell.index for cell in grid] == list(range(size * size))


def test_grid_is_deterministic_for_a_fixed_target_index():
    pair = ColorPair(base=Color(10, 60, 45), target=Color(10, 60, 60))
    first = GridBuilder().build(pair, 5, target_index=12)
    second = GridBuilder().build(pair, 5, target_index=12)
    assert first == second
    assert first[12].is_target


def test_grid_rows_split_by_size(rng):
    pair = ColorPairGenerator(rng).generate(0)
    grid = GridBuilder(rng).build(pair, 5)
    rows = grid.rows()
    assert len(rows) == 5
    assert all(len(row) == 5 for row in rows)


def test_grid_rejects_bad_arguments(rng):
    pair = ColorPairGenerator(rng).generate(0)
    with pytest.raises(ValueError):
        GridBuilder(rng).build(pair, 0)
    with pytest.raises(ValueError):
        GridBuilder(rng).build(pair, 5, target_index=25)


def test_color_renders_css_and_hex():
    color = Color(0, 100, 50)
    assert color.css == "hsl(0, 100%, 50%)"
    assert color.hex == "#ff0000"
