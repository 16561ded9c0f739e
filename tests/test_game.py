import asyncio

from feedback import CLICK, CORRECT, WRONG
from game import GAMEOVER, IDLE, PLAYING, ColorSenseEngine
from palette import difficulty_delta


def test_engine_starts_idle(engine):
    snapshot = engine.snapshot
    assert snapshot.state == IDLE
    assert snapshot.score == 0
    assert snapshot.best_score == 0
    assert engine.grid is None
    assert not engine.tick_pending


def test_start_round_resets_session(engine):
    engine.start_round()
    snapshot = engine.snapshot
    assert snapshot.state == PLAYING
    assert snapshot.score == 0
    assert snapshot.time_remaining == 15
    assert snapshot.cheat_mode is False
    assert len(engine.grid) == 25
    assert engine.pair.delta == difficulty_delta(0)
    assert engine.tick_pending


def test_hit_scores_and_regenerates_grid(engine):
    engine.start_round()
    first_grid = engine.grid
    outcome = engine.submit_guess(engine.grid.target_index)
    assert outcome.hit
    assert engine.score == 1
    # 15 + 2 is clamped back to the maximum
    assert engine.time_remaining == 15
    assert engine.grid is not first_grid
    assert engine.pair.delta == difficulty_delta(1) == 15


def test_difficulty_escalates_with_hits(engine):
    engine.start_round()
    for _ in range(6):
        engine.submit_guess(engine.grid.target_index)
    assert engine.score == 6
    assert engine.pair.delta == 13


def test_miss_keeps_grid_and_costs_time(engine, miss_index):
    engine.start_round()
    grid = engine.grid
    outcome = engine.submit_guess(miss_index(engine))
    assert not outcome.hit
    assert engine.grid is grid
    assert engine.score == 0
    assert engine.time_remaining == 12
    assert engine.feedback.shaking


def test_miss_at_two_seconds_ends_round_immediately(engine, scheduler, miss_index):
    engine.start_round()
    scheduler.advance(13)
    assert engine.time_remaining == 2
    engine.submit_guess(miss_index(engine))
    assert engine.time_remaining == 0
    assert engine.state == GAMEOVER
    assert not engine.tick_pending


def test_end_to_end_round(engine, scheduler, miss_index):
    engine.start_round()
    assert (engine.state, engine.score, engine.time_remaining) == (PLAYING, 0, 15)

    engine.submit_guess(engine.grid.target_index)
    assert (engine.score, engine.time_remaining) == (1, 15)

    remaining = []
    for _ in range(3):
        engine.submit_guess(miss_index(engine))
        remaining.append(engine.time_remaining)
    assert remaining == [12, 9, 6]

    scheduler.advance(4)
    assert engine.time_remaining == 2
    engine.submit_guess(miss_index(engine))
    assert engine.time_remaining == 0
    assert engine.state == GAMEOVER
    assert engine.best_score == 1


def test_ticks_drain_the_clock_then_stop(engine, scheduler):
    engine.start_round()
    for expected in range(14, 0, -1):
        scheduler.advance(1)
        assert engine.time_remaining == expected
        assert engine.state == PLAYING
    scheduler.advance(1)
    assert engine.time_remaining == 0
    assert engine.state == GAMEOVER
    scheduler.advance(5)
    assert engine.time_remaining == 0
    assert not engine.tick_pending


def test_restart_cancels_the_outstanding_tick(engine, scheduler):
    engine.start_round()
    scheduler.advance(0.5)
    engine.start_round()
    scheduler.advance(0.6)
    # The tick from the first round would have fired at t=1.0
    assert engine.time_remaining == 15
    scheduler.advance(0.4)
    assert engine.time_remaining == 14


def test_best_score_only_moves_up(engine, scheduler):
    engine.start_round()
    engine.submit_guess(engine.grid.target_index)
    engine.submit_guess(engine.grid.target_index)
    scheduler.advance(15)
    assert engine.best_score == 2

    engine.start_round()
    scheduler.advance(15)
    assert engine.state == GAMEOVER
    assert engine.score == 0
    assert engine.best_score == 2


def test_guesses_outside_playing_are_ignored(engine, scheduler):
    assert engine.submit_guess(0) is None

    engine.start_round()
    scheduler.advance(15)
    assert engine.state == GAMEOVER
    assert engine.submit_guess(engine.grid.target_index) is None
    assert engine.score == 0


def test_out_of_range_guess_is_ignored(engine):
    engine.start_round()
    assert engine.submit_guess(25) is None
    assert engine.submit_guess(-1) is None
    assert engine.time_remaining == 15


def test_return_home_from_idle_is_a_no_op(engine, sounds):
    before = engine.snapshot
    engine.return_home()
    assert engine.snapshot == before
    assert sounds == []


def test_return_home_abandons_round(engine, scheduler):
    engine.start_round()
    engine.submit_guess(engine.grid.target_index)
    engine.return_home()
    assert engine.state == IDLE
    assert engine.best_score == 0
    assert not engine.tick_pending
    scheduler.advance(3)
    assert engine.time_remaining == 15


def test_return_home_from_gameover(engine, scheduler):
    engine.start_round()
    scheduler.advance(15)
    engine.return_home()
    assert engine.state == IDLE
    engine.start_round()
    assert engine.state == PLAYING


def test_cheat_mode_only_while_playing(engine):
    engine.set_cheat_mode(True)
    assert engine.cheat_mode is False
    engine.start_round()
    engine.set_cheat_mode(True)
    assert engine.snapshot.cheat_mode is True
    engine.start_round()
    assert engine.cheat_mode is False


def test_feedback_follows_each_guess(engine, miss_index):
    engine.start_round()
    list(engine.feedback.drain())

    engine.submit_guess(engine.grid.target_index, (100.0, 50.0))
    engine.submit_guess(miss_index(engine), (10.0, 10.0))
    emitted = [(event.kind, event.payload) for event in engine.feedback.drain()]
    assert emitted == [
        (CORRECT, (100.0, 50.0)),
        (CORRECT, 2),
        (WRONG, (10.0, 10.0)),
        (WRONG, -3),
    ]


def test_feedback_outlives_the_round(engine, scheduler):
    engine.start_round()
    engine.submit_guess(engine.grid.target_index)
    engine.return_home()
    assert engine.feedback.particles
    scheduler.advance(1)
    assert engine.feedback.particles == []


def test_sound_hook_respects_toggle(engine, sounds, miss_index):
    engine.start_round()
    engine.submit_guess(engine.grid.target_index)
    engine.submit_guess(miss_index(engine))
    assert sounds == [CLICK, CORRECT, WRONG]

    engine.toggle_sound(False)
    engine.submit_guess(miss_index(engine))
    assert sounds == [CLICK, CORRECT, WRONG]
    assert engine.snapshot.sound_enabled is False


def test_subscribers_get_a_snapshot_per_transition(engine, scheduler, miss_index):
    snapshots = []
    engine.subscribe(snapshots.append)
    engine.start_round()
    engine.submit_guess(miss_index(engine))
    scheduler.advance(1)
    assert [s.state for s in snapshots] == [PLAYING, PLAYING, PLAYING]
    assert [s.time_remaining for s in snapshots] == [15, 12, 11]


def test_ticks_on_the_asyncio_loop():
    async def play():
        engine = ColorSenseEngine(tick_interval=0.01)
        engine.start_round()
        await asyncio.sleep(0.05)
        remaining = engine.time_remaining
        engine.close()
        return remaining

    remaining = asyncio.run(play())
    assert 0 < remaining < 15


def test_undrained_feedback_does_not_pile_up(engine, scheduler):
    engine.start_round()
    for _ in range(200):
        engine.submit_guess(engine.grid.target_index)
        scheduler.advance(0.2)
    scheduler.advance(5)
    assert engine.feedback.events == []
    assert engine.feedback.particles == []
    assert list(engine.feedback.drain()) == []


def test_sound_toggle_clicks_only_when_enabled(engine, sounds):
    engine.toggle_sound(False)
    assert sounds == []
    engine.toggle_sound(True)
    assert sounds == [CLICK]
    assert engine.snapshot.sound_enabled is True
    # Toggling from idle leaves the session idle
    assert engine.state == IDLE
