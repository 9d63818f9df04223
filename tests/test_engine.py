"""
Testing the game engine
- Secrets come from a scripted random source, time from a fake clock.
- Build a guess through cursor/color moves, then check phase, history and timing.
"""

import random

import pytest

from codebreaker.config import ConfigurationError, EngineConfig
from codebreaker.engine import GameEngine, generate_secret
from codebreaker.types import Color, LossReason, Phase

from conftest import SECRET, B, FakeClock, G, O, P, R, ScriptedRandom, Y


def make_engine(clock, **overrides):
    settings = dict(num_pegs=4, num_colors=6, allow_repeats=False, max_attempts=10, time_limit_ms=60_000)
    settings.update(overrides)
    return GameEngine(EngineConfig(**settings), rng=ScriptedRandom(SECRET), clock=clock)


def enter_guess(engine, colors):
    """Dial each slot from its current color to the wanted one, left to right."""
    while engine.cursor > 0:
        engine.move_cursor(-1)
    for slot, wanted in enumerate(colors):
        while engine.current_guess[slot] != wanted:
            engine.cycle_color(1)
        if slot < len(colors) - 1:
            engine.move_cursor(1)


# --- Secret generation ---

def test_secret_without_repeats_redraws_used_colors():
    config = EngineConfig(num_pegs=4, num_colors=6, allow_repeats=False)
    rng = ScriptedRandom([R, R, G, G, B, R, Y])
    assert generate_secret(config, rng) == (R, G, B, Y)
    assert rng.calls == 7


def test_secret_with_repeats_keeps_duplicates():
    config = EngineConfig(num_pegs=4, num_colors=6, allow_repeats=True)
    assert generate_secret(config, ScriptedRandom([R, R, G, R])) == (R, R, G, R)


def test_secret_colors_are_distinct_and_in_range():
    config = EngineConfig(num_pegs=4, num_colors=4, allow_repeats=False)
    rng = random.Random(1234)
    for _ in range(200):
        secret = generate_secret(config, rng)
        assert len(set(secret)) == 4
        assert all(1 <= c <= 4 for c in secret)


def test_too_few_colors_fails_at_construction():
    with pytest.raises(ConfigurationError):
        GameEngine(EngineConfig(num_pegs=4, num_colors=3, allow_repeats=False))
    # With repeats it is fine
    GameEngine(EngineConfig(num_pegs=4, num_colors=3, allow_repeats=True), rng=random.Random(0))


def test_same_seed_same_secret():
    config = EngineConfig()
    first = GameEngine(config, rng=random.Random(7), clock=FakeClock())
    second = GameEngine(config, rng=random.Random(7), clock=FakeClock())
    first.reveal()
    second.reveal()
    assert first.revealed_secret == second.revealed_secret


# --- Editing the guess ---

def test_new_engine_starts_empty(clock):
    engine = make_engine(clock)
    assert engine.phase == Phase.PLAYING
    assert engine.current_guess == (Color.NONE,) * 4
    assert engine.cursor == 0
    assert engine.history == ()
    assert engine.revealed_secret is None
    assert engine.can_submit is False


def test_cursor_is_clamped(clock):
    engine = make_engine(clock)
    assert engine.move_cursor(-1) is True
    assert engine.cursor == 0
    for _ in range(10):
        engine.move_cursor(1)
    assert engine.cursor == 3


def test_color_cycles_through_none(clock):
    engine = make_engine(clock, num_colors=4)
    engine.cycle_color(-1)
    assert engine.current_guess[0] == Color.YELLOW
    engine.cycle_color(1)
    assert engine.current_guess[0] == Color.NONE
    engine.cycle_color(1)
    assert engine.current_guess[0] == Color.RED


def test_color_on_explicit_slot(clock):
    engine = make_engine(clock)
    assert engine.cycle_color(1, slot=2) is True
    assert engine.current_guess == (Color.NONE, Color.NONE, Color.RED, Color.NONE)
    assert engine.cycle_color(1, slot=4) is False


# --- Submitting ---

def test_incomplete_guess_is_ignored(clock):
    engine = make_engine(clock)
    engine.cycle_color(1)
    assert engine.submit_guess() is False
    assert engine.attempts_used == 0


def test_swapped_colors_scenario(clock):
    engine = make_engine(clock)
    enter_guess(engine, [G, R, B, P])
    assert engine.submit_guess() is True
    attempt = engine.history[-1]
    assert (attempt.black, attempt.white) == (1, 2)
    assert engine.phase == Phase.PLAYING
    # The guess stays on the board for the next try
    assert engine.current_guess == (G, R, B, P)


def test_identical_resubmission_is_rejected(clock):
    engine = make_engine(clock)
    enter_guess(engine, [G, R, B, P])
    engine.submit_guess()
    assert engine.can_submit is False
    assert engine.submit_guess() is False
    assert engine.attempts_used == 1


def test_exact_guess_wins(clock):
    engine = make_engine(clock)
    clock.advance(5_000)
    enter_guess(engine, SECRET)
    assert engine.submit_guess() is True
    assert engine.phase == Phase.WON
    assert engine.history[-1].black == 4
    assert engine.history[-1].white == 0
    assert engine.revealed_secret == tuple(SECRET)
    # Clock is frozen after the win
    clock.advance(5_000)
    assert engine.elapsed_ms() == 5_000


def test_loss_on_last_attempt(clock):
    engine = make_engine(clock, max_attempts=2)
    enter_guess(engine, [G, R, B, P])
    engine.submit_guess()
    assert engine.phase == Phase.PLAYING
    enter_guess(engine, [O, R, B, P])
    engine.submit_guess()
    # Lost on the submit itself, no tick needed
    assert engine.phase == Phase.LOST
    assert engine.loss_reason == LossReason.ATTEMPTS_EXHAUSTED
    assert engine.attempts_used == 2


def test_no_changes_after_game_over(clock):
    engine = make_engine(clock, max_attempts=1)
    enter_guess(engine, [G, R, B, P])
    engine.submit_guess()
    assert engine.phase == Phase.LOST

    assert engine.cycle_color(1) is False
    assert engine.move_cursor(1) is False
    assert engine.submit_guess() is False
    assert engine.pause() is False
    assert engine.reveal() is False
    assert engine.attempts_used == 1


def test_new_guess_rejected_after_loss(clock):
    engine = make_engine(clock, max_attempts=1)
    enter_guess(engine, [G, R, B, P])
    engine.submit_guess()
    assert engine.phase == Phase.LOST

    # Editing is locked, so put a fresh complete guess on the board directly
    engine._session.current_guess = [O, R, B, P]
    assert engine.can_submit is False
    assert engine.submit_guess() is False
    assert engine.attempts_used == 1
    assert engine.phase == Phase.LOST


def test_new_guess_rejected_after_win(clock):
    engine = make_engine(clock)
    enter_guess(engine, SECRET)
    engine.submit_guess()
    assert engine.phase == Phase.WON
    assert engine.loss_reason is None

    engine._session.current_guess = [G, R, B, P]
    assert engine.can_submit is False
    assert engine.submit_guess() is False
    assert engine.attempts_used == 1
    assert engine.phase == Phase.WON


# --- Time ---

def test_pause_excludes_paused_time(clock):
    engine = make_engine(clock)
    clock.advance(3_000)
    engine.pause()
    assert engine.phase == Phase.PAUSED
    clock.advance(10_000)
    assert engine.elapsed_ms() == 3_000
    engine.resume()
    clock.advance(2_000)
    engine.pause()
    assert engine.elapsed_ms() == 5_000


def test_no_editing_while_paused(clock):
    engine = make_engine(clock)
    engine.pause()
    assert engine.cycle_color(1) is False
    assert engine.move_cursor(1) is False
    assert engine.pause() is False
    assert engine.current_guess == (Color.NONE,) * 4
    assert engine.resume() is True
    assert engine.resume() is False


def test_reveal_shows_secret_and_stops_clock(clock):
    engine = make_engine(clock)
    clock.advance(1_000)
    assert engine.reveal() is True
    assert engine.phase == Phase.REVEALING
    assert engine.revealed_secret == tuple(SECRET)
    assert engine.cycle_color(1) is False
    clock.advance(4_000)
    assert engine.hide_reveal() is True
    assert engine.revealed_secret is None
    clock.advance(1_000)
    assert engine.elapsed_ms() == 2_000


def test_tick_ends_game_on_timeout(clock):
    engine = make_engine(clock, time_limit_ms=10_000)
    clock.advance(9_999)
    assert engine.tick() is False
    assert engine.phase == Phase.PLAYING
    clock.advance(1)
    assert engine.tick() is True
    assert engine.phase == Phase.LOST
    assert engine.loss_reason == LossReason.TIMED_OUT
    clock.advance(5_000)
    assert engine.elapsed_ms() == 10_000


def test_submit_after_timeout_is_rejected(clock):
    engine = make_engine(clock, time_limit_ms=10_000)
    enter_guess(engine, SECRET)
    clock.advance(10_000)
    assert engine.submit_guess() is False
    assert engine.phase == Phase.LOST
    assert engine.loss_reason == LossReason.TIMED_OUT
    assert engine.history == ()


def test_paused_game_does_not_time_out(clock):
    engine = make_engine(clock, time_limit_ms=10_000)
    engine.pause()
    clock.advance(60_000)
    assert engine.tick() is False
    assert engine.phase == Phase.PAUSED


def test_no_time_limit(clock):
    engine = make_engine(clock, time_limit_ms=None)
    clock.advance(10 ** 9)
    assert engine.tick() is False
    assert engine.elapsed_ms() == 10 ** 9


def test_explicit_timestamps_win_over_clock(clock):
    engine = make_engine(clock)
    engine.pause(now=clock.now + 2_500)
    assert engine.elapsed_ms() == 2_500


# --- Reset ---

def test_reset_from_any_phase(clock):
    engine = make_engine(clock, max_attempts=1)
    enter_guess(engine, [G, R, B, P])
    engine.submit_guess()
    assert engine.phase == Phase.LOST
    clock.advance(7_000)

    assert engine.reset() is True
    assert engine.phase == Phase.PLAYING
    assert engine.history == ()
    assert engine.current_guess == (Color.NONE,) * 4
    assert engine.cursor == 0
    assert engine.loss_reason is None
    assert engine.elapsed_ms() == 0
