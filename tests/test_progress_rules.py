"""
Tests for gem collection rules and the progress state machine.
"""

import random
from dataclasses import replace

import pytest

from conftest import collect, finish_level_one, hold_spawns, place_gem
from fraction_racer.racer_core.config_loader import LevelConfig
from fraction_racer.racer_core.game import CoreGame
from fraction_racer.racer_core.input_state import KeyboardInput
from fraction_racer.racer_core.level_catalog import Level
from fraction_racer.racer_core.progress import (
    CollectionOutcome,
    GameCompleteState,
    LevelCompleteState,
    MathChallengeState,
    PlayingState,
    RunProgress,
    evaluate_collection,
)


def make_level(denominator=4, target=4):
    return Level(LevelConfig(
        id=1, denominator=denominator, target_numerator=target,
        ship_segments=1, speed_multiplier=1.0
    ))


def progress_with(*numerators):
    progress = RunProgress()
    for n in numerators:
        progress.collect(n)
    return progress


class TestRunProgress:
    """Numerator and history bookkeeping."""

    def test_collect_tracks_sum_and_history(self):
        progress = progress_with(3, -1, 2)
        assert progress.current_numerator == 4
        assert progress.history == (3, -1, 2)

    def test_reset_clears_both(self):
        progress = progress_with(1, 2)
        progress.reset()
        assert progress.current_numerator == 0
        assert progress.history == ()

    def test_history_is_a_copy(self):
        progress = progress_with(1)
        history = progress.history
        progress.collect(2)
        assert history == (1,)


class TestEvaluateCollection:
    """Rule order for a single collection."""

    def test_below_target_continues(self):
        result = evaluate_collection(progress_with(1, 2), make_level(), False)
        assert result.outcome is CollectionOutcome.CONTINUE
        assert isinstance(result.next_state, PlayingState)
        assert not result.leaves_play

    def test_negative_sum_clamps(self):
        progress = progress_with(1, -2)
        result = evaluate_collection(progress, make_level(), False)
        assert result.outcome is CollectionOutcome.CLAMPED
        assert progress.current_numerator == 0
        assert progress.history == ()

    def test_overshoot_resets(self):
        progress = progress_with(3, 2)
        result = evaluate_collection(progress, make_level(), False)
        assert result.outcome is CollectionOutcome.OVERSHOOT
        assert progress.history == ()

    def test_single_gem_completes_level(self):
        result = evaluate_collection(progress_with(3), make_level(5, 3), False)
        assert result.outcome is CollectionOutcome.LEVEL_COMPLETE
        assert isinstance(result.next_state, LevelCompleteState)

    def test_single_gem_on_last_level_completes_game(self):
        result = evaluate_collection(progress_with(3), make_level(5, 3), True)
        assert result.outcome is CollectionOutcome.GAME_COMPLETE
        assert isinstance(result.next_state, GameCompleteState)

    def test_multiple_gems_start_math_challenge(self):
        progress = progress_with(3, -1, 2)
        result = evaluate_collection(progress, make_level(), False)
        assert result.outcome is CollectionOutcome.MATH_CHALLENGE
        state = result.next_state
        assert isinstance(state, MathChallengeState)
        assert state.history == (3, -1, 2)
        assert state.step == 1
        assert not state.input_error
        # Progress is kept for the challenge
        assert progress.current_numerator == 4

    def test_partial_sums(self):
        state = MathChallengeState(history=(3, -1, 2))
        assert state.partial_sums == (3, 2, 4)
        assert state.total_steps == 2
        assert state.expected_answer == 2


class TestCollectionInGame:
    """Collection side effects through CoreGame.tick()."""

    def test_positive_gem_cue(self, game, audio):
        events = collect(game, 2)[0]
        assert events.gems_collected == [2]
        assert events.outcomes == [CollectionOutcome.CONTINUE]
        assert audio.names() == ["positive_gem_collected"]
        assert game.field.gems == []

    def test_negative_clamp_is_silent(self, game, audio):
        collect(game, 1, -2)
        assert game.is_playing
        assert game.progress.current_numerator == 0
        assert game.progress.history == ()
        assert not game.field.flash_active
        assert audio.names() == ["positive_gem_collected", "negative_gem_collected"]

    def test_overshoot_flashes(self, game, audio):
        events = collect(game, 3, 2)[-1]
        assert events.outcomes == [CollectionOutcome.OVERSHOOT]
        assert events.any_reset
        assert game.is_playing
        assert game.progress.current_numerator == 0
        assert game.field.flash_active
        assert audio.names()[-1] == "progress_reset"

    def test_reaching_target_starts_math_challenge(self, game, audio):
        collect(game, 3, -1, 2)
        assert isinstance(game.state, MathChallengeState)
        assert game.state.history == (3, -1, 2)
        assert "level_completed" not in audio.names()

    def test_single_gem_auto_advances(self, small_config, audio):
        config = replace(
            small_config,
            levels=(
                LevelConfig(id=1, denominator=5, target_numerator=3, ship_segments=1, speed_multiplier=1.0),
                LevelConfig(id=2, denominator=5, target_numerator=4, ship_segments=1, speed_multiplier=1.0),
            )
        )
        g = CoreGame(config=config, seed=1, audio=audio)
        g.restart()
        hold_spawns(g)

        collect(g, 3)
        assert isinstance(g.state, LevelCompleteState)
        assert audio.names()[-1] == "level_completed"

    def test_held_key_still_steers_after_advance(self, game):
        keyboard = KeyboardInput()
        keyboard.key_down("right", game)
        finish_level_one(game)
        assert game.input.right

        keyboard.key_down("return", game)
        hold_spawns(game)
        x = game.field.ship.x
        game.tick(0.1)
        assert game.field.ship.x == pytest.approx(x + 60.0)


class TestFreezeAfterLeavingPlay:
    """Once a collection leaves free play the field stops."""

    def test_later_gems_are_not_collected(self, game):
        collect(game, 3, -1)
        place_gem(game, 2)
        leftover = place_gem(game, 1)

        events = game.tick(0.016)

        assert events.gems_collected == [2]
        assert isinstance(game.state, MathChallengeState)
        assert game.progress.history == (3, -1, 2)
        assert game.field.gems == [leftover]

    def test_tick_is_noop_outside_play(self, game):
        collect(game, 3, -1, 2)
        gem = place_gem(game, 1)
        gem.speed = 100.0
        ship_x = game.field.ship.x
        game.input.set("left", True)

        events = game.tick(0.016)

        assert events.gems_collected == []
        assert events.beat_frequency is None
        assert gem.y == game.field.ship.y
        assert game.field.ship.x == ship_x
        assert game.progress.history == (3, -1, 2)


class TestLevelProgression:
    """Full run through the small two-level table."""

    def test_complete_run(self, game, audio):
        collect(game, 3, -1, 2)
        assert game.submit_answer("2").is_correct
        assert game.submit_answer("4").is_correct
        assert isinstance(game.state, LevelCompleteState)

        assert game.advance()
        assert game.level.id == 2
        assert game.is_playing
        assert game.progress.current_numerator == 0
        hold_spawns(game)

        collect(game, 2, 2)
        game.submit_answer("4")
        assert isinstance(game.state, GameCompleteState)
        assert audio.names().count("level_completed") == 2

    def test_restart_after_victory(self, game):
        collect(game, 3, -1, 2)
        game.submit_answer("2")
        game.submit_answer("4")
        game.advance()
        hold_spawns(game)
        collect(game, 2, 2)
        game.submit_answer("4")

        assert game.restart()
        assert game.level_index == 0
        assert game.power_ups == 0
        assert game.is_playing

    def test_actions_ignored_in_wrong_state(self, game):
        assert not game.advance()
        assert not game.start_charge_up()
        assert not game.restart()
        assert game.submit_answer("1") is None
        assert game.is_playing

    def test_negative_dt_rejected(self, game):
        with pytest.raises(ValueError):
            game.tick(-0.1)


class TestProgressInvariant:
    """current_numerator always equals the sum of the history."""

    @pytest.mark.parametrize("seed", [0, 5, 99])
    def test_sum_matches_history_during_play(self, config, seed):
        g = CoreGame(config=config, seed=seed)
        g.restart()
        steer = random.Random(seed)

        for _ in range(2000):
            if not g.is_playing:
                break
            direction = steer.choice(["left", "right"])
            g.input.set("left", direction == "left")
            g.input.set("right", direction == "right")
            g.tick(0.016)
            assert g.progress.current_numerator == sum(g.progress.history)
            assert 0 <= g.progress.current_numerator <= g.level.target_numerator
