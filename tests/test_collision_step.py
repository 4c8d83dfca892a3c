"""
Tests for the per-tick physics step: movement, collisions, effects.
"""

import numpy as np
import pytest

from conftest import collect, place_gem, place_obstacle
from fraction_racer.racer_core.entities import Gem, Obstacle, Star
from fraction_racer.racer_core.game import CoreGame


class TestShipMovement:
    """Ship movement and clamping."""

    def test_moves_at_configured_speed(self, game):
        start_x = game.field.ship.x
        game.input.set("right", True)
        game.tick(0.1)
        assert game.field.ship.x == pytest.approx(start_x + 60.0)

    def test_diagonal_moves_both_axes(self, game):
        start_x, start_y = game.field.ship.x, game.field.ship.y
        game.input.set("left", True)
        game.input.set("up", True)
        game.tick(0.1)
        assert game.field.ship.x == pytest.approx(start_x - 60.0)
        assert game.field.ship.y == pytest.approx(start_y - 60.0)

    def test_clamped_to_left_edge(self, game):
        game.input.set("left", True)
        game.tick(5.0)
        assert game.field.ship.x == pytest.approx(game.field.ship_width(game.level) / 2)

    def test_clamped_to_right_edge(self, game):
        game.input.set("right", True)
        game.tick(5.0)
        half_w = game.field.ship_width(game.level) / 2
        assert game.field.ship.x == pytest.approx(game.field.width - half_w)

    def test_cannot_enter_hud_band(self, game):
        game.input.set("up", True)
        game.tick(5.0)
        # hud margin 100 + half of the 70 px ship height
        assert game.field.ship.y == pytest.approx(135.0)

    def test_clamped_to_bottom(self, game):
        game.input.set("down", True)
        game.tick(5.0)
        assert game.field.ship.y == pytest.approx(game.field.height - 35.0)

    def test_wider_ship_on_multi_segment_level(self, small_config):
        g = CoreGame(config=small_config, seed=1)
        assert g.field.ship_width(g.catalog[0]) == pytest.approx(87.5)
        assert g.field.ship_width(g.catalog[1]) == pytest.approx(175.0)


class TestObstacleCollisions:
    """Obstacle contact resets progress."""

    def test_hit_resets_progress_with_flash(self, game, audio):
        collect(game, 1, 2)
        assert game.progress.current_numerator == 3

        place_obstacle(game)
        events = game.tick(0.016)

        assert events.obstacle_hits == 1
        assert events.any_reset
        assert game.progress.current_numerator == 0
        assert game.progress.history == ()
        assert game.field.obstacles == []
        assert game.field.flash_active
        assert audio.names()[-1] == "progress_reset"

    def test_obstacles_resolve_before_gems(self, game):
        collect(game, 2)
        place_obstacle(game)
        place_gem(game, 2)

        game.tick(0.016)

        # Reset first, then the gem lands on an empty sum
        assert game.is_playing
        assert game.progress.current_numerator == 2
        assert game.progress.history == (2,)

    def test_touching_edges_count_as_contact(self, game):
        ship = game.field.ship
        right_edge = ship.x + game.field.ship_width(game.level) / 2
        game.field.obstacles.append(Obstacle(
            uid=1, x=right_edge + 25.0, y=ship.y, speed=0.0,
            radius=25.0, rotation=0.0, rotation_speed=0.0
        ))
        events = game.tick(0.016)
        assert events.obstacle_hits == 1

    def test_near_miss_does_not_collide(self, game):
        ship = game.field.ship
        right_edge = ship.x + game.field.ship_width(game.level) / 2
        game.field.obstacles.append(Obstacle(
            uid=1, x=right_edge + 26.0, y=ship.y, speed=0.0,
            radius=25.0, rotation=0.0, rotation_speed=0.0
        ))
        events = game.tick(0.016)
        assert events.obstacle_hits == 0
        assert len(game.field.obstacles) == 1

    def test_obstacle_spins(self, game):
        obstacle = place_obstacle(game, on_ship=False)
        obstacle.rotation_speed = 2.0
        game.tick(0.5)
        assert obstacle.rotation == pytest.approx(1.0)


class TestDespawn:
    """Entities leaving the bottom edge are dropped."""

    def test_gem_despawns_below_field(self, game):
        game.field.gems.append(Gem(
            uid=1, x=50.0, y=game.field.height + 49.0,
            numerator=1, speed=100.0, radius=32.0
        ))
        game.tick(0.016)
        assert game.field.gems == []
        assert game.progress.history == ()

    def test_gem_still_visible_survives(self, game):
        game.field.gems.append(Gem(
            uid=1, x=50.0, y=game.field.height + 40.0,
            numerator=1, speed=100.0, radius=32.0
        ))
        game.tick(0.016)
        assert len(game.field.gems) == 1

    def test_obstacle_despawns_below_field(self, game):
        game.field.obstacles.append(Obstacle(
            uid=1, x=50.0, y=game.field.height + 49.0, speed=100.0,
            radius=20.0, rotation=0.0, rotation_speed=0.0
        ))
        events = game.tick(0.016)
        assert game.field.obstacles == []
        assert events.obstacle_hits == 0


class TestEffects:
    """Stars, flash and shockwaves."""

    def test_star_wraps_to_top(self, game):
        star = Star(x=10.0, y=game.field.height - 0.1, speed=100.0, size=2.0)
        game.field.stars = [star]
        game.tick(0.016)
        assert star.y == 0.0
        assert 0.0 <= star.x <= game.field.width

    def test_flash_decays_to_zero(self, game):
        game.field.trigger_flash()
        game.tick(0.1)
        assert game.field.flash_timer == pytest.approx(0.2)
        game.tick(1.0)
        assert game.field.flash_timer == 0.0
        assert not game.field.flash_active

    def test_shockwave_grows_and_fades(self, game):
        wave = game.field.emit_shockwave()
        game.tick(0.016)
        assert wave.radius == pytest.approx(40.0)
        assert wave.alpha == pytest.approx(1.0 - 40.0 / 960.0)

        game.tick(1.0)
        assert game.field.shockwaves == []


class TestBeat:
    """Background beat scheduling."""

    def test_first_tick_emits_root_note(self, game, audio):
        events = game.tick(0.016)
        assert events.beat_frequency == pytest.approx(130.81)
        assert audio.calls[0][0] == "background_beat"
        assert audio.calls[0][1] == pytest.approx(130.81)

    def test_interval_shrinks_with_level(self, game):
        assert game.field.beat_interval(game.catalog[0]) == pytest.approx(0.24)
        assert game.field.beat_interval(game.catalog[1]) == pytest.approx(0.23)

    def test_pattern_advances(self, game, audio):
        game.tick(0.016)
        game.tick(0.3)
        beats = [c[1] for c in audio.calls if c[0] == "background_beat"]
        assert len(beats) == 2
        assert beats[1] == pytest.approx(130.81 * 2 ** (3 / 12))


class TestSpawning:
    """Spawning through the game tick."""

    def test_first_tick_spawns_one_of_each(self, small_config):
        g = CoreGame(config=small_config, seed=11)
        g.restart()
        events = g.tick(0.016)
        assert events.gems_spawned == 1
        assert events.obstacles_spawned == 1
        assert len(g.field.gems) == 1
        assert len(g.field.obstacles) == 1

    def test_same_seed_same_run(self, small_config):
        def run(seed):
            g = CoreGame(config=small_config, seed=seed)
            g.restart()
            for _ in range(300):
                g.tick(0.016)
            return g.snapshot()

        a, b = run(21), run(21)
        assert a.state_name == b.state_name
        assert a.current_numerator == b.current_numerator
        np.testing.assert_array_equal(a.gem_x, b.gem_x)
        np.testing.assert_array_equal(a.gem_numerator, b.gem_numerator)
        np.testing.assert_array_equal(a.obstacle_y, b.obstacle_y)
