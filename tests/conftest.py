"""Shared fixtures and helpers for the simulation tests."""

import os
from dataclasses import replace
from typing import List, Tuple

import pytest

from fraction_racer.racer_core.audio import AudioCueEmitter
from fraction_racer.racer_core.config_loader import LevelConfig, load_config
from fraction_racer.racer_core.entities import Gem, Obstacle
from fraction_racer.racer_core.game import CoreGame

# Headless pygame for the renderer and audio tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


class RecordingAudio(AudioCueEmitter):
    """Emitter that remembers every cue it receives."""

    def __init__(self):
        self.calls: List[Tuple] = []

    def positive_gem_collected(self):
        self.calls.append(("positive_gem_collected",))

    def negative_gem_collected(self):
        self.calls.append(("negative_gem_collected",))

    def level_completed(self):
        self.calls.append(("level_completed",))

    def progress_reset(self):
        self.calls.append(("progress_reset",))

    def pulsar_activated(self):
        self.calls.append(("pulsar_activated",))

    def background_beat(self, frequency):
        self.calls.append(("background_beat", frequency))

    def names(self, include_beat: bool = False) -> List[str]:
        return [c[0] for c in self.calls if include_beat or c[0] != "background_beat"]


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def small_config(config):
    """Two-level table: target 4 over quarters, then target 4 over fifths."""
    return replace(
        config,
        levels=(
            LevelConfig(id=1, denominator=4, target_numerator=4, ship_segments=1, speed_multiplier=1.0),
            LevelConfig(id=2, denominator=5, target_numerator=4, ship_segments=2, speed_multiplier=1.5),
        )
    )


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def game(small_config, audio):
    """Game already in free play on level 1 with spawning held off."""
    g = CoreGame(config=small_config, seed=7, audio=audio)
    g.restart()
    hold_spawns(g)
    return g


def hold_spawns(game: CoreGame) -> None:
    """Push both spawn timers far into the future."""
    game.field.timers.gem = 1e6
    game.field.timers.obstacle = 1e6


def place_gem(game: CoreGame, numerator: int, uid: int = 10_000) -> Gem:
    """Put a motionless gem right on top of the ship."""
    gem = Gem(
        uid=uid + len(game.field.gems),
        x=game.field.ship.x,
        y=game.field.ship.y,
        numerator=numerator,
        speed=0.0,
        radius=32.0
    )
    game.field.gems.append(gem)
    return gem


def place_obstacle(game: CoreGame, uid: int = 20_000, on_ship: bool = True) -> Obstacle:
    """Put a motionless obstacle on the ship, or high above it."""
    obstacle = Obstacle(
        uid=uid + len(game.field.obstacles),
        x=game.field.ship.x,
        y=game.field.ship.y if on_ship else 0.0,
        speed=0.0,
        radius=25.0,
        rotation=0.0,
        rotation_speed=0.0
    )
    game.field.obstacles.append(obstacle)
    return obstacle


def collect(game: CoreGame, *numerators: int, dt: float = 0.016):
    """Collect gems one tick at a time, returning the events of each tick."""
    events = []
    for n in numerators:
        place_gem(game, n)
        events.append(game.tick(dt))
    return events


def finish_level_one(game: CoreGame) -> None:
    """Clear level 1 of the small table and stop on the level-complete panel."""
    collect(game, 3, -1, 2)
    game.submit_answer("2")
    game.submit_answer("4")
    assert game.state.name == "level_complete"
