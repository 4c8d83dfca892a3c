"""
Entity Spawner
==============

Creates gems, obstacles and background stars with randomized attributes,
gated by per-type countdown timers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from fraction_racer.racer_core.config_loader import GameConfig, get_config
from fraction_racer.racer_core.entities import Gem, Obstacle, Star
from fraction_racer.racer_core.level_catalog import Level
from fraction_racer.racer_core.rng import RandomSource, make_rng


@dataclass
class SpawnTimers:
    """
    Countdown until the next gem and obstacle spawn.

    Both start at zero so the first tick of a level spawns one of each.
    """
    gem: float = 0.0
    obstacle: float = 0.0

    def reset(self) -> None:
        self.gem = 0.0
        self.obstacle = 0.0


class EntitySpawner:
    """
    Produces entities from an injected random source.

    Pure apart from the random source and the uid counter.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source. A fresh unseeded one if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._spawn = config.spawn
        self._rng = rng if rng is not None else make_rng()
        self._next_uid = 0

    @property
    def rng(self) -> RandomSource:
        return self._rng

    def _take_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def spawn_gem(self, level: Level, field_width: float) -> Gem:
        """
        Create a gem just above the top edge.

        Magnitude is uniform in [1, denominator - 1]; the sign is negative
        with probability gem_negative_chance.
        """
        spawn = self._spawn
        is_negative = self._rng.random() < spawn.gem_negative_chance
        magnitude = self._rng.randint(1, level.max_gem_magnitude)
        margin = spawn.gem_edge_margin

        return Gem(
            uid=self._take_uid(),
            x=self._rng.uniform(margin, field_width - margin),
            y=-margin,
            numerator=-magnitude if is_negative else magnitude,
            speed=self._rng.uniform(spawn.gem_speed_min, spawn.gem_speed_max) * level.speed_multiplier,
            radius=spawn.gem_radius
        )

    def spawn_obstacle(self, level: Level, field_width: float) -> Obstacle:
        """Create an obstacle just above the top edge."""
        spawn = self._spawn
        margin = spawn.obstacle_edge_margin

        return Obstacle(
            uid=self._take_uid(),
            x=self._rng.uniform(margin, field_width - margin),
            y=-margin,
            speed=self._rng.uniform(spawn.obstacle_speed_min, spawn.obstacle_speed_max) * level.speed_multiplier,
            radius=self._rng.uniform(spawn.obstacle_radius_min, spawn.obstacle_radius_max),
            rotation=0.0,
            rotation_speed=self._rng.uniform(-spawn.obstacle_max_spin, spawn.obstacle_max_spin)
        )

    def spawn_star(self, field_width: float, field_height: float) -> Star:
        """Create a background star anywhere on the field."""
        spawn = self._spawn
        return Star(
            x=self._rng.random() * field_width,
            y=self._rng.random() * field_height,
            speed=self._rng.uniform(spawn.star_speed_min, spawn.star_speed_max),
            size=self._rng.uniform(spawn.star_size_min, spawn.star_size_max)
        )

    def spawn_starfield(self, field_width: float, field_height: float) -> List[Star]:
        return [
            self.spawn_star(field_width, field_height)
            for _ in range(self._config.field.star_count)
        ]

    def gem_interval(self, level: Level) -> float:
        """Seconds between gem spawns on this level."""
        return self._spawn.gem_interval / level.speed_multiplier

    def obstacle_interval(self, level: Level) -> float:
        """Seconds between obstacle spawns on this level."""
        return self._spawn.obstacle_interval / level.speed_multiplier

    def tick(
        self,
        timers: SpawnTimers,
        dt: float,
        level: Level,
        field_width: float
    ) -> Tuple[List[Gem], List[Obstacle]]:
        """
        Advance both countdowns and spawn whatever is due.

        Returns:
            (new_gems, new_obstacles) lists, each with at most one entry.
        """
        new_gems: List[Gem] = []
        new_obstacles: List[Obstacle] = []

        timers.gem -= dt
        if timers.gem <= 0:
            new_gems.append(self.spawn_gem(level, field_width))
            timers.gem = self.gem_interval(level)

        timers.obstacle -= dt
        if timers.obstacle <= 0:
            new_obstacles.append(self.spawn_obstacle(level, field_width))
            timers.obstacle = self.obstacle_interval(level)

        return new_gems, new_obstacles
