"""
Physics & Collision Step
========================

Owns everything that moves on the play-field and advances it by one tick.

Tick order:
1. Background beat
2. Ship movement and clamping
3. Stars
4. Flash timer and shockwaves
5. Spawn timers
6. Obstacles (move, rotate, collide, despawn)
7. Gems (move, collide, evaluate, despawn)

Collisions are axis-aligned bounding boxes (pymunk.BB); touching counts.
Obstacles are resolved before gems, each list in spawn order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from fraction_racer.racer_core.audio import CueDispatcher
from fraction_racer.racer_core.config_loader import GameConfig, get_config
from fraction_racer.racer_core.entities import Gem, Obstacle, Shockwave, Ship, Star
from fraction_racer.racer_core.input_state import InputIntent
from fraction_racer.racer_core.level_catalog import Level
from fraction_racer.racer_core.progress import (
    CollectionOutcome,
    CollectionResult,
    GameState,
    RunProgress,
    evaluate_collection,
)
from fraction_racer.racer_core.spawner import EntitySpawner, SpawnTimers


@dataclass
class StepEvents:
    """Everything notable that happened during one tick."""
    obstacle_hits: int = 0
    gems_collected: List[int] = field(default_factory=list)
    outcomes: List[CollectionOutcome] = field(default_factory=list)
    gems_spawned: int = 0
    obstacles_spawned: int = 0
    beat_frequency: Optional[float] = None
    next_state: Optional[GameState] = None   # Set when the tick leaves free play

    @property
    def any_reset(self) -> bool:
        return self.obstacle_hits > 0 or CollectionOutcome.OVERSHOOT in self.outcomes


class PlayField:
    """
    The free-play simulation: ship, entities, and transient effects.

    Progress is passed into step() rather than owned, so resets triggered
    here and by the verification sub-games go through the same object.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        spawner: Optional[EntitySpawner] = None,
        cues: Optional[CueDispatcher] = None
    ):
        """
        Initialize the play-field at the configured size.

        Args:
            config: Game configuration. Uses default if None.
            spawner: Entity spawner. Creates an unseeded one if None.
            cues: Audio cue dispatcher. Silent if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._spawner = spawner if spawner is not None else EntitySpawner(config)
        self._cues = cues if cues is not None else CueDispatcher()

        self.width: float = float(config.field.width)
        self.height: float = float(config.field.height)

        self.ship = Ship(self.width / 2, self.height - config.ship.start_offset_y)
        self.gems: List[Gem] = []
        self.obstacles: List[Obstacle] = []
        self.stars: List[Star] = self._spawner.spawn_starfield(self.width, self.height)
        self.shockwaves: List[Shockwave] = []

        self.timers = SpawnTimers()
        self.flash_timer: float = 0.0
        self.beat_timer: float = 0.0
        self.beat_step: int = 0

    @property
    def spawner(self) -> EntitySpawner:
        return self._spawner

    @property
    def flash_active(self) -> bool:
        return self.flash_timer > 0

    def ship_width(self, level: Level) -> float:
        return self._config.ship.width_for(level.ship_segments)

    @property
    def ship_height(self) -> float:
        return self._config.ship.height

    def resize(self, width: float, height: float) -> None:
        """Change the field size, keeping the ship inside it."""
        self.width = float(width)
        self.height = float(height)
        self.ship.x = min(self.ship.x, self.width)
        self.ship.y = min(self.ship.y, self.height)

    def reset_for_level(self) -> None:
        """Clear the field for a fresh level: ship home, no entities or effects."""
        self.ship.x = self.width / 2
        self.ship.y = self.height - self._config.ship.start_offset_y
        self.gems = []
        self.obstacles = []
        self.shockwaves = []
        self.timers.reset()
        self.flash_timer = 0.0
        self.beat_timer = 0.0

    def trigger_flash(self) -> None:
        self.flash_timer = self._config.effects.flash_duration

    def clear_obstacles(self) -> int:
        """Remove every obstacle. Returns how many were removed."""
        count = len(self.obstacles)
        self.obstacles = []
        return count

    def emit_shockwave(self) -> Shockwave:
        wave = Shockwave(
            x=self.ship.x,
            y=self.ship.y,
            radius=0.0,
            max_radius=max(self.width, self.height)
        )
        self.shockwaves.append(wave)
        return wave

    def beat_frequency(self, level: Level) -> float:
        loop = self._config.loop
        base = loop.beat_base_frequency * loop.beat_semitone_ratio ** (level.id - 1)
        semitones = loop.beat_pattern[self.beat_step % len(loop.beat_pattern)]
        return base * 2 ** (semitones / 12)

    def beat_interval(self, level: Level) -> float:
        loop = self._config.loop
        return max(loop.beat_interval_min, loop.beat_interval_base - level.id * loop.beat_interval_per_level)

    def _advance_beat(self, dt: float, level: Level, events: StepEvents) -> None:
        self.beat_timer -= dt
        if self.beat_timer <= 0:
            frequency = self.beat_frequency(level)
            self._cues.emit("background_beat", frequency)
            events.beat_frequency = frequency
            self.beat_step += 1
            self.beat_timer = self.beat_interval(level)

    def _move_ship(self, dt: float, intent: InputIntent, level: Level) -> None:
        distance = self._config.ship.move_speed * dt
        ship = self.ship
        ship.x += intent.dx * distance
        ship.y += intent.dy * distance

        half_w = self.ship_width(level) / 2
        half_h = self.ship_height / 2
        top = self._config.field.hud_margin + half_h
        ship.x = max(half_w, min(self.width - half_w, ship.x))
        ship.y = max(top, min(self.height - half_h, ship.y))

    def _advance_stars(self, dt: float) -> None:
        rng = self._spawner.rng
        for star in self.stars:
            star.y += star.speed * dt
            if star.y > self.height:
                star.y = 0.0
                star.x = rng.random() * self.width

    def _advance_effects(self, dt: float) -> None:
        if self.flash_timer > 0:
            self.flash_timer = max(0.0, self.flash_timer - dt)

        growth = self._config.effects.shockwave_growth * dt
        for wave in self.shockwaves:
            wave.grow(growth)
        self.shockwaves = [w for w in self.shockwaves if not w.is_spent]

    def _despawn_line(self) -> float:
        return self.height + self._config.field.despawn_margin

    def _advance_obstacles(
        self,
        dt: float,
        level: Level,
        progress: RunProgress,
        events: StepEvents
    ) -> None:
        ship_box = self.ship.bounding_box(self.ship_width(level), self.ship_height)
        despawn_y = self._despawn_line()
        survivors: List[Obstacle] = []

        for obstacle in self.obstacles:
            obstacle.y += obstacle.speed * dt
            obstacle.rotation += obstacle.rotation_speed * dt

            if obstacle.bounding_box().intersects(ship_box):
                progress.reset()
                self.trigger_flash()
                self._cues.emit("progress_reset")
                events.obstacle_hits += 1
                continue

            if obstacle.y > despawn_y:
                continue
            survivors.append(obstacle)

        self.obstacles = survivors

    def _advance_gems(
        self,
        dt: float,
        level: Level,
        progress: RunProgress,
        is_last_level: bool,
        events: StepEvents
    ) -> None:
        ship_box = self.ship.bounding_box(self.ship_width(level), self.ship_height)
        despawn_y = self._despawn_line()
        survivors: List[Gem] = []

        for index, gem in enumerate(self.gems):
            gem.y += gem.speed * dt

            if gem.bounding_box().intersects(ship_box):
                progress.collect(gem.numerator)
                events.gems_collected.append(gem.numerator)
                self._cues.emit(
                    "negative_gem_collected" if gem.is_negative else "positive_gem_collected"
                )

                result = evaluate_collection(progress, level, is_last_level)
                events.outcomes.append(result.outcome)
                self._apply_collection(result)

                if result.leaves_play:
                    # The field freezes as soon as a modal state takes over
                    events.next_state = result.next_state
                    survivors.extend(self.gems[index + 1:])
                    break
                continue

            if gem.y > despawn_y:
                continue
            survivors.append(gem)

        self.gems = survivors

    def _apply_collection(self, result: CollectionResult) -> None:
        if result.outcome is CollectionOutcome.OVERSHOOT:
            self.trigger_flash()
            self._cues.emit("progress_reset")
        elif result.outcome in (CollectionOutcome.LEVEL_COMPLETE, CollectionOutcome.GAME_COMPLETE):
            self._cues.emit("level_completed")

    def step(
        self,
        dt: float,
        intent: InputIntent,
        level: Level,
        progress: RunProgress,
        is_last_level: bool = False
    ) -> StepEvents:
        """
        Advance the field by dt seconds.

        Args:
            dt: Elapsed time, already clamped by the caller.
            intent: Current direction flags.
            level: Current level.
            progress: Run progress, mutated by collisions.
            is_last_level: True if winning this level ends the run.

        Returns:
            StepEvents describing the tick. next_state is set if a gem
            collection moved the game out of free play.
        """
        events = StepEvents()

        self._advance_beat(dt, level, events)
        self._move_ship(dt, intent, level)
        self._advance_stars(dt)
        self._advance_effects(dt)

        new_gems, new_obstacles = self._spawner.tick(self.timers, dt, level, self.width)
        self.gems.extend(new_gems)
        self.obstacles.extend(new_obstacles)
        events.gems_spawned = len(new_gems)
        events.obstacles_spawned = len(new_obstacles)

        self._advance_obstacles(dt, level, progress, events)
        self._advance_gems(dt, level, progress, is_last_level, events)
        return events
