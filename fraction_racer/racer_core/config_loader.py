"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml


DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    "game_config.yaml"
)


@dataclass(frozen=True)
class FieldConfig:
    """Play-field geometry."""
    width: int
    height: int
    hud_margin: int       # Band at the top reserved for the HUD
    despawn_margin: int   # Pixels below the field before entities are removed
    star_count: int


@dataclass(frozen=True)
class ShipConfig:
    """Player ship geometry and movement."""
    radius: float
    segment_spacing: float
    move_speed: float
    start_offset_y: float

    def width_for(self, segments: int) -> float:
        """Bounding-box width of a ship made of `segments` segments."""
        return segments * self.radius * self.segment_spacing

    @property
    def height(self) -> float:
        return self.radius * 2


@dataclass(frozen=True)
class SpawnConfig:
    """Entity spawn ranges. Speeds are scaled by the level speed multiplier."""
    gem_interval: float
    gem_negative_chance: float
    gem_radius: float
    gem_edge_margin: float
    gem_speed_min: float
    gem_speed_max: float
    obstacle_interval: float
    obstacle_edge_margin: float
    obstacle_radius_min: float
    obstacle_radius_max: float
    obstacle_speed_min: float
    obstacle_speed_max: float
    obstacle_max_spin: float
    star_speed_min: float
    star_speed_max: float
    star_size_min: float
    star_size_max: float


@dataclass(frozen=True)
class EffectsConfig:
    """Transient effect timings."""
    flash_duration: float
    shockwave_growth: float


@dataclass(frozen=True)
class LoopConfig:
    """Frame timing and background beat parameters."""
    max_dt: float
    fps: int
    beat_base_frequency: float
    beat_semitone_ratio: float
    beat_pattern: Tuple[int, ...]
    beat_interval_base: float
    beat_interval_per_level: float
    beat_interval_min: float


@dataclass(frozen=True)
class ChargeUpConfig:
    """Charge-Up drill parameters."""
    required_streak: int


@dataclass(frozen=True)
class LevelConfig:
    """A single row of the level table."""
    id: int
    denominator: int
    target_numerator: int
    ship_segments: int
    speed_multiplier: float


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    field: FieldConfig
    ship: ShipConfig
    spawn: SpawnConfig
    effects: EffectsConfig
    loop: LoopConfig
    charge_up: ChargeUpConfig
    levels: Tuple[LevelConfig, ...]

    @property
    def num_levels(self) -> int:
        """Number of levels in the table."""
        return len(self.levels)


def _parse_level(level_data: dict) -> LevelConfig:
    """Parse a single level row from YAML."""
    return LevelConfig(
        id=int(level_data["id"]),
        denominator=int(level_data["denominator"]),
        target_numerator=int(level_data["target_numerator"]),
        ship_segments=int(level_data.get("ship_segments", 1)),
        speed_multiplier=float(level_data.get("speed_multiplier", 1.0))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if not config.levels:
        raise ValueError("Level table is empty")

    # Level ids are 1-based and sequential
    for i, level in enumerate(config.levels):
        if level.id != i + 1:
            raise ValueError(f"Level ID mismatch: expected {i + 1}, got {level.id}")
        if level.denominator < 2:
            raise ValueError(
                f"Level {level.id}: denominator must be at least 2, got {level.denominator}"
            )
        if level.target_numerator < 1:
            raise ValueError(
                f"Level {level.id}: target_numerator must be positive, got {level.target_numerator}"
            )
        if level.ship_segments < 1:
            raise ValueError(
                f"Level {level.id}: ship_segments must be at least 1, got {level.ship_segments}"
            )
        if level.speed_multiplier <= 0:
            raise ValueError(
                f"Level {level.id}: speed_multiplier must be positive, got {level.speed_multiplier}"
            )

    spawn = config.spawn
    if not 0.0 <= spawn.gem_negative_chance <= 1.0:
        raise ValueError(f"gem_negative_chance must be in [0, 1], got {spawn.gem_negative_chance}")
    if spawn.gem_speed_min > spawn.gem_speed_max:
        raise ValueError("gem_speed_min exceeds gem_speed_max")
    if spawn.obstacle_speed_min > spawn.obstacle_speed_max:
        raise ValueError("obstacle_speed_min exceeds obstacle_speed_max")
    if spawn.obstacle_radius_min > spawn.obstacle_radius_max:
        raise ValueError("obstacle_radius_min exceeds obstacle_radius_max")

    if config.loop.max_dt <= 0:
        raise ValueError(f"max_dt must be positive, got {config.loop.max_dt}")
    if not config.loop.beat_pattern:
        raise ValueError("beat_pattern must not be empty")
    if config.charge_up.required_streak < 1:
        raise ValueError(
            f"required_streak must be at least 1, got {config.charge_up.required_streak}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    field_data = raw["field"]
    field = FieldConfig(
        width=int(field_data["width"]),
        height=int(field_data["height"]),
        hud_margin=int(field_data.get("hud_margin", 100)),
        despawn_margin=int(field_data.get("despawn_margin", 50)),
        star_count=int(field_data.get("star_count", 100))
    )

    ship_data = raw["ship"]
    ship = ShipConfig(
        radius=float(ship_data["radius"]),
        segment_spacing=float(ship_data.get("segment_spacing", 2.5)),
        move_speed=float(ship_data["move_speed"]),
        start_offset_y=float(ship_data.get("start_offset_y", 80))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        gem_interval=float(spawn_data["gem_interval"]),
        gem_negative_chance=float(spawn_data.get("gem_negative_chance", 0.3)),
        gem_radius=float(spawn_data["gem_radius"]),
        gem_edge_margin=float(spawn_data.get("gem_edge_margin", 40)),
        gem_speed_min=float(spawn_data["gem_speed_min"]),
        gem_speed_max=float(spawn_data["gem_speed_max"]),
        obstacle_interval=float(spawn_data["obstacle_interval"]),
        obstacle_edge_margin=float(spawn_data.get("obstacle_edge_margin", 30)),
        obstacle_radius_min=float(spawn_data["obstacle_radius_min"]),
        obstacle_radius_max=float(spawn_data["obstacle_radius_max"]),
        obstacle_speed_min=float(spawn_data["obstacle_speed_min"]),
        obstacle_speed_max=float(spawn_data["obstacle_speed_max"]),
        obstacle_max_spin=float(spawn_data.get("obstacle_max_spin", 3.125)),
        star_speed_min=float(spawn_data.get("star_speed_min", 62.5)),
        star_speed_max=float(spawn_data.get("star_speed_max", 187.5)),
        star_size_min=float(spawn_data.get("star_size_min", 1.0)),
        star_size_max=float(spawn_data.get("star_size_max", 3.0))
    )

    effects_data = raw.get("effects", {})
    effects = EffectsConfig(
        flash_duration=float(effects_data.get("flash_duration", 0.3)),
        shockwave_growth=float(effects_data.get("shockwave_growth", 2500.0))
    )

    loop_data = raw["loop"]
    loop = LoopConfig(
        max_dt=float(loop_data["max_dt"]),
        fps=int(loop_data.get("fps", 60)),
        beat_base_frequency=float(loop_data.get("beat_base_frequency", 130.81)),
        beat_semitone_ratio=float(loop_data.get("beat_semitone_ratio", 1.05946)),
        beat_pattern=tuple(int(p) for p in loop_data.get("beat_pattern", [0, 3, 7, 10, 12, 10, 7, 3])),
        beat_interval_base=float(loop_data.get("beat_interval_base", 0.25)),
        beat_interval_per_level=float(loop_data.get("beat_interval_per_level", 0.01)),
        beat_interval_min=float(loop_data.get("beat_interval_min", 0.12))
    )

    charge_data = raw.get("charge_up", {})
    charge_up = ChargeUpConfig(
        required_streak=int(charge_data.get("required_streak", 3))
    )

    levels = tuple(_parse_level(level) for level in raw["levels"])

    config = GameConfig(
        field=field,
        ship=ship,
        spawn=spawn,
        effects=effects,
        loop=loop,
        charge_up=charge_up,
        levels=levels
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config
