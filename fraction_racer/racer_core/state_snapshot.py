"""
State Snapshot
==============

Read-only picture of the simulation handed to the renderer and overlays.

Entity attributes are packed into numpy arrays; building a snapshot never
changes the game.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple, Union

import numpy as np

from fraction_racer.racer_core.config_loader import GameConfig, get_config
from fraction_racer.racer_core.progress import ChargeUpState, MathChallengeState

if TYPE_CHECKING:
    from fraction_racer.racer_core.game import CoreGame


def format_fraction(numerator: int, denominator: int) -> str:
    """
    Human-readable fraction for the HUD.

    7/3 -> "2 1/3", 6/3 -> "6/3 (2 Wholes)", 2/3 -> "2/3".
    """
    if numerator == 0:
        return f"0/{denominator}"
    wholes, remainder = divmod(numerator, denominator)
    if wholes == 0:
        return f"{numerator}/{denominator}"
    if remainder == 0:
        plural = "s" if wholes > 1 else ""
        return f"{numerator}/{denominator} ({wholes} Whole{plural})"
    return f"{wholes} {remainder}/{denominator}"


def segment_fill(current_numerator: int, denominator: int, segments: int) -> Tuple[int, ...]:
    """How many slices of each ship segment are lit, left to right."""
    return tuple(
        max(0, min(denominator, current_numerator - s * denominator))
        for s in range(segments)
    )


@dataclass(frozen=True)
class MathOverlay:
    """Payload for the math challenge panel."""
    history: Tuple[int, ...]
    step: int
    total_steps: int
    previous_sum: int
    current_gem: int
    partial_sums: Tuple[int, ...]
    input_error: bool


@dataclass(frozen=True)
class ChargeOverlay:
    """Payload for the charge-up panel."""
    question_text: str
    progress: int
    required: int
    input_error: bool


Overlay = Union[MathOverlay, ChargeOverlay]


@dataclass(frozen=True)
class GameSnapshot:
    """Everything needed to draw one frame."""
    # State machine
    state_name: str
    overlay: Optional[Overlay]

    # Level and HUD
    level_id: int
    level_index: int
    num_levels: int
    denominator: int
    target_numerator: int
    current_numerator: int
    history: Tuple[int, ...]
    power_ups: int
    target_text: str
    current_text: str
    flash_active: bool

    # Field
    field_width: float
    field_height: float
    hud_margin: float

    # Ship
    ship_x: float
    ship_y: float
    ship_width: float
    ship_height: float
    ship_radius: float
    segment_fill: Tuple[int, ...]

    # Entities
    gem_x: np.ndarray          # (N,) float32
    gem_y: np.ndarray          # (N,) float32
    gem_radius: np.ndarray     # (N,) float32
    gem_numerator: np.ndarray  # (N,) int32
    obstacle_x: np.ndarray     # (M,) float32
    obstacle_y: np.ndarray     # (M,) float32
    obstacle_radius: np.ndarray
    obstacle_rotation: np.ndarray
    star_x: np.ndarray
    star_y: np.ndarray
    star_size: np.ndarray
    star_speed: np.ndarray
    shockwaves: Tuple[Tuple[float, float, float, float], ...]  # (x, y, radius, alpha)

    @property
    def gem_count(self) -> int:
        return len(self.gem_x)

    @property
    def obstacle_count(self) -> int:
        return len(self.obstacle_x)


class SnapshotBuilder:
    """Builds GameSnapshot instances from a CoreGame."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config

    def _build_overlay(self, game: "CoreGame") -> Optional[Overlay]:
        state = game.state
        if isinstance(state, MathChallengeState):
            return MathOverlay(
                history=state.history,
                step=state.step,
                total_steps=state.total_steps,
                previous_sum=state.previous_sum,
                current_gem=state.current_gem,
                partial_sums=state.partial_sums,
                input_error=state.input_error
            )
        if isinstance(state, ChargeUpState):
            return ChargeOverlay(
                question_text=state.question.text,
                progress=state.progress,
                required=self._config.charge_up.required_streak,
                input_error=state.input_error
            )
        return None

    def build(self, game: "CoreGame") -> GameSnapshot:
        field = game.field
        level = game.level
        numerator = game.progress.current_numerator

        return GameSnapshot(
            state_name=game.state.name,
            overlay=self._build_overlay(game),
            level_id=level.id,
            level_index=game.level_index,
            num_levels=self._config.num_levels,
            denominator=level.denominator,
            target_numerator=level.target_numerator,
            current_numerator=numerator,
            history=game.progress.history,
            power_ups=game.power_ups,
            target_text=format_fraction(level.target_numerator, level.denominator),
            current_text=format_fraction(numerator, level.denominator),
            flash_active=field.flash_active,
            field_width=field.width,
            field_height=field.height,
            hud_margin=float(self._config.field.hud_margin),
            ship_x=field.ship.x,
            ship_y=field.ship.y,
            ship_width=field.ship_width(level),
            ship_height=field.ship_height,
            ship_radius=self._config.ship.radius,
            segment_fill=segment_fill(numerator, level.denominator, level.ship_segments),
            gem_x=np.array([g.x for g in field.gems], dtype=np.float32),
            gem_y=np.array([g.y for g in field.gems], dtype=np.float32),
            gem_radius=np.array([g.radius for g in field.gems], dtype=np.float32),
            gem_numerator=np.array([g.numerator for g in field.gems], dtype=np.int32),
            obstacle_x=np.array([o.x for o in field.obstacles], dtype=np.float32),
            obstacle_y=np.array([o.y for o in field.obstacles], dtype=np.float32),
            obstacle_radius=np.array([o.radius for o in field.obstacles], dtype=np.float32),
            obstacle_rotation=np.array([o.rotation for o in field.obstacles], dtype=np.float32),
            star_x=np.array([s.x for s in field.stars], dtype=np.float32),
            star_y=np.array([s.y for s in field.stars], dtype=np.float32),
            star_size=np.array([s.size for s in field.stars], dtype=np.float32),
            star_speed=np.array([s.speed for s in field.stars], dtype=np.float32),
            shockwaves=tuple((w.x, w.y, w.radius, w.alpha) for w in field.shockwaves)
        )
