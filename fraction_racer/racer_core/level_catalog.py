"""
Level Catalog
=============

Provides convenient access to the ordered level table loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from fraction_racer.racer_core.config_loader import GameConfig, LevelConfig, get_config


@dataclass(frozen=True)
class Level:
    """
    Runtime representation of a level.

    Wraps LevelConfig with computed properties used by the spawner and HUD.
    """
    config: LevelConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def denominator(self) -> int:
        return self.config.denominator

    @property
    def target_numerator(self) -> int:
        return self.config.target_numerator

    @property
    def ship_segments(self) -> int:
        return self.config.ship_segments

    @property
    def speed_multiplier(self) -> float:
        return self.config.speed_multiplier

    @property
    def max_gem_magnitude(self) -> int:
        """Largest absolute numerator a gem can carry on this level."""
        return self.denominator - 1

    def __repr__(self) -> str:
        return f"Level({self.id}: {self.target_numerator}/{self.denominator})"


class LevelCatalog:
    """
    Fixed, ordered collection of levels.

    Levels are consumed by index and never mutated.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._levels: Tuple[Level, ...] = tuple(
            Level(level_config) for level_config in config.levels
        )

    def __len__(self) -> int:
        return len(self._levels)

    def __getitem__(self, index: int) -> Level:
        """Get level by 0-based index."""
        if 0 <= index < len(self._levels):
            return self._levels[index]
        raise IndexError(f"Level index {index} out of range [0, {len(self._levels)})")

    def __iter__(self):
        return iter(self._levels)

    @property
    def last_index(self) -> int:
        return len(self._levels) - 1

    def is_last(self, index: int) -> bool:
        """True if `index` is the final level of the run."""
        return index == self.last_index
