"""
Entities
========

Mutable records for everything that moves on the play-field.
"""

from __future__ import annotations

from dataclasses import dataclass

import pymunk


@dataclass
class Ship:
    """Player ship centre position. Width depends on the level's segment count."""
    x: float
    y: float

    def bounding_box(self, width: float, height: float) -> pymunk.BB:
        """Axis-aligned box around the ship centre."""
        half_w = width / 2
        half_h = height / 2
        return pymunk.BB(self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)


@dataclass
class Gem:
    """
    A falling fraction gem.

    numerator is signed and nonzero, with |numerator| < level denominator.
    """
    uid: int
    x: float
    y: float
    numerator: int
    speed: float
    radius: float

    @property
    def is_negative(self) -> bool:
        return self.numerator < 0

    def bounding_box(self) -> pymunk.BB:
        return pymunk.BB(
            self.x - self.radius, self.y - self.radius,
            self.x + self.radius, self.y + self.radius
        )


@dataclass
class Obstacle:
    """A falling, spinning asteroid that resets progress on contact."""
    uid: int
    x: float
    y: float
    speed: float
    radius: float
    rotation: float
    rotation_speed: float

    def bounding_box(self) -> pymunk.BB:
        return pymunk.BB(
            self.x - self.radius, self.y - self.radius,
            self.x + self.radius, self.y + self.radius
        )


@dataclass
class Star:
    """Decorative background star. Never affects gameplay."""
    x: float
    y: float
    speed: float
    size: float


@dataclass
class Shockwave:
    """
    One-shot visual record of a pulsar blast.

    Not authoritative game state; it only grows and fades.
    """
    x: float
    y: float
    radius: float
    max_radius: float
    alpha: float = 1.0

    def grow(self, amount: float) -> None:
        self.radius += amount
        self.alpha = 1.0 - self.radius / self.max_radius

    @property
    def is_spent(self) -> bool:
        return self.alpha <= 0.0
