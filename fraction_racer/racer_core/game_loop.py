"""
Game Loop Driver
================

One authoritative per-frame tick. Simulation only advances while the game
is in free play; every other state is render-only and the field stays
frozen underneath the overlay.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from fraction_racer.racer_core.game import CoreGame
from fraction_racer.racer_core.physics_step import StepEvents
from fraction_racer.racer_core.state_snapshot import GameSnapshot


logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Anything that can draw a snapshot. Must not touch the game."""

    def has_surface(self) -> bool: ...

    def render(self, snapshot: GameSnapshot) -> None: ...


class GameLoopDriver:
    """
    Computes frame deltas, clamps them, and drives CoreGame.tick().

    Time is in seconds from any monotonic clock; frame() takes the current
    time so tests can feed synthetic timestamps.
    """

    def __init__(
        self,
        game: CoreGame,
        renderer: Optional[Renderer] = None,
        max_dt: Optional[float] = None
    ):
        """
        Initialize driver.

        Args:
            game: Simulation context to drive.
            renderer: Optional renderer; frames are skipped while it has no surface.
            max_dt: Upper bound on a single tick. Uses config loop.max_dt if None.
        """
        self._game = game
        self._renderer = renderer
        self._max_dt = max_dt if max_dt is not None else game.config.loop.max_dt
        self._last_time: Optional[float] = None
        self._running = False
        self._frames = 0
        self._skipped_frames = 0

    @property
    def game(self) -> CoreGame:
        return self._game

    @property
    def max_dt(self) -> float:
        return self._max_dt

    @property
    def running(self) -> bool:
        return self._running

    @property
    def frames(self) -> int:
        return self._frames

    @property
    def skipped_frames(self) -> int:
        """Frames dropped because the renderer had no surface."""
        return self._skipped_frames

    def clamp_dt(self, dt: float) -> float:
        return max(0.0, min(dt, self._max_dt))

    def frame(self, now: float) -> Optional[StepEvents]:
        """
        Run one frame at time `now`.

        Returns:
            StepEvents if the simulation advanced, None otherwise.
        """
        if self._renderer is not None and not self._renderer.has_surface():
            self._skipped_frames += 1
            return None

        last = self._last_time if self._last_time is not None else now
        self._last_time = now
        self._frames += 1

        events = None
        if self._game.is_playing:
            events = self._game.tick(self.clamp_dt(now - last))

        if self._renderer is not None:
            self._renderer.render(self._game.snapshot())
        return events

    def stop(self) -> None:
        """Tear the loop down after the current frame."""
        self._running = False

    def run(
        self,
        poll_events: Callable[[], bool],
        wait_frame: Callable[[], None],
        clock: Callable[[], float] = time.perf_counter
    ) -> None:
        """
        Drive frames until stopped.

        Args:
            poll_events: Called before each frame; returning False stops the loop.
            wait_frame: Blocks until the next frame is due (e.g. pygame Clock.tick).
            clock: Monotonic time source in seconds.
        """
        self._running = True
        self._last_time = None
        logger.info("Game loop started")
        while self._running:
            if not poll_events():
                break
            self.frame(clock())
            wait_frame()
        self._running = False
        logger.info("Game loop stopped after %d frames", self._frames)
