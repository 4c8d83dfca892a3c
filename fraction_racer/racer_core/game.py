"""
Core Game
=========

The simulation context: play-field, run progress, power-ups and the state
machine, plus the player actions that drive transitions between states.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fraction_racer.racer_core.audio import AudioCueEmitter, CueDispatcher
from fraction_racer.racer_core.config_loader import GameConfig, get_config
from fraction_racer.racer_core.input_state import InputIntent
from fraction_racer.racer_core.level_catalog import Level, LevelCatalog
from fraction_racer.racer_core.physics_step import PlayField, StepEvents
from fraction_racer.racer_core.progress import (
    ChargeUpState,
    GameCompleteState,
    GameState,
    LevelCompleteState,
    MathChallengeState,
    PlayingState,
    RunProgress,
    StartState,
)
from fraction_racer.racer_core.rng import RandomSource, make_rng
from fraction_racer.racer_core.spawner import EntitySpawner
from fraction_racer.racer_core.state_snapshot import GameSnapshot, SnapshotBuilder
from fraction_racer.racer_core.verification import (
    AnswerResult,
    AnswerVerdict,
    start_charge_up,
    submit_charge_answer,
    submit_math_answer,
)


logger = logging.getLogger(__name__)


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Play-field physics and spawning
    - Run progress and power-ups
    - The state machine (free play, verification sub-games, completion)
    - Snapshots for rendering

    One instance is the whole game; it is passed explicitly to the loop
    driver and to the input handler.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        audio: Optional[AudioCueEmitter] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize game in the start state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Ignored if rng is given.
            audio: Audio cue emitter. Silent if None.
            rng: Random source for every draw in the game.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = rng if rng is not None else make_rng(seed)

        self._catalog = LevelCatalog(config)
        self._cues = CueDispatcher(audio)
        self._spawner = EntitySpawner(config, self._rng)
        self._field = PlayField(config, self._spawner, self._cues)
        self._progress = RunProgress()
        self._snapshot_builder = SnapshotBuilder(config)

        self.input = InputIntent()

        self._state: GameState = StartState()
        self._level_index: int = 0
        self._power_ups: int = 0
        self._ticks: int = 0

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> LevelCatalog:
        return self._catalog

    @property
    def field(self) -> PlayField:
        return self._field

    @property
    def progress(self) -> RunProgress:
        return self._progress

    @property
    def cues(self) -> CueDispatcher:
        return self._cues

    @property
    def rng(self) -> RandomSource:
        return self._rng

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def level_index(self) -> int:
        return self._level_index

    @property
    def level(self) -> Level:
        return self._catalog[self._level_index]

    @property
    def is_last_level(self) -> bool:
        return self._catalog.is_last(self._level_index)

    @property
    def is_playing(self) -> bool:
        return isinstance(self._state, PlayingState)

    @property
    def power_ups(self) -> int:
        return self._power_ups

    @property
    def ticks(self) -> int:
        """Number of simulated ticks since the run started."""
        return self._ticks

    def _set_state(self, state: GameState) -> None:
        if state.name != self._state.name:
            logger.info(
                "State %s -> %s (level %d)", self._state.name, state.name, self.level.id
            )
        self._state = state

    def _begin_level(self, index: int) -> None:
        self._level_index = index
        self._progress.reset()
        self._field.reset_for_level()
        self._set_state(PlayingState())

    def restart(self) -> bool:
        """
        Start a new run at the first level.

        Valid from the start screen and after the final level.
        """
        if not isinstance(self._state, (StartState, GameCompleteState)):
            logger.debug("restart() ignored in state %s", self._state.name)
            return False
        self._power_ups = 0
        self._ticks = 0
        self._begin_level(0)
        return True

    def advance(self) -> bool:
        """Continue from the level-complete panel to the next level."""
        if not isinstance(self._state, LevelCompleteState):
            logger.debug("advance() ignored in state %s", self._state.name)
            return False
        self._begin_level(self._level_index + 1)
        return True

    def start_charge_up(self) -> bool:
        """Detour from the level-complete panel into the charge-up drill."""
        if not isinstance(self._state, LevelCompleteState):
            logger.debug("start_charge_up() ignored in state %s", self._state.name)
            return False
        self._set_state(start_charge_up(self.level.denominator, self._rng))
        return True

    def tick(self, dt: float) -> StepEvents:
        """
        Advance free play by dt seconds.

        Does nothing outside the playing state.

        Args:
            dt: Elapsed seconds, already clamped by the loop driver.

        Returns:
            StepEvents for the tick (empty if nothing was simulated).
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if not self.is_playing:
            return StepEvents()

        events = self._field.step(
            dt, self.input, self.level, self._progress, self.is_last_level
        )
        self._ticks += 1

        if events.next_state is not None:
            self._set_state(events.next_state)
        return events

    def activate_pulsar(self) -> bool:
        """
        Spend one power-up to wipe every obstacle.

        Only works while playing with at least one power-up.
        """
        if not self.is_playing or self._power_ups <= 0:
            return False

        self._power_ups -= 1
        cleared = self._field.clear_obstacles()
        self._field.emit_shockwave()
        self._cues.emit("pulsar_activated")
        logger.info("Pulsar cleared %d obstacles, %d power-ups left", cleared, self._power_ups)
        return True

    def submit_answer(self, text: str) -> Optional[AnswerResult]:
        """
        Submit typed text to the active verification sub-game.

        Returns:
            AnswerResult, or None if no sub-game is active.
        """
        state = self._state
        if isinstance(state, MathChallengeState):
            result = submit_math_answer(state, text, self.is_last_level)
        elif isinstance(state, ChargeUpState):
            result = submit_charge_answer(
                state, text, self._rng, self._config.charge_up.required_streak
            )
        else:
            logger.debug("submit_answer() ignored in state %s", state.name)
            return None

        if result.verdict is AnswerVerdict.INCORRECT:
            self._cues.emit("negative_gem_collected")
            self._state = result.next_state
            return result

        self._cues.emit("positive_gem_collected")

        if result.verdict is AnswerVerdict.COMPLETED:
            self._cues.emit("level_completed")
            if isinstance(state, ChargeUpState):
                self._power_ups += 1
                logger.info("Charge-up complete, %d power-ups", self._power_ups)
                self._state = result.next_state
                self._begin_level(self._level_index + 1)
                return result

        self._set_state(result.next_state)
        return result

    def resize(self, width: float, height: float) -> None:
        self._field.resize(width, height)

    def snapshot(self) -> GameSnapshot:
        """Read-only view of the current frame."""
        return self._snapshot_builder.build(self)

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for logging and tools."""
        return {
            "state": self._state.name,
            "level_id": self.level.id,
            "current_numerator": self._progress.current_numerator,
            "target_numerator": self.level.target_numerator,
            "history": list(self._progress.history),
            "power_ups": self._power_ups,
            "gems": len(self._field.gems),
            "obstacles": len(self._field.obstacles),
            "ticks": self._ticks,
            "seed": self._seed,
        }
