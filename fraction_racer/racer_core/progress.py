"""
Progress State Machine
======================

Run progress bookkeeping, the game states, and the rules that decide what
a gem collection does to them.

Each state is its own frozen dataclass carrying only the payload that state
needs, so a math challenge without a history or a charge-up without a
question cannot be constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Tuple, Union

from fraction_racer.racer_core.level_catalog import Level


class RunProgress:
    """
    Numerator accumulated since the last reset, and the gems that built it.

    current_numerator and history are only ever changed together.
    """

    def __init__(self):
        self._numerator: int = 0
        self._history: List[int] = []

    @property
    def current_numerator(self) -> int:
        return self._numerator

    @property
    def history(self) -> Tuple[int, ...]:
        """Signed gem numerators in collection order."""
        return tuple(self._history)

    def collect(self, numerator: int) -> int:
        """Add a gem's numerator. Returns the new running sum."""
        self._numerator += numerator
        self._history.append(numerator)
        return self._numerator

    def reset(self) -> None:
        self._numerator = 0
        self._history = []

    def __repr__(self) -> str:
        return f"RunProgress(numerator={self._numerator}, history={self._history})"


@dataclass(frozen=True)
class ChargeQuestion:
    """An arithmetic problem `n1 op n2` over a shared denominator."""
    n1: int
    n2: int
    op: str
    denominator: int

    @property
    def answer(self) -> int:
        return self.n1 + self.n2 if self.op == "+" else self.n1 - self.n2

    @property
    def text(self) -> str:
        return f"{self.n1}/{self.denominator} {self.op} {self.n2}/{self.denominator}"


@dataclass(frozen=True)
class StartState:
    """Title screen before the first run."""
    name: ClassVar[str] = "start"


@dataclass(frozen=True)
class PlayingState:
    """Free play: the only state in which the field simulates."""
    name: ClassVar[str] = "playing"


@dataclass(frozen=True)
class MathChallengeState:
    """
    Sequential-sum verification.

    For history [g0, ..., gk], step s (1..k) expects g0 + ... + gs.
    """
    history: Tuple[int, ...]
    step: int = 1
    input_error: bool = False
    name: ClassVar[str] = "math_challenge"

    @property
    def total_steps(self) -> int:
        return len(self.history) - 1

    @property
    def previous_sum(self) -> int:
        return sum(self.history[:self.step])

    @property
    def current_gem(self) -> int:
        return self.history[self.step]

    @property
    def expected_answer(self) -> int:
        return sum(self.history[:self.step + 1])

    @property
    def partial_sums(self) -> Tuple[int, ...]:
        """Running totals after each gem, first gem included."""
        totals = []
        running = 0
        for gem in self.history:
            running += gem
            totals.append(running)
        return tuple(totals)


@dataclass(frozen=True)
class LevelCompleteState:
    """Between levels; the player may continue or detour into a charge-up."""
    name: ClassVar[str] = "level_complete"


@dataclass(frozen=True)
class GameCompleteState:
    """Final level cleared."""
    name: ClassVar[str] = "game_complete"


@dataclass(frozen=True)
class ChargeUpState:
    """Arithmetic drill; `progress` counts correct answers so far."""
    question: ChargeQuestion
    progress: int = 0
    input_error: bool = False
    name: ClassVar[str] = "charge_up"


GameState = Union[
    StartState,
    PlayingState,
    MathChallengeState,
    LevelCompleteState,
    GameCompleteState,
    ChargeUpState,
]


def completion_state(is_last_level: bool) -> GameState:
    """State reached when a level is won."""
    return GameCompleteState() if is_last_level else LevelCompleteState()


class CollectionOutcome(Enum):
    """What a single gem collection did."""
    CONTINUE = "continue"
    CLAMPED = "clamped"                # Sum went negative, silently reset
    OVERSHOOT = "overshoot"            # Sum exceeded target, punished reset
    LEVEL_COMPLETE = "level_complete"
    GAME_COMPLETE = "game_complete"
    MATH_CHALLENGE = "math_challenge"


@dataclass(frozen=True)
class CollectionResult:
    """Outcome of a collection and the state the game moves to."""
    outcome: CollectionOutcome
    next_state: GameState = field(default_factory=PlayingState)

    @property
    def leaves_play(self) -> bool:
        return not isinstance(self.next_state, PlayingState)


def evaluate_collection(
    progress: RunProgress,
    level: Level,
    is_last_level: bool
) -> CollectionResult:
    """
    Apply the level rules to progress right after a gem was collected.

    Negative sums are clamped to zero without penalty, sums above the
    target are a punished reset. The two directions are deliberately
    handled differently.

    Args:
        progress: Run progress already including the new gem. Mutated on reset.
        level: Current level.
        is_last_level: True if winning this level ends the run.

    Returns:
        CollectionResult with the outcome and next state.
    """
    if progress.current_numerator < 0:
        progress.reset()
        return CollectionResult(CollectionOutcome.CLAMPED)

    if progress.current_numerator == level.target_numerator:
        history = progress.history
        if len(history) <= 1:
            outcome = (
                CollectionOutcome.GAME_COMPLETE if is_last_level
                else CollectionOutcome.LEVEL_COMPLETE
            )
            return CollectionResult(outcome, completion_state(is_last_level))
        return CollectionResult(
            CollectionOutcome.MATH_CHALLENGE,
            MathChallengeState(history=history)
        )

    if progress.current_numerator > level.target_numerator:
        progress.reset()
        return CollectionResult(CollectionOutcome.OVERSHOOT)

    return CollectionResult(CollectionOutcome.CONTINUE)
