"""
Verification Sub-Games
======================

The two modal flows that gate progression:

- Math Challenge: rebuild the running sum of the collected gems one step
  at a time. Wrong answers flag an error and may be retried forever.
- Charge-Up: answer a fixed number of arithmetic questions in a row to
  earn one pulsar power-up. Wrong answers flag an error but neither reset
  the streak nor replace the question.

Both are pure transitions: they take the current state and return the
next one, leaving side effects (audio, level changes) to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from fraction_racer.racer_core.progress import (
    ChargeQuestion,
    ChargeUpState,
    GameState,
    MathChallengeState,
    completion_state,
)
from fraction_racer.racer_core.rng import RandomSource


class AnswerVerdict(Enum):
    """Result of submitting an answer to a sub-game."""
    INCORRECT = "incorrect"
    CORRECT = "correct"        # Correct, sub-game continues
    COMPLETED = "completed"    # Correct, and this finished the sub-game


@dataclass(frozen=True)
class AnswerResult:
    verdict: AnswerVerdict
    next_state: GameState

    @property
    def is_correct(self) -> bool:
        return self.verdict is not AnswerVerdict.INCORRECT


def parse_answer(text: str) -> Optional[int]:
    """
    Parse typed answer text as an integer.

    Returns None for anything that is not a plain integer.
    """
    if text is None:
        return None
    try:
        return int(str(text).strip())
    except ValueError:
        return None


def submit_math_answer(
    state: MathChallengeState,
    text: str,
    is_last_level: bool
) -> AnswerResult:
    """
    Check one step of the math challenge.

    Args:
        state: Current challenge state.
        text: Raw answer text.
        is_last_level: True if completing the challenge ends the run.
    """
    value = parse_answer(text)
    if value != state.expected_answer:
        return AnswerResult(AnswerVerdict.INCORRECT, replace(state, input_error=True))

    if state.step + 1 >= len(state.history):
        return AnswerResult(AnswerVerdict.COMPLETED, completion_state(is_last_level))

    return AnswerResult(
        AnswerVerdict.CORRECT,
        replace(state, step=state.step + 1, input_error=False)
    )


def make_charge_question(denominator: int, rng: RandomSource) -> ChargeQuestion:
    """
    Generate a Charge-Up question.

    n1 is drawn from [1, 2 * denominator] and n2 from [1, denominator].
    Subtractions are reordered so the answer is never negative.
    """
    n1 = rng.randint(1, denominator * 2)
    n2 = rng.randint(1, denominator)
    op = "+" if rng.random() < 0.5 else "-"

    if op == "-" and n1 < n2:
        n1, n2 = n2, n1
    return ChargeQuestion(n1=n1, n2=n2, op=op, denominator=denominator)


def start_charge_up(denominator: int, rng: RandomSource) -> ChargeUpState:
    """Fresh drill with zero progress."""
    return ChargeUpState(question=make_charge_question(denominator, rng))


def submit_charge_answer(
    state: ChargeUpState,
    text: str,
    rng: RandomSource,
    required_streak: int = 3
) -> AnswerResult:
    """
    Check a Charge-Up answer.

    On COMPLETED the returned state is the finished drill; the caller
    credits the power-up and starts the next level.
    """
    value = parse_answer(text)
    if value != state.question.answer:
        return AnswerResult(AnswerVerdict.INCORRECT, replace(state, input_error=True))

    new_progress = state.progress + 1
    if new_progress >= required_streak:
        return AnswerResult(
            AnswerVerdict.COMPLETED,
            replace(state, progress=new_progress, input_error=False)
        )

    return AnswerResult(
        AnswerVerdict.CORRECT,
        ChargeUpState(
            question=make_charge_question(state.question.denominator, rng),
            progress=new_progress
        )
    )
