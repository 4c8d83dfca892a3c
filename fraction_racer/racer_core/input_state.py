"""
Input
=====

Keyboard handling for the simulation and the modal overlays.

Direction keys are level-triggered: key events only flip flags on the
InputIntent and the next tick samples them. The pulsar key and the overlay
keys are edge-triggered and act on the game immediately, once per press.

Keys are identified by pygame key names ("w", "up", "space", "return", ...)
so the mapping can be driven without a display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

if TYPE_CHECKING:
    from fraction_racer.racer_core.game import CoreGame


DIRECTION_KEYS: Dict[str, str] = {
    "w": "up",
    "up": "up",
    "s": "down",
    "down": "down",
    "a": "left",
    "left": "left",
    "d": "right",
    "right": "right",
}

PULSAR_KEY = "space"
SUBMIT_KEYS = ("return", "enter")
CHARGE_UP_KEY = "c"
RESTART_KEY = "r"

# Keypad keys report as "[1]", "[-]" etc.
_ANSWER_CHARS = set("0123456789-")


@dataclass
class InputIntent:
    """Current direction flags, sampled by every physics tick."""
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    def set(self, direction: str, pressed: bool) -> None:
        if direction not in ("up", "down", "left", "right"):
            raise ValueError(f"Unknown direction: {direction}")
        setattr(self, direction, pressed)

    @property
    def dx(self) -> int:
        return int(self.right) - int(self.left)

    @property
    def dy(self) -> int:
        return int(self.down) - int(self.up)


class AnswerEntry:
    """Text typed into an overlay answer box."""

    MAX_LENGTH = 6

    def __init__(self):
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def type_char(self, char: str) -> None:
        if char in _ANSWER_CHARS and len(self._text) < self.MAX_LENGTH:
            self._text += char

    def backspace(self) -> None:
        self._text = self._text[:-1]

    def clear(self) -> None:
        self._text = ""

    def take(self) -> str:
        """Return the typed text and empty the box."""
        text, self._text = self._text, ""
        return text


def _answer_char(key_name: str) -> Optional[str]:
    if key_name.startswith("[") and key_name.endswith("]"):
        key_name = key_name[1:-1]
    if len(key_name) == 1 and key_name in _ANSWER_CHARS:
        return key_name
    return None


class KeyboardInput:
    """
    Routes key presses to the simulation context.

    The game is passed into every call; this object only owns the text
    currently being typed into an overlay.
    """

    def __init__(self):
        self.entry = AnswerEntry()

    def key_down(self, key_name: str, game: "CoreGame") -> None:
        key_name = key_name.lower()

        direction = DIRECTION_KEYS.get(key_name)
        if direction is not None:
            game.input.set(direction, True)

        state_name = game.state.name

        if state_name == "playing":
            if key_name == PULSAR_KEY:
                game.activate_pulsar()
            return

        if state_name in ("math_challenge", "charge_up"):
            if key_name in SUBMIT_KEYS:
                game.submit_answer(self.entry.take())
            elif key_name == "backspace":
                self.entry.backspace()
            else:
                char = _answer_char(key_name)
                if char is not None:
                    self.entry.type_char(char)
            return

        if state_name == "level_complete":
            if key_name in SUBMIT_KEYS:
                game.advance()
            elif key_name == CHARGE_UP_KEY:
                self.entry.clear()
                game.start_charge_up()
            return

        if state_name in ("start", "game_complete"):
            if key_name in SUBMIT_KEYS or key_name == RESTART_KEY:
                game.restart()

    def key_up(self, key_name: str, game: "CoreGame") -> None:
        direction = DIRECTION_KEYS.get(key_name.lower())
        if direction is not None:
            game.input.set(direction, False)

    def handle_event(self, event, game: "CoreGame") -> None:
        """Dispatch a pygame KEYDOWN / KEYUP event."""
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for KeyboardInput.handle_event")
        if event.type == pygame.KEYDOWN:
            self.key_down(pygame.key.name(event.key), game)
        elif event.type == pygame.KEYUP:
            self.key_up(pygame.key.name(event.key), game)
