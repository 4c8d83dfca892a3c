"""
Human Play Mode
===============

Play Fraction Racer in a pygame window.

Controls:
    - WASD / Arrows: Move ship
    - Space: Fire pulsar power-up (while playing)
    - Digits, minus, Backspace, Enter: Answer verification questions
    - Enter: Start / continue, C: Charge up (after a level)
    - R: Restart after victory
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from fraction_racer.racer_core.audio import AudioCueEmitter, NullAudio, PygameAudio
from fraction_racer.racer_core.config_loader import GameConfig, load_config
from fraction_racer.racer_core.game import CoreGame
from fraction_racer.racer_core.game_loop import GameLoopDriver
from fraction_racer.racer_core.input_state import KeyboardInput
from fraction_racer.racer_core.logging_config import setup_logging
from fraction_racer.racer_core.render_pygame import PygameRenderer


class HumanPlayer:
    """Wires keyboard, window, audio and the loop driver around one CoreGame."""

    def __init__(
        self,
        config: GameConfig,
        seed: Optional[int] = None,
        window_width: int = 960,
        window_height: int = 720,
        target_fps: int = 60,
        mute: bool = False
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for human play mode")

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height), pygame.RESIZABLE)
        pygame.display.set_caption("Fraction Racer")
        self._clock = pygame.time.Clock()
        self._target_fps = target_fps

        audio: AudioCueEmitter = NullAudio()
        if not mute:
            mixer_audio = PygameAudio()
            if not mixer_audio.enabled:
                print("Audio device unavailable, playing without sound")
            audio = mixer_audio

        self._game = CoreGame(config=config, seed=seed, audio=audio)
        self._game.resize(window_width, window_height)
        self._keyboard = KeyboardInput()

        self._renderer = PygameRenderer(answer_text=lambda: self._keyboard.entry.text)
        self._renderer.attach(self._screen)
        self._driver = GameLoopDriver(self._game, self._renderer)

    def run(self) -> Dict[str, Any]:
        """Run the game loop. Returns the final game info."""
        print("=== Fraction Racer ===")
        print("WASD/Arrows to move, Space to fire a pulsar, ESC to quit")
        print()

        self._driver.run(
            poll_events=self._handle_events,
            wait_frame=lambda: self._clock.tick(self._target_fps)
        )

        pygame.quit()
        return self._game.get_info()

    def _handle_events(self) -> bool:
        """Process pygame events. Returns False to quit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False

            if event.type in (pygame.KEYDOWN, pygame.KEYUP):
                self._keyboard.handle_event(event, self._game)

            elif event.type == pygame.VIDEORESIZE:
                self._screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self._renderer.attach(self._screen)
                self._game.resize(event.w, event.h)

        return True


def main():
    parser = argparse.ArgumentParser(description="Play Fraction Racer interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=960, help="Window width (default: 960)")
    parser.add_argument("--height", type=int, default=720, help="Window height (default: 720)")
    parser.add_argument("--fps", type=int, default=None, help="Target FPS (default: from config)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--mute", action="store_true", help="Disable audio")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    setup_logging(args.log_level)

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps or config.loop.fps,
            mute=args.mute
        )
        info = player.run()
        print(f"\nReached level {info['level_id']} with {info['power_ups']} power-ups ({info['ticks']} ticks)")
        return 0
    except (ImportError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
