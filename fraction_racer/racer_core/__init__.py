"""
Racer Core - The real-time simulation engine.

This module provides the play-field simulation, the progress state machine,
the verification sub-games and the frame loop driver.

Main exports:
- CoreGame: Simulation context (state machine, field, progress, power-ups)
- GameLoopDriver: Per-frame driver with dt clamping
- GameConfig: Configuration loaded from game_config.yaml
- LevelCatalog: Ordered level table
"""

from fraction_racer.racer_core.config_loader import GameConfig, load_config
from fraction_racer.racer_core.level_catalog import Level, LevelCatalog
from fraction_racer.racer_core.game import CoreGame
from fraction_racer.racer_core.game_loop import GameLoopDriver
from fraction_racer.racer_core.audio import AudioCueEmitter, NullAudio, PygameAudio
from fraction_racer.racer_core.input_state import InputIntent, KeyboardInput
from fraction_racer.racer_core.state_snapshot import GameSnapshot

__all__ = [
    "GameConfig",
    "load_config",
    "Level",
    "LevelCatalog",
    "CoreGame",
    "GameLoopDriver",
    "AudioCueEmitter",
    "NullAudio",
    "PygameAudio",
    "InputIntent",
    "KeyboardInput",
    "GameSnapshot",
]
