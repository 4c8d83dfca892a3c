"""
Audio Cues
==========

Fire-and-forget sound effects keyed by game events.

The simulation only talks to a CueDispatcher, which forwards to an emitter
and swallows whatever the emitter raises: sound must never be able to stop
the game.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False


logger = logging.getLogger(__name__)

CUE_NAMES = (
    "positive_gem_collected",
    "negative_gem_collected",
    "level_completed",
    "progress_reset",
    "pulsar_activated",
    "background_beat",
)


class AudioCueEmitter:
    """Base emitter. Every cue is a no-op; subclasses override what they play."""

    def positive_gem_collected(self) -> None:
        pass

    def negative_gem_collected(self) -> None:
        pass

    def level_completed(self) -> None:
        pass

    def progress_reset(self) -> None:
        pass

    def pulsar_activated(self) -> None:
        pass

    def background_beat(self, frequency: float) -> None:
        pass


class NullAudio(AudioCueEmitter):
    """Silent emitter for headless runs and tests."""


class CueDispatcher:
    """
    Boundary between the simulation and an emitter.

    Any exception raised by the emitter is logged and dropped.
    """

    def __init__(self, emitter: Optional[AudioCueEmitter] = None):
        self._emitter = emitter if emitter is not None else NullAudio()
        self._failures = 0

    @property
    def emitter(self) -> AudioCueEmitter:
        return self._emitter

    @property
    def failures(self) -> int:
        """Number of emitter calls that raised."""
        return self._failures

    def emit(self, cue: str, *args) -> None:
        if cue not in CUE_NAMES:
            raise ValueError(f"Unknown audio cue: {cue}")
        try:
            getattr(self._emitter, cue)(*args)
        except Exception as e:
            self._failures += 1
            logger.debug("Audio cue %s failed: %s", cue, e)


# (frequency_hz, waveform, duration_s, volume, delay_s)
Tone = Tuple[float, str, float, float, float]

_CUE_TONES: Dict[str, List[Tone]] = {
    "positive_gem_collected": [
        (600, "sine", 0.10, 0.10, 0.00),
        (800, "sine", 0.15, 0.10, 0.05),
    ],
    "negative_gem_collected": [
        (300, "square", 0.10, 0.10, 0.00),
        (200, "square", 0.15, 0.10, 0.05),
    ],
    "level_completed": [
        (440, "sine", 0.30, 0.15, 0.00),
        (554, "sine", 0.30, 0.15, 0.10),
        (659, "sine", 0.30, 0.15, 0.20),
        (880, "sine", 0.30, 0.15, 0.30),
    ],
    "progress_reset": [
        (150, "sawtooth", 0.40, 0.20, 0.00),
        (100, "sawtooth", 0.40, 0.20, 0.10),
    ],
    "pulsar_activated": [
        (1400, "sine", 0.20, 0.15, 0.08),
        (1800, "sine", 0.15, 0.10, 0.15),
    ],
}


def _waveform(kind: str, phase: np.ndarray) -> np.ndarray:
    """Unit-amplitude waveform from a phase array in cycles."""
    if kind == "sine":
        return np.sin(2 * np.pi * phase)
    if kind == "square":
        return np.sign(np.sin(2 * np.pi * phase))
    if kind == "sawtooth":
        return 2.0 * (phase - np.floor(phase + 0.5))
    raise ValueError(f"Unknown waveform: {kind}")


def synthesize_tone(
    frequency: float,
    kind: str,
    duration: float,
    volume: float,
    sample_rate: int
) -> np.ndarray:
    """Single tone with an exponential decay to 1% of its volume."""
    n = max(1, int(duration * sample_rate))
    t = np.arange(n) / sample_rate
    envelope = volume * np.power(0.01 / volume, t / duration) if volume > 0.01 else np.full(n, volume)
    return _waveform(kind, frequency * t) * envelope


def synthesize_sweep(
    points: Sequence[Tuple[float, float]],
    kind: str,
    volume: float,
    sample_rate: int
) -> np.ndarray:
    """
    Exponential frequency sweep through (time_s, frequency_hz) points.

    The first point must be at time 0.
    """
    duration = points[-1][0]
    n = max(1, int(duration * sample_rate))
    t = np.arange(n) / sample_rate
    times = np.array([p[0] for p in points])
    log_freqs = np.log(np.array([p[1] for p in points]))
    freqs = np.exp(np.interp(t, times, log_freqs))
    phase = np.cumsum(freqs) / sample_rate
    envelope = volume * np.power(0.01 / volume, t / duration)
    return _waveform(kind, phase) * envelope


def mix_tones(tones: Sequence[Tone], sample_rate: int) -> np.ndarray:
    """Mix delayed tones into one mono float buffer."""
    end = max(delay + duration for _, _, duration, _, delay in tones)
    buffer = np.zeros(int(end * sample_rate) + 1, dtype=np.float64)
    for frequency, kind, duration, volume, delay in tones:
        samples = synthesize_tone(frequency, kind, duration, volume, sample_rate)
        start = int(delay * sample_rate)
        buffer[start:start + len(samples)] += samples
    return buffer


class PygameAudio(AudioCueEmitter):
    """
    Emitter synthesizing every cue with numpy and playing it on pygame.mixer.

    If the mixer cannot be initialised the emitter stays silent.
    """

    SAMPLE_RATE = 22050
    BASS_EVERY = 4

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self._sample_rate = sample_rate
        self._enabled = False
        self._sounds: Dict[str, "pygame.mixer.Sound"] = {}
        self._beat_cache: Dict[int, "pygame.mixer.Sound"] = {}
        self._beat_count = 0

        if not PYGAME_AVAILABLE:
            logger.warning("pygame not available, audio disabled")
            return

        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
            self._build_sounds()
            self._enabled = True
        except pygame.error as e:
            logger.warning("Audio disabled: %s", e)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _to_sound(self, buffer: np.ndarray) -> "pygame.mixer.Sound":
        pcm = np.clip(buffer, -1.0, 1.0) * 32767
        samples = pcm.astype(np.int16)
        channels = pygame.mixer.get_init()[2]
        if channels > 1:
            samples = np.repeat(samples[:, None], channels, axis=1)
        return pygame.sndarray.make_sound(np.ascontiguousarray(samples))

    def _build_sounds(self) -> None:
        buffers = {
            cue: mix_tones(tones, self._sample_rate)
            for cue, tones in _CUE_TONES.items()
        }

        # Pulsar pings ride on top of a rising-then-falling sweep
        sweep = synthesize_sweep(
            [(0.0, 200.0), (0.15, 1200.0), (0.5, 100.0)],
            "sawtooth", 0.25, self._sample_rate
        )
        pings = buffers["pulsar_activated"]
        combined = np.zeros(max(len(sweep), len(pings)))
        combined[:len(sweep)] += sweep
        combined[:len(pings)] += pings
        buffers["pulsar_activated"] = combined

        for cue, buffer in buffers.items():
            self._sounds[cue] = self._to_sound(buffer)

    def _play(self, cue: str) -> None:
        if self._enabled:
            self._sounds[cue].play()

    def positive_gem_collected(self) -> None:
        self._play("positive_gem_collected")

    def negative_gem_collected(self) -> None:
        self._play("negative_gem_collected")

    def level_completed(self) -> None:
        self._play("level_completed")

    def progress_reset(self) -> None:
        self._play("progress_reset")

    def pulsar_activated(self) -> None:
        self._play("pulsar_activated")

    def background_beat(self, frequency: float) -> None:
        if not self._enabled:
            return
        key = int(round(frequency * 10))
        sound = self._beat_cache.get(key)
        if sound is None:
            sound = self._to_sound(
                synthesize_tone(frequency, "square", 0.1, 0.02, self._sample_rate)
            )
            self._beat_cache[key] = sound
        sound.play()

        # Bass note on every fourth beat, an octave down
        if self._beat_count % self.BASS_EVERY == 0:
            bass_key = -key
            bass = self._beat_cache.get(bass_key)
            if bass is None:
                bass = self._to_sound(
                    synthesize_tone(frequency / 2, "sawtooth", 0.15, 0.04, self._sample_rate)
                )
                self._beat_cache[bass_key] = bass
            bass.play()
        self._beat_count += 1
