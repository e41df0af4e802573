"""
Type definitions for the Transcribe Pro core module.
Provides value types, type aliases and protocols shared by the clock,
the layout engine and the store.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol
import numpy as np
from numpy.typing import NDArray

from .config import CONTROLS_CONFIG, LAYOUT_CONFIG

# Audio data types
AudioArray = NDArray[np.float32]  # Shape: (samples, channels)

# Callback types
TimeSource = Callable[[], float]  # Monotonic seconds


@dataclass(slots=True)
class Marker:
    """A labeled time range over the audio timeline."""
    id: str
    start: float
    end: float
    label: str = ""
    color: Optional[str] = None
    notes: Optional[str] = None

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass(frozen=True, slots=True)
class MarkerRect:
    """Horizontal extent of a marker on the drawing surface."""
    x: float
    width: float


@dataclass(frozen=True, slots=True)
class TimeTick:
    """A labeled grid line on the time axis."""
    time: float
    x: float
    label: str


@dataclass(slots=True)
class LayoutResult:
    """Full geometry of the marker timeline for one set of inputs."""
    layer_of: dict[str, int] = field(default_factory=dict)
    max_layer: int = 0
    marker_rects: dict[str, MarkerRect] = field(default_factory=dict)
    ticks: list[TimeTick] = field(default_factory=list)
    max_visible_layers: int = LAYOUT_CONFIG.max_visible_layers

    @property
    def visible_layers(self) -> int:
        """Number of rows the presentation layer should draw."""
        if not self.layer_of:
            return 1
        return min(self.max_layer + 1, self.max_visible_layers)

    def is_clipped(self, marker_id: str) -> bool:
        """True if the marker sits on a layer beyond the visible cap."""
        return self.layer_of.get(marker_id, 0) >= self.max_visible_layers


@dataclass(slots=True)
class GlobalControls:
    """Session-wide playback controls."""
    pitch: int = 0  # semitones
    volume: float = 1.0
    playback_rate: float = 1.0

    def clamped(self) -> "GlobalControls":
        c = CONTROLS_CONFIG
        return GlobalControls(
            pitch=int(min(max(self.pitch, c.min_pitch), c.max_pitch)),
            volume=float(min(max(self.volume, c.min_volume), c.max_volume)),
            playback_rate=float(min(max(self.playback_rate, c.min_playback_rate), c.max_playback_rate)),
        )


class ValidationResult:
    """Result of validating a candidate audio file."""
    __slots__ = ('valid', 'error')

    def __init__(self, valid: bool, error: Optional[str] = None):
        self.valid = valid
        self.error = error

    def __bool__(self) -> bool:
        return self.valid


class PlaybackEngine(Protocol):
    """
    Actuator that turns a decoded buffer into sound.

    Implementations also expose a ``playbackEnded`` Qt signal that fires
    when the device runs out of audio.
    """
    playbackEnded: Any

    def load(self, data: bytes) -> float: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...
    def stop(self) -> None: ...
    def seek(self, seconds: float) -> None: ...
    def set_rate(self, rate: float) -> None: ...
    def raw_position(self) -> float: ...
    def close(self) -> None: ...
