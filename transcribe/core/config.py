"""
Centralized configuration for Transcribe Pro.
All magic numbers and default settings in one place.
"""
from dataclasses import dataclass
from enum import Enum, auto


class PlaybackState(Enum):
    """Playback state enumeration."""
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


@dataclass(frozen=True, slots=True)
class ClockConfig:
    """Playback clock timing."""
    tick_interval_ms: int = 100
    end_tolerance: float = 0.1  # seconds before duration that counts as end


@dataclass(frozen=True, slots=True)
class AudioConfig:
    """Audio engine configuration."""
    playback_blocksize: int = 2048
    playback_channels: int = 2
    supported_extensions: tuple[str, ...] = ("mp3", "wav", "ogg", "flac", "m4a", "aac")
    max_file_size_bytes: int = 500 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Marker timeline geometry."""
    padding: float = 40.0  # left/right padding reserved for axis labels
    max_visible_layers: int = 5
    min_marker_duration: float = 0.5
    row_height: int = 22
    # (upper bound in seconds, tick interval in seconds)
    tick_buckets: tuple[tuple[float, float], ...] = (
        (30.0, 5.0),
        (60.0, 10.0),
        (600.0, 30.0),
        (1800.0, 60.0),
    )
    fallback_tick_interval: float = 300.0
    marker_colors: tuple[str, ...] = (
        "#2cc7c9", "#f04f5a", "#f2b134", "#7bc86c", "#9b6bd6", "#e87ec0",
    )


@dataclass(frozen=True, slots=True)
class ControlsConfig:
    """Global control ranges."""
    min_pitch: int = -12
    max_pitch: int = 12
    min_volume: float = 0.0
    max_volume: float = 1.0
    min_playback_rate: float = 0.5
    max_playback_rate: float = 2.0


# Global config instances (immutable singletons)
CLOCK_CONFIG = ClockConfig()
AUDIO_CONFIG = AudioConfig()
LAYOUT_CONFIG = LayoutConfig()
CONTROLS_CONFIG = ControlsConfig()
