"""
Transcribe Pro Core Module

This module contains the annotation core:
- PlaybackClock: Authoritative play/pause state and derived position
- SoundDeviceEngine: Audio decoding and output
- AppStore: Observable shared state and marker collection
- layout: Marker layering and time/pixel transforms
- project: Project save/load
"""
from .playback_clock import PlaybackClock
from .audio_engine import SoundDeviceEngine
from .store import AppStore
from .types import Marker, LayoutResult, MarkerRect, TimeTick, GlobalControls
from .errors import (
    TranscribeError,
    NoSourceLoaded,
    InvalidRange,
    AudioLoadError,
    ProjectFormatError,
)
from .config import (
    AUDIO_CONFIG,
    CLOCK_CONFIG,
    CONTROLS_CONFIG,
    LAYOUT_CONFIG,
    PlaybackState
)
from . import layout
from . import project

__all__ = [
    # Main classes
    'PlaybackClock',
    'SoundDeviceEngine',
    'AppStore',
    # Value types
    'Marker',
    'LayoutResult',
    'MarkerRect',
    'TimeTick',
    'GlobalControls',
    # Errors
    'TranscribeError',
    'NoSourceLoaded',
    'InvalidRange',
    'AudioLoadError',
    'ProjectFormatError',
    # Config
    'AUDIO_CONFIG',
    'CLOCK_CONFIG',
    'CONTROLS_CONFIG',
    'LAYOUT_CONFIG',
    'PlaybackState',
    # Submodules
    'layout',
    'project',
]
