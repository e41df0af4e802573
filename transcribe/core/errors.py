"""
Error taxonomy for Transcribe Pro.
"""


class TranscribeError(Exception):
    """Base class for application errors."""


class NoSourceLoaded(TranscribeError):
    """A playback operation was attempted without a loaded audio source."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: no audio loaded")
        self.operation = operation


class InvalidRange(TranscribeError, ValueError):
    """A marker range is empty, inverted or outside the audio duration."""

    def __init__(self, start: float, end: float, duration: float = 0.0) -> None:
        if start >= end:
            reason = "start must be before end"
        else:
            reason = f"range must lie within [0, {duration:.3f}]"
        super().__init__(f"Invalid marker range [{start:.3f}, {end:.3f}]: {reason}")
        self.start = start
        self.end = end
        self.duration = duration


class AudioLoadError(TranscribeError):
    """Audio bytes could not be decoded into a playable buffer."""


class ProjectFormatError(TranscribeError):
    """A project file is missing fields or holds malformed values."""
