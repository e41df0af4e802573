"""
Audio file acquisition: validation against the format allow-list and
reading the file into memory for the engine.
"""
from __future__ import annotations
import logging
from pathlib import Path

from .config import AUDIO_CONFIG
from .types import ValidationResult

logger = logging.getLogger("TranscribePro")


def file_dialog_filter() -> str:
    """Qt file dialog filter for the supported formats."""
    patterns = " ".join(f"*.{ext}" for ext in AUDIO_CONFIG.supported_extensions)
    return f"Audio Files ({patterns})"


def validate_audio_file(path: str | Path) -> ValidationResult:
    """Check name, extension and size of a candidate audio file."""
    path = Path(path)
    if not path.name.strip():
        return ValidationResult(False, "File has no name")

    extension = path.suffix.lower().lstrip(".")
    if extension not in AUDIO_CONFIG.supported_extensions:
        supported = ", ".join(AUDIO_CONFIG.supported_extensions)
        return ValidationResult(
            False, f"Unsupported file format: .{extension}. Supported formats: {supported}"
        )

    if not path.is_file():
        return ValidationResult(False, f"File not found: {path}")

    size = path.stat().st_size
    if size > AUDIO_CONFIG.max_file_size_bytes:
        limit_mb = AUDIO_CONFIG.max_file_size_bytes // (1024 * 1024)
        return ValidationResult(
            False, f"File is too large ({size / 1024 / 1024:.2f}MB). Maximum size is {limit_mb}MB."
        )
    if size == 0:
        return ValidationResult(False, "File is empty")

    return ValidationResult(True)


def read_audio_bytes(path: str | Path) -> bytes:
    """Read a validated audio file as an opaque byte source."""
    data = Path(path).read_bytes()
    logger.info("Read %d bytes from %s", len(data), path)
    return data
