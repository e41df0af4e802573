"""
Project persistence for Transcribe Pro.
A project is the audio path, the markers and the global controls,
stored as JSON with camelCase keys.
"""
from __future__ import annotations
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProjectFormatError
from .types import GlobalControls, Marker

logger = logging.getLogger("TranscribePro")

PROJECT_VERSION = "1.0.0"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MarkerEntry(BaseModel):
    """One marker as stored in a project file."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    start: float
    end: float
    label: str = Field(default="", alias="name")
    color: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_marker(cls, marker: Marker) -> "MarkerEntry":
        return cls(
            id=marker.id,
            start=marker.start,
            end=marker.end,
            label=marker.label,
            color=marker.color,
            notes=marker.notes,
        )

    def to_marker(self) -> Marker:
        return Marker(self.id, self.start, self.end, self.label, self.color, self.notes)


class ControlsEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pitch: int = 0
    volume: float = 1.0
    playback_rate: float = Field(default=1.0, alias="playbackRate")

    @classmethod
    def from_controls(cls, controls: GlobalControls) -> "ControlsEntry":
        return cls(pitch=controls.pitch, volume=controls.volume, playback_rate=controls.playback_rate)

    def to_controls(self) -> GlobalControls:
        """Controls clamped into their supported ranges."""
        return GlobalControls(self.pitch, self.volume, self.playback_rate).clamped()


class ProjectMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(default_factory=_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_now, alias="updatedAt")
    version: str = PROJECT_VERSION


class ProjectData(BaseModel):
    """Serializable snapshot of an annotation session."""
    model_config = ConfigDict(populate_by_name=True)

    audio_file_path: str = Field(default="", alias="audioFilePath")
    markers: list[MarkerEntry]
    global_controls: ControlsEntry = Field(default_factory=ControlsEntry, alias="globalControls")
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)

    def to_markers(self) -> list[Marker]:
        return [entry.to_marker() for entry in self.markers]

    def to_controls(self) -> GlobalControls:
        return self.global_controls.to_controls()

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectData":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ProjectFormatError(f"Invalid project: {e}") from e


def save_project(path: str | Path, project: ProjectData) -> None:
    """Write a project file, stamping its update time."""
    project.metadata.updated_at = _now()
    Path(path).write_text(
        project.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8"
    )
    logger.info("Project saved to %s (%d markers)", path, len(project.markers))


def load_project(path: str | Path) -> ProjectData:
    text = Path(path).read_text(encoding="utf-8")
    try:
        project = ProjectData.model_validate_json(text)
    except ValidationError as e:
        raise ProjectFormatError(f"{path} is not a valid project: {e}") from e
    logger.info("Project loaded from %s (%d markers)", path, len(project.markers))
    return project


def project_from_store(store: Any, audio_file_path: str = "", previous: Optional[ProjectData] = None) -> ProjectData:
    """Snapshot the store's markers and controls into a ProjectData."""
    metadata = ProjectMetadata()
    if previous is not None:
        metadata.created_at = previous.metadata.created_at
    return ProjectData(
        audio_file_path=audio_file_path,
        markers=[MarkerEntry.from_marker(m) for m in store.markers],
        global_controls=ControlsEntry.from_controls(store.global_controls),
        metadata=metadata,
    )
