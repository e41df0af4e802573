"""
Shared application state for Transcribe Pro.
Holds duration, playback position, markers, selection and global
controls, and notifies listeners through Qt signals.
"""
from __future__ import annotations
from dataclasses import replace
import logging
from typing import Any, Optional
from uuid import uuid4

from PyQt6.QtCore import QObject, pyqtSignal

from .config import LAYOUT_CONFIG
from .errors import InvalidRange
from .project import ProjectData, project_from_store
from .types import GlobalControls, Marker

logger = logging.getLogger("TranscribePro")

_EDITABLE_FIELDS = frozenset({"start", "end", "label", "color", "notes"})


class AppStore(QObject):
    """
    Observable key-value holder shared by the clock and the UI.

    The marker collection is the only owner of Marker objects; edits are
    validated before they are applied, so the collection never holds an
    empty or out-of-range marker.
    """
    durationChanged = pyqtSignal(float)
    currentTimeChanged = pyqtSignal(float)
    isPlayingChanged = pyqtSignal(bool)
    markersChanged = pyqtSignal()
    selectedMarkerChanged = pyqtSignal(object)  # str | None
    globalControlsChanged = pyqtSignal(object)  # GlobalControls

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._duration: float = 0.0
        self._current_time: float = 0.0
        self._is_playing: bool = False
        self._markers: list[Marker] = []
        self._selected_marker_id: Optional[str] = None
        self._controls = GlobalControls()

    # --- Audio state ---

    @property
    def duration(self) -> float:
        return self._duration

    def set_duration(self, duration: float) -> None:
        duration = max(0.0, float(duration))
        if duration != self._duration:
            self._duration = duration
            self.durationChanged.emit(duration)
            if duration > 0:
                self._fit_markers(duration)

    @property
    def current_time(self) -> float:
        return self._current_time

    def set_current_time(self, seconds: float) -> None:
        if seconds != self._current_time:
            self._current_time = seconds
            self.currentTimeChanged.emit(seconds)

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    def set_is_playing(self, playing: bool) -> None:
        if playing != self._is_playing:
            self._is_playing = playing
            self.isPlayingChanged.emit(playing)

    # --- Markers ---

    @property
    def markers(self) -> list[Marker]:
        """Snapshot of the marker collection in insertion order."""
        return list(self._markers)

    def get_marker(self, marker_id: str) -> Optional[Marker]:
        for marker in self._markers:
            if marker.id == marker_id:
                return marker
        return None

    def validate_range(self, start: float, end: float, duration: Optional[float] = None) -> None:
        """
        Raise InvalidRange unless 0 <= start < end <= duration.
        The upper bound only applies once a duration is known.
        """
        if duration is None:
            duration = self._duration
        if not 0 <= start < end:
            raise InvalidRange(start, end, duration)
        if duration > 0 and end > duration:
            raise InvalidRange(start, end, duration)

    def validate_markers(self, markers: list[Marker], duration: Optional[float] = None) -> None:
        """Check a candidate collection for bad ranges and duplicate ids."""
        for marker in markers:
            self.validate_range(marker.start, marker.end, duration)
        ids = [m.id for m in markers]
        if len(set(ids)) != len(ids):
            raise ValueError("duplicate marker ids")

    def next_color(self) -> str:
        palette = LAYOUT_CONFIG.marker_colors
        return palette[len(self._markers) % len(palette)]

    def create_marker(
        self,
        start: float,
        end: float,
        label: str,
        color: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Marker:
        """Build, validate and add a new marker with a fresh id."""
        marker = Marker(
            id=uuid4().hex,
            start=float(start),
            end=float(end),
            label=label,
            color=color or self.next_color(),
            notes=notes,
        )
        self.add_marker(marker)
        return marker

    def add_marker(self, marker: Marker) -> None:
        self.validate_range(marker.start, marker.end)
        if self.get_marker(marker.id) is not None:
            raise ValueError(f"marker '{marker.id}' already exists")
        self._markers.append(marker)
        logger.info("Marker added: %s [%.2f, %.2f]", marker.label, marker.start, marker.end)
        self.markersChanged.emit()

    def update_marker(self, marker_id: str, **changes: Any) -> Marker:
        """
        Edit a marker in place.

        Args:
            marker_id: Id of the marker to edit
            **changes: Any of start, end, label, color, notes

        Returns:
            The edited marker
        """
        marker = self.get_marker(marker_id)
        if marker is None:
            raise KeyError(f"marker '{marker_id}' not found")
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"cannot edit marker fields: {', '.join(sorted(unknown))}")

        candidate = replace(marker, **changes)
        self.validate_range(candidate.start, candidate.end)
        for name, value in changes.items():
            setattr(marker, name, value)
        self.markersChanged.emit()
        return marker

    def delete_marker(self, marker_id: str) -> Optional[Marker]:
        """Remove a marker and return it, or None if the id is unknown."""
        marker = self.get_marker(marker_id)
        if marker is None:
            return None
        self._markers.remove(marker)
        logger.info("Marker deleted: %s", marker.label)
        if self._selected_marker_id == marker_id:
            self.select_marker(None)
        self.markersChanged.emit()
        return marker

    def set_markers(self, markers: list[Marker]) -> None:
        """Replace the whole collection (bulk load)."""
        self.validate_markers(markers)
        self._markers = list(markers)
        if self._selected_marker_id not in [m.id for m in markers]:
            self.select_marker(None)
        self.markersChanged.emit()

    def _fit_markers(self, duration: float) -> None:
        """Trim markers to a newly known duration; drop those starting past it."""
        kept = []
        changed = False
        for marker in self._markers:
            if marker.start >= duration:
                logger.warning("Marker dropped, starts after end of audio: %s [%.2f, %.2f]",
                               marker.label, marker.start, marker.end)
                changed = True
                continue
            if marker.end > duration:
                logger.warning("Marker trimmed to end of audio: %s [%.2f, %.2f] -> %.2f",
                               marker.label, marker.start, marker.end, duration)
                marker.end = duration
                changed = True
            kept.append(marker)
        if not changed:
            return
        self._markers = kept
        if self._selected_marker_id is not None and self.get_marker(self._selected_marker_id) is None:
            self.select_marker(None)
        self.markersChanged.emit()

    # --- Selection ---

    @property
    def selected_marker_id(self) -> Optional[str]:
        return self._selected_marker_id

    def select_marker(self, marker_id: Optional[str]) -> None:
        if marker_id is not None and self.get_marker(marker_id) is None:
            raise KeyError(f"marker '{marker_id}' not found")
        if marker_id != self._selected_marker_id:
            self._selected_marker_id = marker_id
            self.selectedMarkerChanged.emit(marker_id)

    # --- Global controls ---

    @property
    def global_controls(self) -> GlobalControls:
        return replace(self._controls)

    def set_global_controls(self, controls: GlobalControls) -> None:
        controls = controls.clamped()
        if controls != self._controls:
            self._controls = controls
            self.globalControlsChanged.emit(replace(controls))

    def set_pitch(self, pitch: int) -> None:
        self.set_global_controls(replace(self._controls, pitch=pitch))

    def set_volume(self, volume: float) -> None:
        self.set_global_controls(replace(self._controls, volume=volume))

    def set_playback_rate(self, rate: float) -> None:
        self.set_global_controls(replace(self._controls, playback_rate=rate))

    # --- Project management ---

    def reset_audio(self) -> None:
        self.set_is_playing(False)
        self.set_current_time(0.0)
        self.set_duration(0.0)

    def reset_project(self) -> None:
        """Drop all markers, selection, controls and audio state."""
        self.reset_audio()
        self._markers = []
        self.select_marker(None)
        self.set_global_controls(GlobalControls())
        self.markersChanged.emit()
        logger.info("Project reset")

    def load_project(self, markers: list[Marker], controls: GlobalControls) -> None:
        """
        Replace markers and controls; audio state starts empty.
        Nothing changes if the markers are rejected.
        """
        self.validate_markers(markers, duration=0.0)
        self.reset_audio()
        self.set_markers(markers)
        self.set_global_controls(controls)
        logger.info("Project loaded with %d markers", len(markers))

    def to_project(self, audio_file_path: str = "", previous: Optional[ProjectData] = None) -> ProjectData:
        """Snapshot markers and controls for saving."""
        return project_from_store(self, audio_file_path, previous)
