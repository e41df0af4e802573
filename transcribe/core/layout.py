"""
Marker layout engine for the timeline.

Assigns each marker a vertical layer so that overlapping markers never
share a row, and maps between seconds and pixels on a padded drawing
surface. Everything here is a pure function of its inputs; callers
recompute the whole layout whenever markers, duration or width change.
"""
from __future__ import annotations
from typing import Iterable, Optional, Sequence

from .config import LAYOUT_CONFIG
from .types import LayoutResult, Marker, MarkerRect, TimeTick


def _span(marker: Marker) -> tuple[float, float]:
    """Marker extent with inverted ranges collapsed to zero width."""
    return marker.start, max(marker.start, marker.end)


def overlaps(a: Marker, b: Marker) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    s1, e1 = _span(a)
    s2, e2 = _span(b)
    return s1 < e2 and s2 < e1


def assign_layers(markers: Iterable[Marker]) -> tuple[dict[str, int], int]:
    """
    Greedy first-fit layering.

    Markers are visited by ascending start, ties broken by id, and each is
    placed on the lowest layer holding nothing it overlaps. The result does
    not depend on input order.

    Returns:
        (layer_of, max_layer) where max_layer is 0 for an empty input
    """
    ordered = sorted(markers, key=lambda m: (m.start, m.id))
    layers: list[list[Marker]] = []
    layer_of: dict[str, int] = {}

    for marker in ordered:
        for index, occupants in enumerate(layers):
            if not any(overlaps(marker, other) for other in occupants):
                occupants.append(marker)
                layer_of[marker.id] = index
                break
        else:
            layers.append([marker])
            layer_of[marker.id] = len(layers) - 1

    max_layer = max(layer_of.values(), default=0)
    return layer_of, max_layer


def tick_interval(duration: float) -> float:
    """Grid spacing in seconds for a timeline of the given length."""
    for upper, interval in LAYOUT_CONFIG.tick_buckets:
        if duration < upper:
            return interval
    return LAYOUT_CONFIG.fallback_tick_interval


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = int(max(0.0, seconds))
    return f"{total // 60}:{total % 60:02d}"


class TimeAxis:
    """
    Maps seconds onto a horizontal surface of ``width`` pixels with
    ``padding`` reserved on both sides for labels.
    """
    __slots__ = ('duration', 'width', 'padding')

    def __init__(
        self,
        duration: float,
        width: float,
        padding: float = LAYOUT_CONFIG.padding
    ) -> None:
        self.duration = float(duration)
        self.width = float(width)
        self.padding = float(padding)

    @property
    def usable_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def is_degenerate(self) -> bool:
        """True when there is no time span or no room to draw it."""
        return self.duration <= 0 or self.usable_width <= 0

    def time_to_x(self, t: float) -> float:
        if self.is_degenerate:
            return self.padding
        return self.padding + (t / self.duration) * self.usable_width

    def x_to_time(self, x: float) -> float:
        if self.is_degenerate:
            return 0.0
        x = min(max(x, self.padding), self.width - self.padding)
        return (x - self.padding) / self.usable_width * self.duration

    def ticks(self) -> list[TimeTick]:
        """Labeled grid lines from 0 to duration inclusive."""
        if self.duration <= 0:
            return []
        interval = tick_interval(self.duration)
        count = int(self.duration // interval)
        # Multiply rather than accumulate so long files don't drift.
        return [
            TimeTick(time=i * interval, x=self.time_to_x(i * interval), label=format_time(i * interval))
            for i in range(count + 1)
        ]

    def marker_rect(self, marker: Marker) -> MarkerRect:
        start, end = _span(marker)
        x = self.time_to_x(start)
        return MarkerRect(x=x, width=max(0.0, self.time_to_x(end) - x))


def compute_layout(
    markers: Sequence[Marker],
    duration: float,
    width: float,
    padding: float = LAYOUT_CONFIG.padding
) -> LayoutResult:
    """Compute layers, marker rectangles and axis ticks in one pass."""
    axis = TimeAxis(duration, width, padding)
    layer_of, max_layer = assign_layers(markers)
    return LayoutResult(
        layer_of=layer_of,
        max_layer=max_layer,
        marker_rects={m.id: axis.marker_rect(m) for m in markers},
        ticks=axis.ticks(),
        max_visible_layers=LAYOUT_CONFIG.max_visible_layers,
    )


def layer_at(
    result: LayoutResult,
    y: float,
    row_height: float = LAYOUT_CONFIG.row_height,
    top: float = 0.0
) -> Optional[int]:
    """Visible layer row under a vertical coordinate, or None."""
    if y < top or row_height <= 0:
        return None
    layer = int((y - top) // row_height)
    if layer >= result.visible_layers:
        return None
    return layer


def marker_at(
    result: LayoutResult,
    x: float,
    y: float,
    row_height: float = LAYOUT_CONFIG.row_height,
    top: float = 0.0
) -> Optional[str]:
    """Id of the visible marker under a point, or None."""
    layer = layer_at(result, y, row_height, top)
    if layer is None:
        return None
    for marker_id, rect in result.marker_rects.items():
        if result.layer_of.get(marker_id) != layer:
            continue
        if rect.x <= x <= rect.x + rect.width:
            return marker_id
    return None


class DragSelection:
    """
    Tracks a drag-to-select gesture in timeline seconds.

    A gesture shorter than ``min_duration`` is treated as a click and
    discarded on release.
    """

    def __init__(self, min_duration: float = LAYOUT_CONFIG.min_marker_duration) -> None:
        self.min_duration = min_duration
        self._anchor: Optional[float] = None
        self._current: Optional[float] = None

    @property
    def active(self) -> bool:
        return self._anchor is not None

    @property
    def pending(self) -> Optional[tuple[float, float]]:
        """Ordered (start, end) of the gesture in progress."""
        if self._anchor is None or self._current is None:
            return None
        return min(self._anchor, self._current), max(self._anchor, self._current)

    def begin(self, t: float) -> None:
        self._anchor = t
        self._current = t

    def update(self, t: float) -> None:
        if self._anchor is not None:
            self._current = t

    def cancel(self) -> None:
        self._anchor = None
        self._current = None

    def release(self) -> Optional[tuple[float, float]]:
        """
        Finish the gesture.

        Returns:
            (start, end) to offer for confirmation, or None if the drag was
            too short or no gesture was active
        """
        span = self.pending
        self.cancel()
        if span is None:
            return None
        start, end = span
        if end - start < self.min_duration:
            return None
        return span
