from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen, QFont

from transcribe.core.config import LAYOUT_CONFIG
from transcribe.core.layout import DragSelection, TimeAxis, compute_layout, marker_at
from transcribe.core.types import LayoutResult

class MarkerTimelineWidget(QWidget):
    """
    Draws markers on non-overlapping rows and turns drags into new
    marker requests. Layout is recomputed from scratch on every change.
    """
    markerRequested = pyqtSignal(float, float)  # start, end in seconds
    seekRequested = pyqtSignal(float)

    def __init__(self, store, parent=None):
        super().__init__(parent)
        self.store = store
        self.layout_result = LayoutResult()
        self.playhead_time = 0.0
        self.drag = DragSelection()
        self.row_height = LAYOUT_CONFIG.row_height
        self.top_margin = 4

        self.setMinimumHeight(self.top_margin * 2 + self.row_height * LAYOUT_CONFIG.max_visible_layers)
        self.setMouseTracking(False)

        self.bg_color = QColor(24, 28, 26)
        self.row_color = QColor(255, 255, 255, 12)
        self.playhead_color = QColor(255, 50, 50)
        self.pending_color = QColor(255, 255, 255, 50)
        self.grid_color = QColor(255, 255, 255, 25)

        store.markersChanged.connect(self.relayout)
        store.durationChanged.connect(self.relayout)
        store.selectedMarkerChanged.connect(self.update)
        store.currentTimeChanged.connect(self.set_playhead)

    def axis(self):
        return TimeAxis(self.store.duration, self.width())

    def relayout(self, *args):
        self.layout_result = compute_layout(self.store.markers, self.store.duration, self.width())
        self.update()

    def set_playhead(self, seconds):
        if self.playhead_time != seconds:
            self.playhead_time = seconds
            self.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.relayout()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), self.bg_color)

        if self.store.duration <= 0:
            painter.setPen(QColor(100, 100, 100))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No Audio Loaded")
            return

        result = self.layout_result
        height = self.height()

        # Alternating row bands
        for row in range(result.visible_layers):
            if row % 2 == 0:
                y = self.top_margin + row * self.row_height
                painter.fillRect(QRectF(0, y, self.width(), self.row_height), self.row_color)

        painter.setPen(QPen(self.grid_color, 1))
        for tick in result.ticks:
            painter.drawLine(int(tick.x), 0, int(tick.x), height)

        self._draw_markers(painter)
        self._draw_pending(painter, height)
        self._draw_playhead(painter, height)

    def _draw_markers(self, painter):
        result = self.layout_result
        selected = self.store.selected_marker_id
        painter.setFont(QFont("Arial", 8))

        for marker in self.store.markers:
            rect = result.marker_rects.get(marker.id)
            if rect is None or result.is_clipped(marker.id):
                continue
            layer = result.layer_of[marker.id]
            box = QRectF(rect.x, self.top_margin + layer * self.row_height + 1,
                         max(rect.width, 2.0), self.row_height - 2)

            color = QColor(marker.color or LAYOUT_CONFIG.marker_colors[0])
            fill = QColor(color)
            fill.setAlpha(200 if marker.id == selected else 120)
            painter.setBrush(fill)
            painter.setPen(QPen(color.lighter(140) if marker.id == selected else color, 1))
            painter.drawRoundedRect(box, 3, 3)

            painter.setPen(QColor(240, 240, 240))
            painter.drawText(box.adjusted(4, 0, -2, 0),
                             Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft,
                             marker.label)

    def _draw_pending(self, painter, height):
        span = self.drag.pending
        if span is None:
            return
        axis = self.axis()
        x0, x1 = axis.time_to_x(span[0]), axis.time_to_x(span[1])
        painter.fillRect(QRectF(x0, 0, x1 - x0, height), self.pending_color)

    def _draw_playhead(self, painter, height):
        ph_x = self.axis().time_to_x(self.playhead_time)
        painter.setPen(QPen(self.playhead_color, 1))
        painter.drawLine(int(ph_x), 0, int(ph_x), height)

    def mousePressEvent(self, event):
        if self.store.duration <= 0 or event.button() != Qt.MouseButton.LeftButton:
            return
        self.drag.begin(self.axis().x_to_time(event.position().x()))
        self.update()

    def mouseMoveEvent(self, event):
        if self.drag.active:
            self.drag.update(self.axis().x_to_time(event.position().x()))
            self.update()

    def mouseReleaseEvent(self, event):
        if not self.drag.active:
            return
        span = self.drag.release()
        self.update()

        if span is not None:
            self.markerRequested.emit(*span)
            return

        # Too short for a marker: treat as a click
        pos = event.position()
        hit = marker_at(self.layout_result, pos.x(), pos.y(), self.row_height, self.top_margin)
        if hit is not None:
            self.store.select_marker(hit)
        else:
            self.store.select_marker(None)
            self.seekRequested.emit(self.axis().x_to_time(pos.x()))
