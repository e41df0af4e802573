from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, pyqtSignal, QPointF
from PyQt6.QtGui import QPainter, QColor, QPen, QFont, QPolygonF

from transcribe.core.layout import TimeAxis

class TimeRulerWidget(QWidget):
    seekRequested = pyqtSignal(float)  # seconds

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedHeight(30)
        self.setMinimumWidth(100)

        self.duration = 0.0
        self.playhead_time = 0.0

        self.bg_color = QColor(30, 30, 30)
        self.text_color = QColor(200, 200, 200)
        self.line_color = QColor(100, 100, 100)
        self.playhead_color = QColor(255, 50, 50)

        self.dragging_playhead = False

    def axis(self):
        return TimeAxis(self.duration, self.width())

    def set_duration(self, duration):
        self.duration = duration
        self.update()

    def set_playhead(self, seconds):
        if self.playhead_time != seconds:
            self.playhead_time = seconds
            self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # Background
        painter.fillRect(self.rect(), self.bg_color)

        axis = self.axis()
        if axis.is_degenerate:
            return

        painter.setPen(QPen(self.line_color, 1))
        painter.setFont(QFont("Arial", 8))

        for tick in axis.ticks():
            x = int(tick.x)
            painter.drawLine(x, self.height() - 10, x, self.height())
            painter.setPen(self.text_color)
            painter.drawText(x + 2, self.height() - 12, tick.label)
            painter.setPen(self.line_color)

        # Playhead Handle (Triangle at the bottom, pointing down)
        ph_x = axis.time_to_x(self.playhead_time)
        painter.setPen(QPen(self.playhead_color, 1))
        painter.drawLine(int(ph_x), 0, int(ph_x), self.height())

        handle_w = 12
        handle_h = 10
        triangle = QPolygonF([
            QPointF(ph_x - handle_w/2, self.height() - handle_h),
            QPointF(ph_x + handle_w/2, self.height() - handle_h),
            QPointF(ph_x, self.height())
        ])
        painter.setBrush(self.playhead_color)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawPolygon(triangle)

    def mousePressEvent(self, event):
        axis = self.axis()
        if axis.is_degenerate:
            return
        x = event.position().x()

        # Grab the playhead if close, otherwise jump
        if abs(x - axis.time_to_x(self.playhead_time)) < 15:
            self.dragging_playhead = True
        else:
            self.seekRequested.emit(axis.x_to_time(x))

    def mouseMoveEvent(self, event):
        if self.dragging_playhead:
            # x_to_time clamps to the padded surface
            self.seekRequested.emit(self.axis().x_to_time(event.position().x()))

    def mouseReleaseEvent(self, event):
        self.dragging_playhead = False
