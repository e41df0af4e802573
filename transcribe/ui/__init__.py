"""
Transcribe Pro UI Module

Qt-based user interface components:
- MainWindow: Main application window
- MarkerTimelineWidget: Layered marker lanes and drag-to-create
- MarkerPanel: Marker list with rename/delete
- TimeRulerWidget: Time ruler and playhead
"""
from .main_window import MainWindow
from .marker_timeline import MarkerTimelineWidget
from .marker_panel import MarkerPanel
from .time_ruler import TimeRulerWidget

__all__ = [
    'MainWindow',
    'MarkerTimelineWidget',
    'MarkerPanel',
    'TimeRulerWidget',
]
