from PyQt6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                             QPushButton, QLabel, QFileDialog, QComboBox, QSlider,
                             QInputDialog, QMessageBox)
from PyQt6.QtCore import Qt, QTimer, QSize
from PyQt6.QtGui import QAction, QKeySequence
from pathlib import Path
import bisect
import qtawesome as qta

from transcribe.core.audio_engine import SoundDeviceEngine
from transcribe.core.audio_source import file_dialog_filter, read_audio_bytes, validate_audio_file
from transcribe.core.config import PlaybackState
from transcribe.core.errors import AudioLoadError, InvalidRange, ProjectFormatError
from transcribe.core.layout import format_time
from transcribe.core.playback_clock import PlaybackClock
from transcribe.core.project import load_project, save_project
from transcribe.core.store import AppStore
from transcribe.ui.marker_panel import MarkerPanel
from transcribe.ui.marker_timeline import MarkerTimelineWidget
from transcribe.ui.time_ruler import TimeRulerWidget
from transcribe.utils.logger import logger

PLAYBACK_RATES = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


def rate_slot(rates, rate):
    """Index of ``rate`` in the sorted ``rates`` and whether it must be inserted there."""
    if rate in rates:
        return rates.index(rate), False
    return bisect.bisect_left(rates, rate), True

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        self.setWindowTitle("Transcribe Pro")
        self.resize(1100, 650)

        # Core Components
        self.store = AppStore(self)
        self.audio_engine = SoundDeviceEngine(self)
        self.clock = PlaybackClock(self.audio_engine, self.store, parent=self)
        self.audio_path = ""
        self.project = None

        self.clock.stateChanged.connect(self.on_state_changed)
        self.clock.errorOccurred.connect(self.on_clock_error)
        self.clock.playbackFinished.connect(lambda: self.statusBar().showMessage("End of track", 2000))
        self.store.currentTimeChanged.connect(self.update_time_display)
        self.store.durationChanged.connect(self.on_duration_changed)
        self.store.globalControlsChanged.connect(self.on_controls_changed)

        # UI Setup
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self.create_menus()
        self.create_timeline_view()
        self.create_transport_controls()

        # Playhead refresh between clock ticks (GUI update 30fps)
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.periodic_update)
        self.timer.start(30)

    def create_menus(self):
        menubar = self.menuBar()

        # File Menu
        file_menu = menubar.addMenu("&File")

        open_action = QAction(qta.icon("fa5s.folder-open", color="white"), "&Open Audio...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.open_audio_dialog)
        file_menu.addAction(open_action)

        file_menu.addSeparator()

        open_project_action = QAction(qta.icon("fa5s.file-import", color="white"), "Open &Project...", self)
        open_project_action.triggered.connect(self.open_project_dialog)
        file_menu.addAction(open_project_action)

        save_project_action = QAction(qta.icon("fa5s.save", color="white"), "&Save Project As...", self)
        save_project_action.setShortcut(QKeySequence.StandardKey.Save)
        save_project_action.triggered.connect(self.save_project_dialog)
        file_menu.addAction(save_project_action)

        new_project_action = QAction(qta.icon("fa5s.file", color="white"), "&New Project", self)
        new_project_action.setShortcut(QKeySequence.StandardKey.New)
        new_project_action.triggered.connect(self.new_project)
        file_menu.addAction(new_project_action)

        file_menu.addSeparator()

        exit_action = QAction("&Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Playback Menu
        playback_menu = menubar.addMenu("&Playback")

        play_action = QAction("Play/Pause", self)
        play_action.setShortcut(Qt.Key.Key_Space)
        play_action.triggered.connect(self.toggle_play_pause)
        playback_menu.addAction(play_action)

        stop_action = QAction("Stop", self)
        stop_action.setShortcut("Ctrl+.")
        stop_action.triggered.connect(self.clock.stop)
        playback_menu.addAction(stop_action)

    def create_timeline_view(self):
        self.time_ruler = TimeRulerWidget()
        self.time_ruler.seekRequested.connect(self.clock.seek)
        self.main_layout.addWidget(self.time_ruler)

        self.marker_timeline = MarkerTimelineWidget(self.store)
        self.marker_timeline.seekRequested.connect(self.clock.seek)
        self.marker_timeline.markerRequested.connect(self.confirm_new_marker)
        self.main_layout.addWidget(self.marker_timeline, stretch=1)

        self.marker_panel = MarkerPanel(self.store)
        self.marker_panel.seekRequested.connect(self.clock.seek)
        self.marker_panel.messageRequested.connect(lambda msg: self.statusBar().showMessage(msg, 3000))
        self.main_layout.addWidget(self.marker_panel, stretch=1)

    def create_transport_controls(self):
        transport_widget = QWidget()
        transport_widget.setStyleSheet("background-color: #222; border-top: 1px solid #444;")
        transport_layout = QHBoxLayout(transport_widget)
        transport_layout.setContentsMargins(20, 10, 20, 10)

        self.time_label = QLabel("0:00 / 0:00")
        self.time_label.setStyleSheet("font-family: 'Consolas'; font-size: 20px; font-weight: bold; color: #00ffff; min-width: 180px;")

        # Style helper for transport buttons
        btn_style = """
            QPushButton {
                background-color: transparent;
                border-radius: 20px;
                padding: 5px;
            }
            QPushButton:hover { background-color: #444; }
            QPushButton:pressed { background-color: #555; }
        """

        self.btn_stop = QPushButton()
        self.btn_stop.setIcon(qta.icon("fa5s.stop", color="#ff5555"))
        self.btn_stop.setIconSize(QSize(24, 24))
        self.btn_stop.setStyleSheet(btn_style)
        self.btn_stop.clicked.connect(self.clock.stop)

        self.btn_play_pause = QPushButton()
        self.btn_play_pause.setIcon(qta.icon("fa5s.play", color="#55ff55"))
        self.btn_play_pause.setIconSize(QSize(32, 32))
        self.btn_play_pause.setStyleSheet(btn_style)
        self.btn_play_pause.clicked.connect(self.toggle_play_pause)

        self.rate_combo = QComboBox()
        for rate in PLAYBACK_RATES:
            self.rate_combo.addItem(f"{rate:g}x", rate)
        self.rate_combo.setCurrentIndex(PLAYBACK_RATES.index(1.0))
        self.rate_combo.currentIndexChanged.connect(
            lambda i: self.store.set_playback_rate(self.rate_combo.itemData(i)))

        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(100)
        self.volume_slider.setFixedWidth(120)
        self.volume_slider.valueChanged.connect(lambda v: self.store.set_volume(v / 100.0))

        transport_layout.addWidget(self.time_label)
        transport_layout.addStretch()
        transport_layout.addWidget(self.btn_stop)
        transport_layout.addWidget(self.btn_play_pause)
        transport_layout.addStretch()
        transport_layout.addWidget(QLabel("Speed"))
        transport_layout.addWidget(self.rate_combo)
        transport_layout.addWidget(qta.IconWidget("fa5s.volume-up", color="white"))
        transport_layout.addWidget(self.volume_slider)

        self.main_layout.addWidget(transport_widget)
        self.statusBar().showMessage("Ready")

    def toggle_play_pause(self):
        self.clock.toggle_play_pause()

    def periodic_update(self):
        """Moves the playhead smoothly while playing."""
        if self.clock.is_playing:
            self.update_time_display(self.clock.position)

    def update_time_display(self, seconds):
        self.time_ruler.set_playhead(seconds)
        self.marker_timeline.set_playhead(seconds)
        self.time_label.setText(f"{format_time(seconds)} / {format_time(self.store.duration)}")

    def on_duration_changed(self, duration):
        self.time_ruler.set_duration(duration)
        self.update_time_display(self.store.current_time)

    def on_controls_changed(self, controls):
        self.clock.set_playback_rate(controls.playback_rate)
        self.audio_engine.set_volume(controls.volume)

        # Keep widgets in sync after a project load
        rate = controls.playback_rate
        rates = [self.rate_combo.itemData(i) for i in range(self.rate_combo.count())]
        index, missing = rate_slot(rates, rate)
        self.rate_combo.blockSignals(True)
        if missing:
            self.rate_combo.insertItem(index, f"{rate:g}x", rate)
        self.rate_combo.setCurrentIndex(index)
        self.rate_combo.blockSignals(False)
        self.volume_slider.blockSignals(True)
        self.volume_slider.setValue(int(round(controls.volume * 100)))
        self.volume_slider.blockSignals(False)

    def on_state_changed(self, state):
        if state == PlaybackState.PLAYING:
            self.btn_play_pause.setIcon(qta.icon("fa5s.pause", color="#ffff55"))
        else:
            self.btn_play_pause.setIcon(qta.icon("fa5s.play", color="#55ff55"))

    def on_clock_error(self, error):
        self.statusBar().showMessage(str(error), 4000)

    def confirm_new_marker(self, start, end):
        default = f"Marker {len(self.store.markers) + 1}"
        label, ok = QInputDialog.getText(
            self, "New Marker", f"Label for {format_time(start)} - {format_time(end)}:", text=default)
        if not ok:
            return
        try:
            marker = self.store.create_marker(start, end, label.strip() or default)
        except InvalidRange as e:
            logger.warning("Marker rejected: %s", e)
            self.statusBar().showMessage(str(e), 4000)
            return
        self.store.select_marker(marker.id)

    def open_audio_dialog(self):
        logger.info("Opening audio file dialog")

        # Pause if playing
        self.clock.pause()

        file_path, _ = QFileDialog.getOpenFileName(self, "Open Audio File", "", file_dialog_filter())
        if file_path:
            self.load_audio(file_path)

    def load_audio(self, file_path):
        result = validate_audio_file(file_path)
        if not result:
            QMessageBox.warning(self, "Unsupported File", result.error)
            return False
        try:
            duration = self.clock.load(read_audio_bytes(file_path))
        except (AudioLoadError, OSError) as e:
            logger.error(f"Failed to load {file_path}: {e}")
            QMessageBox.critical(self, "Load Error", f"Could not load audio file:\n{e}")
            return False

        self.audio_path = file_path
        self.setWindowTitle(f"Transcribe Pro - {Path(file_path).name}")
        self.statusBar().showMessage(f"Loaded {Path(file_path).name} ({format_time(duration)})", 5000)
        return True

    def open_project_dialog(self):
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Project", "", "Transcribe Project (*.json)")
        if not file_path:
            return
        try:
            project = load_project(file_path)
            markers = project.to_markers()
            # Markers are checked as they will be once the audio is unloaded.
            self.store.validate_markers(markers, duration=0.0)
        except (ProjectFormatError, ValueError, OSError) as e:
            logger.error(f"Failed to open project {file_path}: {e}")
            QMessageBox.critical(self, "Project Error", f"Could not open project:\n{e}")
            return

        self.clock.unload()
        self.store.load_project(markers, project.to_controls())

        self.project = project
        self.audio_path = ""
        if project.audio_file_path and Path(project.audio_file_path).is_file():
            self.load_audio(project.audio_file_path)
        else:
            self.statusBar().showMessage("Project loaded; open its audio file to continue", 5000)

    def save_project_dialog(self):
        file_path, _ = QFileDialog.getSaveFileName(self, "Save Project", "project.json", "Transcribe Project (*.json)")
        if not file_path:
            return
        self.project = self.store.to_project(self.audio_path, self.project)
        try:
            save_project(file_path, self.project)
        except OSError as e:
            QMessageBox.critical(self, "Save Error", f"Could not save project: {e}")
            return
        self.statusBar().showMessage(f"Project saved to: {file_path}", 5000)

    def new_project(self):
        if self.store.markers:
            reply = QMessageBox.question(self, "New Project",
                                       "Discard all markers and unload the audio?",
                                       QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
            if reply == QMessageBox.StandardButton.No:
                return
        self.clock.unload()
        self.store.reset_project()
        self.audio_path = ""
        self.project = None
        self.setWindowTitle("Transcribe Pro")

    def closeEvent(self, event):
        self.timer.stop()
        self.clock.cleanup()
        self.audio_engine.close()
        super().closeEvent(event)
