from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                             QListWidget, QListWidgetItem, QInputDialog)
from PyQt6.QtCore import Qt, QSize, pyqtSignal
from PyQt6.QtGui import QColor, QIcon, QPixmap
import qtawesome as qta

from transcribe.core.layout import format_time
from transcribe.utils.logger import logger

class MarkerPanel(QWidget):
    """List of markers ordered by start time with rename/delete/jump."""
    seekRequested = pyqtSignal(float)
    messageRequested = pyqtSignal(str)

    def __init__(self, store, parent=None):
        super().__init__(parent)
        self.store = store
        self._syncing = False
        self.init_ui()

        store.markersChanged.connect(self.refresh)
        store.selectedMarkerChanged.connect(self.on_store_selection)

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        header = QLabel("Markers")
        header.setStyleSheet("font-weight: bold; color: #ddd;")
        layout.addWidget(header)

        self.list_widget = QListWidget()
        self.list_widget.itemSelectionChanged.connect(self.on_list_selection)
        self.list_widget.itemDoubleClicked.connect(self.jump_to_item)
        layout.addWidget(self.list_widget, stretch=1)

        btn_row = QHBoxLayout()
        self.btn_rename = QPushButton(qta.icon("fa5s.pen", color="white"), "Rename")
        self.btn_rename.clicked.connect(self.rename_selected)
        self.btn_delete = QPushButton(qta.icon("fa5s.trash-alt", color="#ff5555"), "Delete")
        self.btn_delete.clicked.connect(self.delete_selected)
        btn_row.addWidget(self.btn_rename)
        btn_row.addWidget(self.btn_delete)
        layout.addLayout(btn_row)

        self.update_buttons()

    def refresh(self):
        self._syncing = True
        self.list_widget.clear()
        for marker in sorted(self.store.markers, key=lambda m: (m.start, m.id)):
            text = f"{marker.label}  ({format_time(marker.start)} - {format_time(marker.end)})"
            item = QListWidgetItem(self._swatch(marker.color), text)
            item.setData(Qt.ItemDataRole.UserRole, marker.id)
            if marker.notes:
                item.setToolTip(marker.notes)
            self.list_widget.addItem(item)
            if marker.id == self.store.selected_marker_id:
                item.setSelected(True)
        self._syncing = False
        self.update_buttons()

    def _swatch(self, color):
        pixmap = QPixmap(QSize(10, 10))
        pixmap.fill(QColor(color or "#888888"))
        return QIcon(pixmap)

    def selected_id(self):
        items = self.list_widget.selectedItems()
        return items[0].data(Qt.ItemDataRole.UserRole) if items else None

    def update_buttons(self):
        has_selection = self.selected_id() is not None
        self.btn_rename.setEnabled(has_selection)
        self.btn_delete.setEnabled(has_selection)

    def on_list_selection(self):
        self.update_buttons()
        if not self._syncing:
            self.store.select_marker(self.selected_id())

    def on_store_selection(self, marker_id):
        self._syncing = True
        for i in range(self.list_widget.count()):
            item = self.list_widget.item(i)
            item.setSelected(item.data(Qt.ItemDataRole.UserRole) == marker_id)
        self._syncing = False
        self.update_buttons()

    def jump_to_item(self, item):
        marker = self.store.get_marker(item.data(Qt.ItemDataRole.UserRole))
        if marker is not None:
            self.seekRequested.emit(marker.start)

    def rename_selected(self):
        marker = self.store.get_marker(self.selected_id())
        if marker is None:
            return
        text, ok = QInputDialog.getText(self, "Rename Marker", "Label:", text=marker.label)
        if ok and text.strip():
            self.store.update_marker(marker.id, label=text.strip())
            logger.info("Marker renamed to %s", text.strip())

    def delete_selected(self):
        marker_id = self.selected_id()
        if marker_id is None:
            return
        removed = self.store.delete_marker(marker_id)
        if removed is not None:
            self.messageRequested.emit(f"Deleted marker '{removed.label}'")
