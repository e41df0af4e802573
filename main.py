import sys
from PyQt6.QtWidgets import QApplication
import qdarktheme

from transcribe.ui.main_window import MainWindow

def main():
    app = QApplication(sys.argv)
    app.setApplicationName("Transcribe Pro")

    # Apply modern dark theme
    app.setStyleSheet(qdarktheme.load_stylesheet(theme="dark"))

    window = MainWindow()
    window.show()

    # Optional audio file on the command line
    if len(sys.argv) > 1:
        window.load_audio(sys.argv[1])

    sys.exit(app.exec())

if __name__ == "__main__":
    main()
