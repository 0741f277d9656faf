"""Status window shown by the launcher while an update is applied."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QFont
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)

from autoupdater.models.update_state import UpdateStage

STAGE_TITLES = {
    UpdateStage.STARTED: "UPDATING...",
    UpdateStage.DOWNLOADING: "DOWNLOADING...",
    UpdateStage.EXTRACTING: "EXTRACTING...",
    UpdateStage.CLEANING_UP: "CLEANING UP...",
    UpdateStage.DONE: "DONE",
}


class LauncherWindow(QWidget):
    """
    Non-interactive status window.

    Receives progress notifications as an UpdateObserver. The update runs on
    the GUI thread, so every notification processes pending Qt events to keep
    the window painted. The window ignores close requests until `finish()`.
    """

    def __init__(self, title: str = "AutoUpdater") -> None:
        super().__init__()
        self.setWindowTitle(title)
        self.setFixedSize(360, 170)
        self._can_close = False

        layout = QVBoxLayout()
        layout.setSpacing(6)
        layout.setContentsMargins(15, 15, 15, 15)

        self.title_label = QLabel(STAGE_TITLES[UpdateStage.STARTED])
        title_font = QFont()
        title_font.setPointSize(24)
        self.title_label.setFont(title_font)
        self.title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.title_label)

        self.message_label = QLabel("Please don't close this window")
        self.message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        self.hint_label = QLabel("It will close automatically")
        self.hint_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.hint_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        layout.addWidget(self.progress_bar)

        self.setLayout(layout)

    def update_progress(self, stage: UpdateStage, percent: int, message: str) -> None:
        """
        Show the current stage.

        Args:
            stage: Stage of the update sequence
            percent: Progress percentage (0-100). Use -1 for indeterminate progress.
            message: Status message to display
        """
        self.title_label.setText(STAGE_TITLES[stage])

        if percent < 0:
            if self.progress_bar.maximum() != 0:
                self.progress_bar.setRange(0, 0)  # Indeterminate mode
        else:
            if self.progress_bar.maximum() == 0:
                self.progress_bar.setRange(0, 100)
            self.progress_bar.setValue(min(percent, 100))

        if message:
            self.message_label.setText(message)

        QApplication.processEvents()

    def finish(self) -> None:
        """Allow the window to close and close it."""
        self._can_close = True
        self.close()

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._can_close:
            event.accept()
        else:
            event.ignore()
