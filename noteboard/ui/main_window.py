"""Main application window."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from PySide6.QtGui import QAction, QKeySequence, QPainter
from PySide6.QtWidgets import QGraphicsView, QInputDialog, QMainWindow

if TYPE_CHECKING:
    from noteboard.board.controller import BoardController


class MainMenu:
    """Main application menu."""

    def __init__(self, main_window: MainWindow) -> None:
        #: Main window instance
        self.main_window = main_window
        #: Menu bar
        self.menu = self.main_window.menuBar()

    def add_board_menu(self) -> None:
        """
        Create the board menu.

        This means adding a "Board" menu to :attr:`self.menu`, the main menu
        bar, with the following actions:

        - Add Note...
        - Sync
        - Go to Today

        """
        board_menu = self.menu.addMenu("&Board")

        add_action = QAction("&Add Note...", board_menu)
        add_action.setShortcut(QKeySequence("Ctrl+N"))
        add_action.triggered.connect(self.main_window.add_note)
        board_menu.addAction(add_action)

        sync_action = QAction("&Sync", board_menu)
        sync_action.setShortcut(QKeySequence("Ctrl+R"))
        sync_action.triggered.connect(self.main_window.sync)
        board_menu.addAction(sync_action)

        board_menu.addSeparator()

        today_action = QAction("Go to &Today", board_menu)
        today_action.setShortcut(QKeySequence("Ctrl+T"))
        today_action.triggered.connect(self.main_window.controller.center_on_today)
        board_menu.addAction(today_action)

    def build(self) -> None:
        """Build the main menu."""
        self.add_board_menu()


class MainWindow(QMainWindow):
    """
    Main application window: the board's canvas in a ``QGraphicsView``.

    Args:
        controller: The board controller

    """

    def __init__(self, controller: BoardController) -> None:
        super().__init__()
        #: Board controller
        self.controller = controller
        #: View showing the board's scene
        self.view = QGraphicsView()
        self.build()

    def build(self) -> None:
        """Build the main window."""
        self.setWindowTitle("Note Board")
        self.setGeometry(100, 100, 1200, 800)
        self.view.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.view.setDragMode(QGraphicsView.DragMode.RubberBandDrag)
        self.setCentralWidget(self.view)
        MainMenu(self).build()
        self.show_message("Ready")

    def show_message(self, message: str, duration: int = 2000) -> None:
        """
        Show a message in the status bar.

        Args:
            message: Message to show

        Keyword Args:
            duration: Duration of the message in milliseconds (default: 2000)

        """
        self.statusBar().showMessage(message, duration)

    def add_note(self) -> None:
        """Ask for a title and add a text note dated now."""
        title, ok = QInputDialog.getText(self, "Add Note", "Title:")
        if not ok or not title.strip():
            return
        note = self.controller.add_note(
            {
                "title": title.strip(),
                "content": "",
                "type": "text",
                "date": datetime.now(),
            }
        )
        if note is None:
            self.show_message("Could not add the note")
        else:
            self.show_message(f"Added {note.title!r}")

    def sync(self) -> None:
        """Reload the board from the backend."""
        if self.controller.reconcile():
            self.show_message("Synced")
        elif self.controller.stale:
            self.show_message("Backend unreachable: showing cached notes", 5000)

    def closeEvent(self, event) -> None:  # noqa: N802
        self.controller.close()
        super().closeEvent(event)
