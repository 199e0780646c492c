import sys

from PySide6.QtCore import QCoreApplication, QEvent, QObject, QTimer
from PySide6.QtWidgets import QApplication

from noteboard import __version__
from noteboard.board.controller import BoardController
from noteboard.canvas.scene import SceneCanvas
from noteboard.db import create_session
from noteboard.services.cache import NoteCache
from noteboard.services.logs import configure_logging, get_logger
from noteboard.services.sync import SyncClient
from noteboard.settings import BoardSettings

from .main_window import MainWindow

logger = get_logger(__name__)


class GestureEndFilter(QObject):
    """
    Application-wide event filter that reports every mouse release to the
    board's drag tracker, wherever the release lands.

    Args:
        controller: The board controller

    """

    def __init__(self, controller: BoardController) -> None:
        super().__init__()
        self.controller = controller

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        if event.type() == QEvent.Type.MouseButtonRelease:
            self.controller.tracker.end_gesture("application")
        return False


def create_application() -> QApplication:
    """
    Create the application.
    """
    QCoreApplication.setOrganizationName("Note Board")
    QCoreApplication.setApplicationName("Note Board")

    app = QApplication(sys.argv)
    app.setApplicationVersion(__version__)
    configure_logging()

    settings = BoardSettings()
    cache = NoteCache(create_session())
    sync = SyncClient(settings.api_url, settings.user_id, cache=cache)
    canvas = SceneCanvas()
    controller = BoardController(canvas, sync, settings)

    window = MainWindow(controller)
    canvas.attach_view(window.view)
    gesture_filter = GestureEndFilter(controller)
    app.installEventFilter(gesture_filter)
    app.aboutToQuit.connect(sync.close)
    # Keep the window and filter alive as long as the application
    app.main_window = window  # type: ignore[attr-defined]
    app.gesture_filter = gesture_filter  # type: ignore[attr-defined]
    window.show()
    logger.info("app.started", version=__version__, api_url=settings.api_url)

    QTimer.singleShot(0, controller.mount)
    return app
