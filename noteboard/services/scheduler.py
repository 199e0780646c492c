"""Deferred and periodic board tasks driven by Qt timers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer

from noteboard.services.logs import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)


def _task_name(callback: Callable[[], object]) -> str:
    return getattr(callback, "__qualname__", repr(callback))


class DeferredTask(QObject):
    """
    Run a callback once, some time after the last :meth:`trigger`.

    Triggering again before the delay has elapsed restarts the wait, so a
    burst of triggers results in a single run.

    Args:
        callback: Function to call
        delay_ms: Delay in milliseconds

    """

    def __init__(self, callback: Callable[[], object], delay_ms: int = 5000) -> None:
        super().__init__()
        #: The function to call.
        self.callback = callback
        #: The delay in milliseconds.
        self.delay_ms = delay_ms
        #: The timer for the delay.
        self._timer: QTimer | None = None
        #: Whether a run is pending.
        self._pending = False

    @property
    def pending(self) -> bool:
        """Whether a run is scheduled."""
        return self._pending

    def trigger(self) -> None:
        """
        Schedule a run (restarting the delay if one is already scheduled).
        """
        self._pending = True
        if self._timer:
            self._timer.stop()
            self._timer.deleteLater()
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._run)
        self._timer.start(self.delay_ms)

    def _run(self) -> None:
        """
        Call the callback if a run is pending.

        Errors are logged rather than raised: this runs from the Qt event
        loop, where there is no caller to report them to.
        """
        if self._pending:
            self._pending = False
            try:
                self.callback()
            except Exception:  # noqa: BLE001
                logger.exception("task.failed", task=_task_name(self.callback))

    def cancel(self) -> None:
        """
        Cancel the scheduled run, if any.
        """
        if self._timer:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None
        self._pending = False


class PeriodicTask(QObject):
    """
    Run a callback every ``interval_ms`` milliseconds.

    Args:
        callback: Function to call
        interval_ms: Interval in milliseconds

    """

    def __init__(self, callback: Callable[[], object], interval_ms: int) -> None:
        super().__init__()
        #: The function to call.
        self.callback = callback
        #: The interval in milliseconds.
        self.interval_ms = interval_ms
        #: The timer.
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._run)

    @property
    def active(self) -> bool:
        """Whether the task is running."""
        return self._timer.isActive()

    def start(self) -> None:
        """Start (or restart) the task."""
        self._timer.start(self.interval_ms)

    def stop(self) -> None:
        """Stop the task."""
        self._timer.stop()

    def _run(self) -> None:
        try:
            self.callback()
        except Exception:  # noqa: BLE001
            logger.exception("task.failed", task=_task_name(self.callback))
