"""
Drag lifecycle of note shapes.

A drag starts with the first user move of a note shape and ends with the
pointer release.  Positions are buffered while the pointer moves and written
to the backend once, at release.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from noteboard.canvas.engine import Origin
from noteboard.services.logs import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from noteboard.board.index import ShapeIndex
    from noteboard.board.overlap import MergeCandidate, MergeDetector
    from noteboard.canvas.engine import CanvasEngine, PointerEvent, StoreChange
    from noteboard.services.sync import SyncClient

logger = get_logger(__name__)

#: Stacking order of shapes while they are dragged.
DRAG_Z: Final[float] = 1000


class DragState(StrEnum):
    """Where the tracker is in a gesture."""

    IDLE = "idle"
    DRAGGING = "dragging"
    RELEASED = "released"


@dataclass
class DragSession:
    """One drag gesture."""

    #: Shape ID -> latest (x, y).
    positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    #: The shape moved last.
    target: str | None = None
    #: Shape ID -> stacking order before the drag.
    z_before: dict[str, float] = field(default_factory=dict)


class DragTracker:
    """
    Follows drags on the canvas and commits them at release.

    The tracker owns the end of a gesture: :meth:`end_gesture` may be called
    from several sources (the application's mouse release, the canvas's own
    pointer-up) and acts only on the first call per drag.

    Args:
        canvas: The canvas to watch
        index: Shape <-> note index
        sync: Client used to store positions
        detector: Merge detector for single-shape drags

    Keyword Args:
        on_merge: Called with ``(dragged_shape_id, target_shape_id)`` when a
            released drag proposes a merge

    """

    def __init__(
        self,
        canvas: CanvasEngine,
        index: ShapeIndex,
        sync: SyncClient,
        detector: MergeDetector,
        on_merge: Callable[[str, str], object] | None = None,
    ) -> None:
        self.canvas = canvas
        self.index = index
        self.sync = sync
        self.detector = detector
        self.on_merge = on_merge
        #: Current state.
        self.state = DragState.IDLE
        #: The gesture in progress.
        self.session: DragSession | None = None
        self._unsubscribe = [
            canvas.subscribe_store(self._on_store),
            canvas.subscribe_pointer(self._on_pointer),
        ]

    def close(self) -> None:
        """Stop listening to the canvas."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def selected_count(self) -> int:
        """How many shapes the current gesture moves."""
        selected = len(self.canvas.selected_shape_ids())
        if selected:
            return selected
        return len(self.session.positions) if self.session else 0

    def _on_store(self, change: StoreChange) -> None:
        if change.origin is not Origin.USER or self.state is DragState.RELEASED:
            return
        moved = False
        for before, after in change.updated:
            if not after.is_note or (before.x, before.y) == (after.x, after.y):
                continue
            if self.session is None:
                self.session = DragSession()
                self.state = DragState.DRAGGING
                logger.debug("drag.started", shape_id=after.id)
            session = self.session
            session.positions[after.id] = (after.x, after.y)
            session.target = after.id
            if after.id not in session.z_before:
                session.z_before[after.id] = after.z
                self.canvas.update_shape(after.id, z=DRAG_Z)
            moved = True
        if moved and self.session and self.session.target:
            dragged = self.canvas.get_shape(self.session.target)
            if dragged is not None:
                self.detector.track(dragged, self.selected_count())

    def _on_pointer(self, event: PointerEvent) -> None:
        if event.kind == "up":
            self.end_gesture("canvas")

    def end_gesture(self, source: str) -> MergeCandidate | None:
        """
        Finish the current drag.

        Stores every dragged position (one request per shape), restores the
        stacking order, then looks for a merge target if a single shape was
        dragged.  Calls outside a drag, or after the drag has already been
        finished by another source, do nothing.

        Args:
            source: What reported the release, for the logs

        Returns:
            The merge target, if any

        """
        if self.state is not DragState.DRAGGING or self.session is None:
            return None
        self.state = DragState.RELEASED
        session = self.session
        selected = self.selected_count()
        logger.info(
            "drag.released", source=source, shapes=len(session.positions)
        )
        candidate = None
        try:
            for shape_id, (x, y) in session.positions.items():
                self._save_position(shape_id, x, y)
            for shape_id, z in session.z_before.items():
                self.canvas.update_shape(shape_id, z=z)
            if session.target is not None and selected == 1:
                dragged = self.canvas.get_shape(session.target)
                if dragged is not None:
                    candidate = self.detector.evaluate(
                        dragged, self.canvas.shapes(), selected
                    )
            self.detector.clear()
        finally:
            self.session = None
            self.state = DragState.IDLE
        if candidate is not None and session.target is not None:
            logger.info(
                "drag.merge_proposed",
                dragged=session.target,
                target=candidate.shape_id,
                ratio=round(candidate.ratio, 3),
            )
            if self.on_merge is not None:
                self.on_merge(session.target, candidate.shape_id)
        return candidate

    def _save_position(self, shape_id: str, x: float, y: float) -> None:
        """
        Store one dropped position.  On failure the shape stays where it was
        dropped and the next reload brings back the backend's position.
        """
        shape = self.canvas.get_shape(shape_id)
        note_id = self.index.note_for(shape_id) or (shape.note_id if shape else None)
        if note_id is None:
            return
        result = self.sync.patch_position(note_id, x, y)
        if not result.ok or result.value is None:
            logger.warning(
                "drag.position_not_saved",
                note_id=note_id,
                x=x,
                y=y,
                error=str(result.error),
            )
            return
        self.canvas.update_shape(
            shape_id,
            props={"manually_positioned": result.value.manually_positioned},
        )
