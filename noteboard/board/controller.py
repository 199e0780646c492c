"""The board: notes from the backend laid out on a canvas by date."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Final

from noteboard.board.drag import DragState, DragTracker
from noteboard.board.index import ShapeIndex
from noteboard.board.layout import (
    COLUMN_WIDTH,
    HEADER_Y,
    ROW_HEIGHT,
    TODAY_X,
    DateColumnMap,
    LayoutPass,
    date_headers,
)
from noteboard.board.overlap import MergeDetector
from noteboard.canvas.engine import Camera, ShapeRecord, new_shape_id
from noteboard.commands.merge import MergeNotesCommand
from noteboard.services.logs import get_logger
from noteboard.services.scheduler import DeferredTask, PeriodicTask
from noteboard.settings import BoardSettings
from noteboard.utils import to_iso

if TYPE_CHECKING:
    from collections.abc import Callable

    from noteboard.board.layout import Placement
    from noteboard.canvas.engine import CanvasEngine
    from noteboard.models.note import Note
    from noteboard.services.sync import NoteListing, SyncClient, SyncResult

logger = get_logger(__name__)

#: Height of a date header shape.
HEADER_HEIGHT: Final[float] = 50
#: Y the camera centers on when showing today.
TODAY_CAMERA_Y: Final[float] = 200


def note_props(note: Note) -> dict[str, Any]:
    """
    The copy of a note carried by its shape.

    Args:
        note: The note

    Returns:
        Shape properties

    """
    return {
        "title": note.title,
        "content": note.content,
        "time": note.time_label,
        "duration": note.duration_label,
        "date": to_iso(note.date),
        "tags": list(note.tags or []),
        "note_type": note.note_type,
        "manually_positioned": note.manually_positioned,
        "voice_duration": note.voice_duration,
        "busy": False,
        "highlighted": False,
    }


class BoardController:
    """
    Keeps the canvas in step with the backend of record.

    A full reconciliation deletes every shape and lays the board out again
    from the backend's notes.  Single additions and edits are applied in
    place so a selection or camera position is not lost.

    Args:
        canvas: The canvas to draw on
        sync: The backend client

    Keyword Args:
        settings: Board settings
        today: Clock used for the date columns

    """

    def __init__(
        self,
        canvas: CanvasEngine,
        sync: SyncClient,
        settings: BoardSettings | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.canvas = canvas
        self.sync = sync
        self.settings = settings if settings is not None else BoardSettings()
        self.today = today
        #: Note ID <-> shape ID.
        self.index = ShapeIndex()
        #: Note ID -> the note as last reported.
        self.notes: dict[str, Note] = {}
        #: Columns of the current layout.
        self.columns = DateColumnMap({}, today())
        #: The current layout pass.
        self.layout = LayoutPass(self.columns)
        #: Shape IDs of the date headers.
        self.header_ids: list[str] = []
        #: Whether the last load came from the local cache.
        self.stale = False
        #: Whether a merge is running.
        self.merging = False
        self.detector = MergeDetector(canvas)
        self.tracker = DragTracker(
            canvas, self.index, sync, self.detector, on_merge=self.merge
        )
        #: Safety-net reconciliation after an incremental add.
        self.deferred = DeferredTask(
            self.reconcile, self.settings.reconcile_delay_ms
        )
        #: Background reconciliation.
        self.periodic = PeriodicTask(self.reconcile, self.settings.periodic_ms)

    @property
    def busy(self) -> bool:
        """Whether a gesture or merge is in flight."""
        return self.merging or self.tracker.state is not DragState.IDLE

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def mount(self) -> bool:
        """
        Load the board, center the camera on today and start background
        syncing.

        Returns:
            True if the notes came from the backend, False if the cache (or
            nothing) had to do

        """
        ok = self.load(preserve_camera=False)
        self.periodic.start()
        logger.info("board.mounted", notes=len(self.notes), stale=self.stale)
        return ok

    def load(self, *, preserve_camera: bool = True) -> bool:
        """
        Fetch the notes and redraw the board.

        Keyword Args:
            preserve_camera: Keep the viewport where it is instead of
                centering on today

        Returns:
            True if the notes came from the backend

        """
        result: SyncResult[NoteListing] = self.sync.list_notes(self.settings.days)
        if result.value is None:
            # Backend unreachable and nothing cached: keep what is drawn
            self.stale = True
            if not preserve_camera:
                self.center_on_today()
            return False
        self.stale = result.stale
        self.render(result.value, preserve_camera=preserve_camera)
        return result.ok

    def reconcile(self, *, preserve_camera: bool = True) -> bool:
        """
        Rebuild the board from the backend.

        Postponed while a drag or merge is in flight.

        Keyword Args:
            preserve_camera: Keep the viewport where it is

        Returns:
            True if the board was rebuilt from the backend

        """
        if self.busy:
            logger.debug("board.reconcile_postponed")
            self.deferred.trigger()
            return False
        return self.load(preserve_camera=preserve_camera)

    def render(self, listing: NoteListing, *, preserve_camera: bool = True) -> None:
        """
        Replace every shape with a fresh layout of ``listing``.

        Args:
            listing: The notes and their columns

        Keyword Args:
            preserve_camera: Keep the viewport where it is

        """
        camera = self.canvas.camera()
        self.detector.clear()
        self.canvas.delete_shapes([shape.id for shape in self.canvas.shapes()])
        self.index.clear()
        self.header_ids = []
        self.notes = {note.id: note for note in listing.notes}
        self.columns = listing.columns
        self.layout = LayoutPass(self.columns)
        for placement in self.layout.place_all(listing.notes):
            self._draw(placement)
        self._draw_headers()
        if preserve_camera:
            self.canvas.set_camera(camera)
        else:
            self.center_on_today()
        logger.debug(
            "board.rendered", notes=len(self.notes), columns=len(self.columns)
        )

    def center_on_today(self) -> None:
        """Center the viewport on today's column."""
        self.canvas.set_camera(
            Camera(TODAY_X + COLUMN_WIDTH / 2, TODAY_CAMERA_Y, self.canvas.camera().z)
        )

    def _draw(self, placement: Placement) -> str:
        note = placement.note
        shape_id = new_shape_id()
        self.canvas.create_shape(
            ShapeRecord(
                id=shape_id,
                kind="note",
                x=placement.x,
                y=placement.y,
                w=COLUMN_WIDTH,
                h=ROW_HEIGHT,
                note_id=note.id,
                props=note_props(note),
            )
        )
        self.index.put(note.id, shape_id)
        return shape_id

    def _draw_headers(self) -> None:
        for header in date_headers(self.columns):
            shape_id = new_shape_id()
            self.canvas.create_shape(
                ShapeRecord(
                    id=shape_id,
                    kind="header",
                    x=header.x,
                    y=HEADER_Y,
                    w=COLUMN_WIDTH,
                    h=HEADER_HEIGHT,
                    props={
                        "label": header.label,
                        "day": header.day,
                        "is_today": header.is_today,
                    },
                )
            )
            self.header_ids.append(shape_id)

    # -------------------------------------------------------------------------
    # Changes
    # -------------------------------------------------------------------------

    def add_note(self, fields: dict[str, Any]) -> Note | None:
        """
        Create a note and show it without reloading the board.

        A note for a date that has no column yet needs the columns rebuilt,
        so it triggers a full reconciliation instead.  Either way a deferred
        reconciliation follows as a safety net.

        Args:
            fields: Creation fields in the API's naming

        Returns:
            The created note, or ``None`` if the backend refused it

        """
        result = self.sync.create_note(fields)
        if not result.ok or result.value is None:
            logger.warning("board.add_failed", error=str(result.error))
            return None
        note = result.value
        self.notes[note.id] = note
        if note.manually_positioned or note.day_key in self.columns:
            self._draw(self.layout.place(note))
            logger.info("board.note_added", note_id=note.id, day=note.day_key)
        else:
            logger.info("board.new_column", note_id=note.id, day=note.day_key)
            self.reconcile()
        self.deferred.trigger()
        return note

    def apply_external_edit(self, note: Note) -> None:
        """
        Show a note changed outside the canvas (editor, another client).

        The shape is updated in place.  A note that is not manually positioned
        and moved to another date glides to a slot in its new date's column,
        giving back its old slot; a date with no column yet triggers a full
        reconciliation.

        Args:
            note: The note as the backend now reports it

        """
        shape_id = self.index.get(note.id)
        old = self.notes.get(note.id)
        self.notes[note.id] = note
        if shape_id is None or self.canvas.get_shape(shape_id) is None:
            logger.info("board.edit_unknown_note", note_id=note.id)
            self.index.remove(note.id)
            self.reconcile()
            return
        moved = (
            old is not None
            and old.day_key != note.day_key
            and not note.manually_positioned
        )
        if moved and note.day_key not in self.columns:
            self.reconcile()
            return
        if moved:
            placement = self.layout.place(note)
            self.canvas.animate_shape(
                shape_id, placement.x, placement.y, props=note_props(note)
            )
            logger.info("board.note_moved", note_id=note.id, day=note.day_key)
            return
        self.canvas.update_shape(shape_id, props=note_props(note))

    def change_date(self, note_id: str, new_date: date) -> Note | None:
        """
        Move a note to another date.

        Returns:
            The updated note, or ``None`` if the backend refused the change

        """
        result = self.sync.patch_date(note_id, new_date)
        if not result.ok or result.value is None:
            return None
        self.apply_external_edit(result.value)
        return result.value

    def edit_fields(
        self,
        note_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> Note | None:
        """
        Change a note's title and/or content.

        Returns:
            The updated note, or ``None`` if the backend refused the change

        """
        result = self.sync.patch_fields(note_id, title=title, content=content)
        if not result.ok or result.value is None:
            return None
        self.apply_external_edit(result.value)
        return result.value

    def merge(self, dragged_shape_id: str, target_shape_id: str) -> bool:
        """
        Merge the note of ``dragged_shape_id`` into the note of
        ``target_shape_id``, then reload the board.

        Returns:
            True if the merge went through

        """
        command = MergeNotesCommand(
            self.sync, self.canvas, dragged_shape_id, target_shape_id
        )
        self.merging = True
        try:
            ok = command.execute()
        finally:
            self.merging = False
        if command.needs_full_reload:
            self.reconcile()
        return ok

    def close(self) -> None:
        """Stop background work and detach from the canvas."""
        self.periodic.stop()
        self.deferred.cancel()
        self.tracker.close()
        logger.debug("board.closed")
