"""Merging two notes into one."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from noteboard.exc import MergeAborted
from noteboard.models.note import Note
from noteboard.services.logs import get_logger
from noteboard.utils import from_iso

from .abstract import Command
from .note import CreateNoteCommand, DeleteNoteCommand

if TYPE_CHECKING:
    from noteboard.canvas.engine import CanvasEngine, ShapeRecord
    from noteboard.services.sync import SyncClient

logger = get_logger(__name__)

#: Goes between the target's and the dragged note's content.
MERGE_SEPARATOR: Final[str] = "\n\n//////\n\n"
#: Type of every merged note.
MERGED_TYPE: Final[str] = "text"


def compose_merge(target: Note, dragged: Note) -> dict[str, Any]:
    """
    Creation fields of the note that replaces ``target`` and ``dragged``.

    The merged note lives where the target lives: same date, same position,
    same manual-positioning flag.

    Args:
        target: The note dropped onto
        dragged: The note that was dropped

    Returns:
        Creation fields in the API's naming

    """
    return {
        "title": f"{target.title} / {dragged.title}",
        "content": f"{target.content}{MERGE_SEPARATOR}{dragged.content}",
        "type": MERGED_TYPE,
        "date": target.date,
        "x": target.x,
        "y": target.y,
        "manuallyPositioned": target.manually_positioned,
        "tags": list(dict.fromkeys([*(target.tags or []), *(dragged.tags or [])])),
    }


def degraded_source(shape: ShapeRecord) -> Note:
    """
    Rebuild a note from the copy its shape carries.

    Used when the backend cannot return the full record.  Anything the shape
    does not carry (suggested tags, creation time) is lost.

    Args:
        shape: A note shape

    Returns:
        A transient note

    """
    props = shape.props
    note_date = from_iso(props.get("date"))
    if note_date is None:
        msg = f"Shape {shape.id} carries no date"
        raise MergeAborted(msg)
    return Note(
        id=shape.note_id,
        title=props.get("title", ""),
        content=props.get("content", ""),
        note_type=props.get("note_type", "text"),
        date=note_date,
        x=shape.x,
        y=shape.y,
        manually_positioned=bool(props.get("manually_positioned", False)),
        tags=list(props.get("tags", [])),
        ai_suggested_tags=[],
        voice_duration=props.get("voice_duration"),
    )


@dataclass
class MergeNotesCommand(Command):
    """
    Command for merging the dragged note into the note it was dropped on.

    The merge runs as a sequence of backend steps: create the merged note,
    delete the dragged note, delete the target.  If a step fails, the steps
    already completed are undone in reverse order, so a failed merge leaves
    both originals on the backend.  Nothing is removed from the canvas until
    the backend has confirmed; both shapes are marked busy meanwhile.
    """

    #: The Sync Client.
    sync: SyncClient
    #: The canvas showing the notes.
    canvas: CanvasEngine
    #: Shape of the dragged note.
    dragged_shape_id: str
    #: Shape of the note dropped onto.
    target_shape_id: str
    #: The dragged note (set during execution).
    dragged: Note | None = None
    #: The target note (set during execution).
    target: Note | None = None
    #: The merged note (set after execution).
    merged: Note | None = None
    #: Whether a source had to be rebuilt from its shape.
    degraded: bool = False
    #: Why the merge failed, if it did.
    error: MergeAborted | None = None
    #: Steps completed so far.
    steps: list[Command] = field(default_factory=list)

    def execute(self) -> bool:
        """
        Execute the merge.

        Returns:
            True if successful, False otherwise

        """
        self._set_busy(True)
        try:
            self.target, self.dragged = self._load_sources()
            create = CreateNoteCommand(
                self.sync, compose_merge(self.target, self.dragged)
            )
            self._run(create)
            self.merged = create.note
            self._run(DeleteNoteCommand(self.sync, self.dragged))
            self._run(DeleteNoteCommand(self.sync, self.target))
        except MergeAborted as exc:
            self.error = exc
            logger.warning(
                "merge.aborted",
                reason=exc.reason,
                dragged=self.dragged_shape_id,
                target=self.target_shape_id,
                completed_steps=len(self.steps),
            )
            self._compensate()
            return False
        finally:
            self._set_busy(False)
        logger.info(
            "merge.completed",
            merged_id=self.merged.id if self.merged else None,
            dragged_id=self.dragged.id,
            target_id=self.target.id,
            degraded=self.degraded,
        )
        return True

    def undo(self) -> bool:
        """
        Undo the merge: delete the merged note and recreate both originals.

        Returns:
            True if successful, False otherwise

        """
        if not self.steps:
            return False
        return self._compensate()

    def get_description(self) -> str:
        dragged = self.dragged.title if self.dragged else self.dragged_shape_id
        target = self.target.title if self.target else self.target_shape_id
        return f"Merge {dragged!r} into {target!r}"

    @property
    def needs_full_reload(self) -> bool:
        return True

    def _set_busy(self, busy: bool) -> None:
        for shape_id in (self.dragged_shape_id, self.target_shape_id):
            self.canvas.update_shape(shape_id, props={"busy": busy})

    def _load_sources(self) -> tuple[Note, Note]:
        """
        Fetch both notes, rebuilding one from its shape if its fetch fails.

        Raises:
            MergeAborted: A shape is gone, or neither note could be fetched

        Returns:
            ``(target, dragged)``

        """
        shapes = []
        for shape_id in (self.target_shape_id, self.dragged_shape_id):
            shape = self.canvas.get_shape(shape_id)
            if shape is None or shape.note_id is None:
                msg = f"Shape {shape_id} no longer shows a note"
                raise MergeAborted(msg)
            shapes.append(shape)
        results = [self.sync.get_note(shape.note_id) for shape in shapes]
        if not any(result.ok for result in results):
            msg = "Neither note could be fetched"
            raise MergeAborted(msg)
        notes = []
        sides = ("target", "dragged")
        for side, shape, result in zip(sides, shapes, results, strict=True):
            if result.ok and result.value is not None:
                notes.append(result.value)
                continue
            self.degraded = True
            logger.warning(
                "merge.degraded",
                side=side,
                note_id=shape.note_id,
                error=str(result.error),
            )
            notes.append(degraded_source(shape))
        return notes[0], notes[1]

    def _run(self, step: Command) -> None:
        if not step.execute():
            error = getattr(step, "error", None)
            msg = f"{step.get_description()} failed: {error}"
            raise MergeAborted(msg)
        self.steps.append(step)

    def _compensate(self) -> bool:
        """
        Undo the completed steps, last first.

        Returns:
            True if every step was undone

        """
        ok = True
        for step in reversed(self.steps):
            if not step.undo():
                ok = False
                logger.error(
                    "merge.compensation_failed",
                    step=step.get_description(),
                    error=str(getattr(step, "error", None)),
                )
        self.steps.clear()
        return ok
