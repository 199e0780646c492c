"""Note related commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from noteboard.exc import SyncError
from noteboard.services.logs import get_logger

from .abstract import Command

if TYPE_CHECKING:
    from noteboard.models.note import Note
    from noteboard.services.sync import SyncClient

logger = get_logger(__name__)

#: Fields of a note the backend takes when creating one.
CREATE_FIELDS = (
    "title",
    "content",
    "type",
    "date",
    "x",
    "y",
    "manuallyPositioned",
    "tags",
    "aiSuggestedTags",
    "voiceDuration",
)


def creation_fields(note: Note) -> dict[str, Any]:
    """
    The fields needed to create ``note`` again.

    Args:
        note: The note to recreate

    Returns:
        Creation fields in the API's naming

    """
    payload = note.to_api()
    return {name: payload[name] for name in CREATE_FIELDS if payload[name] is not None}


@dataclass
class CreateNoteCommand(Command):
    """Command for creating a note."""

    #: The Sync Client.
    sync: SyncClient
    #: Fields of the new note, in the API's naming.
    fields: dict[str, Any] = field(default_factory=dict)
    #: The created note (set after execution).
    note: Note | None = None
    #: Why the last call failed, if it did.
    error: SyncError | None = None

    def execute(self) -> bool:
        """
        Create the note.

        Returns:
            True if successful, False otherwise

        """
        try:
            self.note = self.sync.create_note(self.fields).unwrap()
        except SyncError as exc:
            self.error = exc
            return False
        return True

    def undo(self) -> bool:
        """
        Delete the created note.

        Returns:
            True if successful, False otherwise

        """
        if self.note is None:
            return False
        try:
            self.sync.delete_note(self.note.id).unwrap()
        except SyncError as exc:
            self.error = exc
            return False
        self.note = None
        return True

    def get_description(self) -> str:
        return f"Create note {self.fields.get('title', '')!r}"


@dataclass
class DeleteNoteCommand(Command):
    """
    Command for deleting a note.

    ``note`` must be the full record: undoing the delete recreates the note
    from it (under a new ID assigned by the backend).
    """

    #: The Sync Client.
    sync: SyncClient
    #: The note to delete.
    note: Note
    #: The note created by :meth:`undo`, if any.
    recreated: Note | None = None
    #: Why the last call failed, if it did.
    error: SyncError | None = None

    def execute(self) -> bool:
        """
        Delete the note.

        Returns:
            True if successful, False otherwise

        """
        try:
            self.sync.delete_note(self.note.id).unwrap()
        except SyncError as exc:
            self.error = exc
            return False
        return True

    def undo(self) -> bool:
        """
        Recreate the deleted note.

        Returns:
            True if successful, False otherwise

        """
        fields = creation_fields(self.note)
        try:
            self.recreated = self.sync.create_note(fields).unwrap()
        except SyncError as exc:
            self.error = exc
            return False
        logger.info(
            "note.recreated",
            note_id=self.note.id,
            new_id=self.recreated.id if self.recreated else None,
        )
        return True

    def get_description(self) -> str:
        return f"Delete note {self.note.title!r}"
