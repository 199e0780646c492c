"""Last-known-good copy of the backend's notes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from noteboard.models.note import Note
from noteboard.services.logs import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

logger = get_logger(__name__)


class NoteCache:
    """
    SQLite copy of the notes the backend last reported.

    Notes handed out by the cache are detached copies, so callers never hold
    session-bound objects.

    Args:
        session: SQLAlchemy session on the cache database

    """

    def __init__(self, session: Session) -> None:
        #: The SQLAlchemy session.
        self.session = session

    def replace_all(self, notes: Iterable[Note]) -> None:
        """
        Make the cache hold exactly ``notes``.

        Args:
            notes: The backend's current notes

        """
        notes = list(notes)
        live = {note.id for note in notes}
        for note in notes:
            self.session.merge(note.copy())
        stale = self.session.scalars(select(Note).where(Note.id.not_in(live))).all()
        for note in stale:
            self.session.delete(note)
        self.session.commit()
        logger.debug("cache.replaced", notes=len(live), pruned=len(stale))

    def upsert(self, note: Note) -> None:
        """Store one note."""
        self.session.merge(note.copy())
        self.session.commit()

    def remove(self, note_id: str) -> None:
        """Drop one note; unknown IDs are ignored."""
        note = self.session.get(Note, note_id)
        if note is not None:
            self.session.delete(note)
            self.session.commit()

    def all(self) -> list[Note]:
        """Copies of every cached note, oldest first."""
        return [
            note.copy()
            for note in self.session.scalars(select(Note).order_by(Note.date)).all()
        ]
