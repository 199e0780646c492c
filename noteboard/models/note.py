"""Note model."""

from datetime import datetime, time
from typing import Any, Final

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from noteboard.db import Base
from noteboard.utils import day_key, from_iso, to_iso

#: The note types the backend accepts.
NOTE_TYPES: Final[tuple[str, ...]] = ("voice", "text", "collection")


class Note(Base):
    """
    A note record as reported by the backend of record.

    Instances built with :meth:`from_api` are plain transient objects; the
    :class:`~noteboard.services.cache.NoteCache` persists copies of them as
    the last-known-good snapshot.
    """

    __tablename__ = "notes"
    __table_args__ = (
        CheckConstraint(
            "note_type IN ('voice','text','collection')", name="ck_notes_note_type"
        ),
    )

    #: The note ID (opaque, assigned by the backend).
    id: Mapped[str] = mapped_column(String, primary_key=True)
    #: The note title.
    title: Mapped[str] = mapped_column(String, nullable=False, default="")
    #: The note body.
    content: Mapped[str] = mapped_column(String, nullable=False, default="")
    #: The note type: voice, text or collection.
    note_type: Mapped[str] = mapped_column(String, nullable=False, default="text")
    #: The date (and time of day) the note belongs to.
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    #: Canvas x coordinate; only meaningful when manually positioned.
    x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    #: Canvas y coordinate.
    y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    #: Whether the user dropped the note somewhere off its date column.
    manually_positioned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    #: Tags (a set; order carries no meaning).
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    #: Tags proposed by the tagging service, best first.
    ai_suggested_tags: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    #: Length of the voice recording in seconds.
    voice_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    #: When the backend created the note.
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Note id={self.id!r} title={self.title!r} date={self.day_key}>"

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Note":
        """
        Build a note from a backend JSON payload.

        Args:
            payload: The decoded JSON object

        Returns:
            A transient note

        """
        if not isinstance(payload, dict):
            msg = f"Expected a note object, got {type(payload).__name__}"
            raise ValueError(msg)
        note_date = from_iso(payload.get("date"))
        if note_date is None:
            msg = f"Note {payload.get('id')!r} has no date"
            raise ValueError(msg)
        return cls(
            id=str(payload["id"]),
            title=payload.get("title") or "",
            content=payload.get("content") or "",
            note_type=payload.get("type") or "text",
            date=note_date,
            x=float(payload.get("x") or 0.0),
            y=float(payload.get("y") or 0.0),
            manually_positioned=bool(payload.get("manuallyPositioned", False)),
            tags=list(dict.fromkeys(payload.get("tags") or [])),
            ai_suggested_tags=list(payload.get("aiSuggestedTags") or []),
            voice_duration=payload.get("voiceDuration"),
            created_at=from_iso(payload.get("createdAt")),
        )

    def to_api(self) -> dict[str, Any]:
        """
        Serialize the note to the backend's JSON shape.

        Returns:
            A JSON-ready dictionary

        """
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "type": self.note_type,
            "date": to_iso(self.date),
            "x": self.x,
            "y": self.y,
            "manuallyPositioned": self.manually_positioned,
            "tags": list(self.tags or []),
            "aiSuggestedTags": list(self.ai_suggested_tags or []),
            "voiceDuration": self.voice_duration,
            "createdAt": to_iso(self.created_at),
        }

    def copy(self) -> "Note":
        """Return a detached copy of this note."""
        return Note.from_api(self.to_api())

    @property
    def day_key(self) -> str:
        """The ``YYYY-MM-DD`` key of the note's date column."""
        return day_key(self.date)

    @property
    def time_of_day(self) -> time:
        """The time of day the note is filed under."""
        return self.date.time()

    @property
    def time_label(self) -> str:
        """``HH:MM`` label shown on the note's shape."""
        stamp = self.created_at or self.date
        return stamp.strftime("%H:%M")

    @property
    def duration_label(self) -> str:
        """
        ``m:ss`` label for voice notes, empty for everything else.
        """
        if not self.voice_duration:
            return ""
        minutes, seconds = divmod(int(self.voice_duration), 60)
        return f"{minutes}:{seconds:02d}"
