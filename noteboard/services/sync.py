"""
Client for the backend of record.

Every call is a single HTTP request scoped by the ``user-id`` caller identity
header.  Failures never escape as exceptions: each operation returns a
:class:`SyncResult` that carries either the value or a
:class:`~noteboard.exc.SyncError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx

from noteboard.board.layout import DateColumnMap
from noteboard.exc import SyncError
from noteboard.models.note import Note
from noteboard.services.logs import get_logger
from noteboard.utils import to_iso

if TYPE_CHECKING:
    from collections.abc import Callable

    from noteboard.services.cache import NoteCache

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class SyncResult(Generic[T]):
    """The outcome of one backend call."""

    #: The value returned by the backend (or the cached fallback).
    value: T | None = None
    #: What went wrong, if anything.
    error: SyncError | None = None
    #: Whether :attr:`value` comes from the local cache instead of the backend.
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        The value of a successful call.

        Raises:
            SyncError: The call failed

        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass
class NoteListing:
    """The notes of the board and the date columns derived from them."""

    notes: list[Note]
    columns: DateColumnMap


class SyncClient:
    """
    HTTP client for the notes API.

    Args:
        base_url: Base URL of the API, e.g. ``http://localhost:3001/api``
        user_id: Caller identity sent as the ``user-id`` header

    Keyword Args:
        cache: Local cache refreshed by successful calls and read when
            listing fails
        today: Clock used to anchor the column map
        transport: httpx transport to use instead of the network (tests)
        timeout: Request timeout in seconds; ``None`` waits indefinitely

    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        *,
        cache: NoteCache | None = None,
        today: Callable[[], date] = date.today,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        #: Local last-known-good copy of the notes.
        self.cache = cache
        #: Clock used to anchor the column map.
        self.today = today
        #: The HTTP client.
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"user-id": user_id},
            transport=transport,
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the HTTP connection pool."""
        self.client.close()

    def _call(
        self,
        operation: str,
        method: str,
        path: str,
        parse: Callable[[httpx.Response], T],
        **kwargs: Any,
    ) -> SyncResult[T]:
        """
        Issue one request and turn its outcome into a :class:`SyncResult`.

        Args:
            operation: Name of the operation, for errors and logs
            method: HTTP method
            path: Path below the base URL
            parse: Turns a successful response into the result value

        Keyword Args:
            kwargs: Passed to :meth:`httpx.Client.request`

        Returns:
            The result of the call

        """
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()
            value = parse(response)
        except httpx.HTTPStatusError as exc:
            error = SyncError(
                operation,
                exc.response.text or exc.response.reason_phrase,
                status_code=exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            error = SyncError(operation, str(exc) or exc.__class__.__name__)
        except (ValueError, KeyError, TypeError) as exc:
            error = SyncError(operation, f"Malformed response: {exc}")
        else:
            logger.debug("sync.ok", operation=operation, path=path)
            return SyncResult(value=value)
        logger.warning(
            "sync.failed",
            operation=operation,
            path=path,
            status_code=error.status_code,
            detail=error.detail,
        )
        return SyncResult(error=error)

    @staticmethod
    def _note(response: httpx.Response) -> Note:
        return Note.from_api(response.json())

    def _remember(self, result: SyncResult[Note]) -> SyncResult[Note]:
        if result.ok and self.cache is not None and result.value is not None:
            self.cache.upsert(result.value)
        return result

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def list_notes(self, days: int | None = None) -> SyncResult[NoteListing]:
        """
        Fetch the board's notes and build their date-column map.

        When the backend cannot be reached the cached notes are returned
        instead, with :attr:`SyncResult.stale` set and the error kept.

        Keyword Args:
            days: How many days back to fetch; the backend's default if
                ``None``

        Returns:
            The notes and their columns

        """
        params = {"days": days} if days is not None else None

        def parse(response: httpx.Response) -> list[Note]:
            payload = response.json()
            if not isinstance(payload, list):
                msg = f"Expected a list of notes, got {type(payload).__name__}"
                raise ValueError(msg)
            return [Note.from_api(item) for item in payload]

        result = self._call("list_notes", "GET", "/notes", parse, params=params)
        today = self.today()
        if result.ok:
            notes = result.value or []
            if self.cache is not None:
                self.cache.replace_all(notes)
            listing = NoteListing(notes, DateColumnMap.build(notes, today))
            return SyncResult(value=listing)
        if self.cache is None:
            return SyncResult(error=result.error)
        notes = self.cache.all()
        logger.info("sync.cache_fallback", notes=len(notes))
        return SyncResult(
            value=NoteListing(notes, DateColumnMap.build(notes, today)),
            error=result.error,
            stale=True,
        )

    def get_note(self, note_id: str) -> SyncResult[Note]:
        """Fetch one note."""
        return self._call("get_note", "GET", f"/notes/{note_id}", self._note)

    def create_note(self, fields: dict[str, Any]) -> SyncResult[Note]:
        """
        Create a note.

        The backend assigns the ID and, unless the note is manually
        positioned, its own collision-free y.

        Args:
            fields: Note fields in the API's naming (``title``, ``content``,
                ``type``, ``date``, ``tags``, ...).  Dates may be given as
                ``date``/``datetime`` objects; ``None`` values are dropped.

        Returns:
            The created note

        """
        body = {}
        for name, value in fields.items():
            if value is None:
                continue
            if isinstance(value, datetime):
                value = to_iso(value)
            elif isinstance(value, date):
                value = value.isoformat()
            body[name] = value
        return self._remember(
            self._call("create_note", "POST", "/notes", self._note, json=body)
        )

    def patch_position(self, note_id: str, x: float, y: float) -> SyncResult[Note]:
        """
        Store a note's canvas position.  The backend decides whether this
        marks the note as manually positioned.
        """
        return self._remember(
            self._call(
                "patch_position",
                "PATCH",
                f"/notes/{note_id}/position",
                self._note,
                json={"x": x, "y": y},
            )
        )

    def patch_date(self, note_id: str, new_date: date | datetime) -> SyncResult[Note]:
        """Move a note to another date."""
        if isinstance(new_date, datetime):
            value = to_iso(new_date)
        else:
            value = new_date.isoformat()
        return self._remember(
            self._call(
                "patch_date",
                "PATCH",
                f"/notes/{note_id}/date",
                self._note,
                json={"date": value},
            )
        )

    def patch_fields(
        self,
        note_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> SyncResult[Note]:
        """
        Change a note's title and/or content.

        Keyword Args:
            title: New title, unchanged if ``None``
            content: New content, unchanged if ``None``

        Returns:
            The updated note

        """
        body = {
            name: value
            for name, value in (("title", title), ("content", content))
            if value is not None
        }
        return self._remember(
            self._call(
                "patch_fields", "PATCH", f"/notes/{note_id}", self._note, json=body
            )
        )

    def delete_note(self, note_id: str) -> SyncResult[None]:
        """Delete a note."""
        result: SyncResult[None] = self._call(
            "delete_note", "DELETE", f"/notes/{note_id}", lambda response: None
        )
        if result.ok and self.cache is not None:
            self.cache.remove(note_id)
        return result
