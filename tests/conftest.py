"""Shared pytest fixtures and test helpers for Note Board tests."""

import json
import os
import tempfile
from datetime import date, datetime, time, timedelta
from itertools import count

# Run Qt without a display, and keep the cache database out of the user's
# home directory
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
if "NOTEBOARD_DB_PATH" not in os.environ:
    _temp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    _temp_db.close()
    os.environ["NOTEBOARD_DB_PATH"] = _temp_db.name

import httpx
import pytest
from PySide6.QtCore import QSettings

from noteboard.board.controller import BoardController
from noteboard.canvas.scene import SceneCanvas
from noteboard.db import create_session
from noteboard.models.note import Note
from noteboard.services.cache import NoteCache
from noteboard.services.sync import SyncClient
from noteboard.settings import BoardSettings

#: The date every test treats as today.
TODAY = date(2024, 8, 7)
#: Base URL the test client talks to.
API_URL = "http://testserver/api"


def at(hour: int, minute: int = 0, days: int = 0) -> datetime:
    """``TODAY + days`` at ``hour:minute``."""
    return datetime.combine(TODAY + timedelta(days=days), time(hour, minute))


class FakeBackend:
    """
    In-memory notes API, served to :class:`SyncClient` through
    ``httpx.MockTransport``.
    """

    def __init__(self) -> None:
        #: Note ID -> JSON payload.
        self.notes: dict[str, dict] = {}
        #: ``(method, path)`` of every request received.
        self.calls: list[tuple[str, str]] = []
        #: Headers of every request received.
        self.headers: list[httpx.Headers] = []
        #: ``(method, path)`` -> status code to fail with.
        self.failures: dict[tuple[str, str], int] = {}
        self._ids = count(1)

    def add(self, **fields) -> dict:
        """Store a note and return its payload."""
        note_id = fields.pop("id", None) or f"note-{next(self._ids)}"
        payload = {
            "id": note_id,
            "title": "",
            "content": "",
            "type": "text",
            "x": 0,
            "y": 0,
            "manuallyPositioned": False,
            "tags": [],
            "aiSuggestedTags": [],
            "voiceDuration": None,
            "createdAt": None,
            **fields,
        }
        if isinstance(payload["date"], datetime):
            payload["date"] = payload["date"].isoformat()
        self.notes[note_id] = payload
        return payload

    def fail(self, method: str, path: str, status: int = 500) -> None:
        """Make every ``method path`` request fail with ``status``."""
        self.failures[(method, path)] = status

    def paths(self, method: str) -> list[str]:
        """Paths of the requests received with ``method``."""
        return [path for m, path in self.calls if m == method]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.calls.append((method, path))
        self.headers.append(request.headers)
        status = self.failures.get((method, path))
        if status is not None:
            return httpx.Response(status, json={"message": "Backend failure"})
        body = json.loads(request.content) if request.content else {}
        parts = path.strip("/").split("/")
        if parts == ["notes"]:
            if method == "GET":
                return httpx.Response(200, json=list(self.notes.values()))
            if method == "POST":
                return httpx.Response(201, json=self.add(**body))
        if len(parts) >= 2 and parts[0] == "notes":
            note = self.notes.get(parts[1])
            if note is None:
                return httpx.Response(404, json={"message": "Note not found"})
            if len(parts) == 2:
                if method == "GET":
                    return httpx.Response(200, json=note)
                if method == "PATCH":
                    note.update(body)
                    return httpx.Response(200, json=note)
                if method == "DELETE":
                    del self.notes[parts[1]]
                    return httpx.Response(204)
            if parts[2:] == ["position"] and method == "PATCH":
                note.update(x=body["x"], y=body["y"], manuallyPositioned=True)
                return httpx.Response(200, json=note)
            if parts[2:] == ["date"] and method == "PATCH":
                note["date"] = body["date"]
                return httpx.Response(200, json=note)
        return httpx.Response(404, json={"message": "No such route"})


@pytest.fixture
def make_note():
    """Factory for transient notes."""

    def factory(note_id: str, when: datetime, **fields) -> Note:
        return Note.from_api({"id": note_id, "date": when.isoformat(), **fields})

    return factory


@pytest.fixture
def db_session(tmp_path):
    """A session on a temporary cache database."""
    session = create_session(tmp_path / "cache.db")
    yield session
    session.close()


@pytest.fixture
def cache(db_session):
    return NoteCache(db_session)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def sync(backend, cache):
    """A Sync Client talking to the fake backend."""
    client = SyncClient(
        API_URL,
        "test-user-id",
        cache=cache,
        today=lambda: TODAY,
        transport=httpx.MockTransport(backend),
    )
    yield client
    client.close()


@pytest.fixture
def settings(tmp_path):
    """Board settings stored in a temporary ini file."""
    return BoardSettings(
        QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    )


@pytest.fixture
def canvas(qapp):
    return SceneCanvas()


@pytest.fixture
def controller(canvas, sync, settings):
    """A board controller on the scene canvas and fake backend."""
    board = BoardController(canvas, sync, settings, today=lambda: TODAY)
    yield board
    board.close()
