"""Tests for the Sync Client."""

from datetime import date

import httpx
import pytest
from conftest import API_URL, TODAY, at

from noteboard.exc import SyncError
from noteboard.services.sync import SyncClient


class TestListNotes:
    """Test cases for SyncClient.list_notes."""

    def test_lists_notes_and_columns(self, sync, backend):
        backend.add(id="n1", title="Standup", date=at(9))
        backend.add(id="n2", title="Ideas", date=at(10, days=-1))
        result = sync.list_notes()
        assert result.ok
        assert not result.stale
        listing = result.unwrap()
        assert sorted(note.id for note in listing.notes) == ["n1", "n2"]
        assert listing.columns.index_for("2024-08-07") == 0
        assert listing.columns.index_for("2024-08-06") == -1
        assert listing.columns.today == TODAY

    def test_days_parameter(self):
        captured = []

        def handler(request):
            captured.append(request.url.params.get("days"))
            return httpx.Response(200, json=[])

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        client.list_notes(days=14)
        client.list_notes()
        client.close()
        assert captured == ["14", None]

    def test_refreshes_cache(self, sync, backend, cache):
        backend.add(id="n1", date=at(9))
        sync.list_notes()
        assert [note.id for note in cache.all()] == ["n1"]

    def test_falls_back_to_cache(self, sync, backend, cache):
        """Test that an unreachable backend yields the cached notes, marked stale."""
        backend.add(id="n1", date=at(9))
        sync.list_notes()
        backend.fail("GET", "/notes", 503)
        result = sync.list_notes()
        assert not result.ok
        assert result.stale
        assert result.error.status_code == 503
        assert [note.id for note in result.value.notes] == ["n1"]

    def test_failure_without_cache(self, backend):
        backend.fail("GET", "/notes")
        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(backend))
        result = client.list_notes()
        client.close()
        assert result.value is None
        assert isinstance(result.error, SyncError)


class TestNoteOperations:
    """Test cases for the single-note operations."""

    def test_user_id_header(self, sync, backend):
        sync.list_notes()
        assert backend.headers[0]["user-id"] == "test-user-id"

    def test_get_note(self, sync, backend):
        backend.add(id="n1", title="Standup", date=at(9), tags=["work"])
        note = sync.get_note("n1").unwrap()
        assert note.title == "Standup"
        assert note.tags == ["work"]

    def test_get_missing_note(self, sync):
        result = sync.get_note("nope")
        assert not result.ok
        assert result.error.status_code == 404
        assert result.error.operation == "get_note"
        with pytest.raises(SyncError):
            result.unwrap()

    def test_create_note(self, sync, backend, cache):
        note = sync.create_note(
            {"title": "New", "type": "text", "date": at(11), "voiceDuration": None}
        ).unwrap()
        assert note.id in backend.notes
        assert backend.notes[note.id]["date"] == "2024-08-07T11:00:00"
        assert backend.notes[note.id]["voiceDuration"] is None
        assert note.id in [cached.id for cached in cache.all()]

    def test_create_note_with_plain_date(self, sync, backend):
        note = sync.create_note({"title": "New", "date": date(2024, 8, 9)}).unwrap()
        assert note.day_key == "2024-08-09"

    def test_patch_position(self, sync, backend):
        backend.add(id="n1", date=at(9))
        note = sync.patch_position("n1", 120.5, 300).unwrap()
        assert (note.x, note.y) == (120.5, 300)
        assert note.manually_positioned
        assert backend.paths("PATCH") == ["/notes/n1/position"]

    def test_patch_date(self, sync, backend):
        backend.add(id="n1", date=at(9))
        note = sync.patch_date("n1", date(2024, 8, 9)).unwrap()
        assert note.day_key == "2024-08-09"

    def test_patch_fields(self, sync, backend):
        backend.add(id="n1", title="Old", content="Body", date=at(9))
        note = sync.patch_fields("n1", title="New").unwrap()
        assert note.title == "New"
        assert note.content == "Body"

    def test_delete_note(self, sync, backend, cache):
        backend.add(id="n1", date=at(9))
        sync.list_notes()
        assert sync.delete_note("n1").ok
        assert "n1" not in backend.notes
        assert cache.all() == []


class TestFailures:
    """Test cases for failures turned into results."""

    def test_server_error(self, sync, backend):
        backend.add(id="n1", date=at(9))
        backend.fail("DELETE", "/notes/n1", 500)
        result = sync.delete_note("n1")
        assert not result.ok
        assert result.error.status_code == 500
        assert "n1" in backend.notes

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        result = client.get_note("n1")
        client.close()
        assert not result.ok
        assert result.error.status_code is None
        assert "Connection refused" in result.error.detail

    def test_malformed_response(self):
        def handler(request):
            return httpx.Response(200, json={"id": "n1"})

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        result = client.get_note("n1")
        client.close()
        assert not result.ok
        assert "Malformed" in result.error.detail

    def test_listing_that_is_not_a_list(self):
        """Test that an object where a list of notes belongs is a failure."""

        def handler(request):
            return httpx.Response(200, json={"notes": []})

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        result = client.list_notes()
        client.close()
        assert result.value is None
        assert result.error.operation == "list_notes"
        assert "Malformed" in result.error.detail

    def test_listing_with_non_object_entries(self):
        def handler(request):
            return httpx.Response(200, json=["note-1", 42])

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        result = client.list_notes()
        client.close()
        assert not result.ok
        assert "Malformed" in result.error.detail

    def test_note_that_is_not_an_object(self):
        def handler(request):
            return httpx.Response(200, json=[{"id": "n1"}])

        client = SyncClient(API_URL, "me", transport=httpx.MockTransport(handler))
        result = client.get_note("n1")
        client.close()
        assert not result.ok
        assert "Malformed" in result.error.detail

    def test_malformed_listing_falls_back_to_cache(self, cache, make_note):
        cache.replace_all([make_note("cached", at(9))])

        def handler(request):
            return httpx.Response(200, json={"notes": []})

        client = SyncClient(
            API_URL, "me", cache=cache, transport=httpx.MockTransport(handler)
        )
        result = client.list_notes()
        client.close()
        assert result.stale
        assert [note.id for note in result.value.notes] == ["cached"]
