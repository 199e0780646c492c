"""Tests for the Note model."""

from datetime import datetime

import pytest

from noteboard.models.note import Note
from noteboard.utils import day_key, days_between, from_iso


class TestNote:
    """Test cases for Note."""

    def test_from_api(self):
        note = Note.from_api(
            {
                "id": "n1",
                "title": "Standup",
                "type": "voice",
                "date": "2024-08-07T08:30:00",
                "x": 10,
                "y": 20,
                "manuallyPositioned": True,
                "tags": ["work", "work", "daily"],
                "voiceDuration": 61,
                "createdAt": "2024-08-07T08:31:00",
            }
        )
        assert note.note_type == "voice"
        assert note.tags == ["work", "daily"]
        assert note.manually_positioned
        assert note.day_key == "2024-08-07"
        assert note.time_label == "08:31"
        assert note.duration_label == "1:01"

    def test_missing_date(self):
        with pytest.raises(ValueError, match="no date"):
            Note.from_api({"id": "n1"})

    def test_payload_that_is_not_an_object(self):
        with pytest.raises(ValueError, match="note object"):
            Note.from_api(["n1"])  # type: ignore[arg-type]

    def test_to_api_round_trip(self):
        payload = {
            "id": "n1",
            "title": "T",
            "content": "C",
            "type": "text",
            "date": "2024-08-07T08:30:00",
            "tags": ["a"],
        }
        copy = Note.from_api(payload).copy()
        assert copy.to_api()["date"] == "2024-08-07T08:30:00"
        assert copy.to_api()["tags"] == ["a"]
        assert copy.to_api()["manuallyPositioned"] is False

    def test_text_note_has_no_duration(self):
        note = Note.from_api({"id": "n1", "date": "2024-08-07T08:30:00"})
        assert note.duration_label == ""
        assert note.time_label == "08:30"


class TestDates:
    """Test cases for the date helpers."""

    def test_from_iso_naive(self):
        assert from_iso("2024-08-07T08:30:00") == datetime(2024, 8, 7, 8, 30)

    def test_from_iso_aware_is_local_and_naive(self):
        value = from_iso("2024-08-07T08:30:00+00:00")
        assert value.tzinfo is None

    def test_from_iso_empty(self):
        assert from_iso(None) is None
        assert from_iso("") is None

    def test_day_key(self):
        assert day_key(datetime(2024, 8, 7, 23, 59)) == "2024-08-07"

    def test_days_between(self):
        assert days_between(datetime(2024, 8, 7).date(), datetime(2024, 8, 4).date()) == -3
