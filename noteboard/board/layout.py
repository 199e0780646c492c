"""
Date-column layout.

Every calendar date that has notes gets a vertical column on the canvas.
Column 0 is today (or the first date after today when today has no notes);
earlier dates get negative indices and later ones positive indices, so
columns always read left to right in date order.  Within a column, notes are
stacked by time of day without overlapping.
"""

from __future__ import annotations

import math
from bisect import bisect_left, insort
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, time
from typing import TYPE_CHECKING, Final

from noteboard.services.logs import get_logger
from noteboard.utils import day_key, days_between

if TYPE_CHECKING:
    from noteboard.models.note import Note

logger = get_logger(__name__)

#: X coordinate of today's column.
TODAY_X: Final[float] = 5000
#: Horizontal distance between two neighbouring columns.
COLUMN_SPACING: Final[float] = 230
#: Width of a note shape (and of a column).
COLUMN_WIDTH: Final[float] = 180
#: Height of a note shape.
ROW_HEIGHT: Final[float] = 150
#: Vertical gap between two stacked notes.
ROW_SPACING: Final[float] = 30
#: Y coordinate of the first row.
START_Y: Final[float] = 120
#: Y coordinate of the date headers.
HEADER_Y: Final[float] = 50
#: Vertical offset added per hour of the day.
HOUR_BAND: Final[float] = 40
#: Hour of the day that maps to :data:`START_Y`.
DAY_START_HOUR: Final[int] = 8


class DateColumnMap:
    """
    Mapping of ``YYYY-MM-DD`` day keys to column indices.

    Args:
        columns: Day key -> column index
        today: The date column 0 is anchored on

    """

    def __init__(self, columns: dict[str, int], today: date) -> None:
        #: Day key -> column index.
        self.columns = dict(columns)
        #: The date the map was built for.
        self.today = today

    @classmethod
    def build(cls, notes: Iterable[Note], today: date) -> DateColumnMap:
        """
        Build the map from the distinct dates of ``notes``.

        Args:
            notes: The loaded notes
            today: Today's date

        Returns:
            The column map

        """
        keys = sorted({note.day_key for note in notes})
        anchor = bisect_left(keys, day_key(today))
        return cls({key: i - anchor for i, key in enumerate(keys)}, today)

    def index_for(self, key: str) -> int | None:
        """
        Column index of a day, or ``None`` if the day has no column.
        """
        return self.columns.get(key)

    def items(self) -> Iterator[tuple[str, int]]:
        """Day keys and their indices, in date order."""
        return iter(sorted(self.columns.items(), key=lambda item: item[1]))

    def __contains__(self, key: object) -> bool:
        return key in self.columns

    def __len__(self) -> int:
        return len(self.columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateColumnMap):
            return NotImplemented
        return self.columns == other.columns and self.today == other.today

    def __repr__(self) -> str:
        return f"<DateColumnMap today={self.today} columns={self.columns}>"


def column_x(key: str, columns: DateColumnMap) -> float:
    """
    X coordinate of the column for a day.

    A day missing from ``columns`` should not happen once the map has been
    built from the loaded notes.  If it does, the column index is derived
    from the day difference to today and the anomaly is logged.

    Args:
        key: ``YYYY-MM-DD`` day key
        columns: The current column map

    Returns:
        The column's x coordinate

    """
    index = columns.index_for(key)
    if index is None:
        index = days_between(columns.today, date.fromisoformat(key))
        logger.warning(
            "layout.column_fallback",
            day=key,
            index=index,
            known_days=len(columns),
        )
    return TODAY_X + index * COLUMN_SPACING


def preferred_y(when: time) -> float:
    """
    Y coordinate a note filed at ``when`` would like to sit at.

    Times are quantized to whole hours after :data:`DAY_START_HOUR`; anything
    earlier goes to the first row.
    """
    minutes = when.hour * 60 + when.minute
    hour_slots = max(0, minutes - DAY_START_HOUR * 60) // 60
    return START_Y + hour_slots * HOUR_BAND


class ColumnOccupancy:
    """
    The vertical intervals already claimed in one column, sorted by ``y``.
    """

    def __init__(self) -> None:
        #: Claimed ``(y, height)`` intervals, sorted by ``y``.
        self.intervals: list[tuple[float, float]] = []

    def claim(self, preferred: float, height: float = ROW_HEIGHT) -> float:
        """
        Claim the first free slot at or below ``preferred``.

        Candidates are ``preferred + k * (ROW_HEIGHT + ROW_SPACING)``.  The
        claimed intervals never overlap each other and are sorted, so once
        the candidate has been pushed past an interval no earlier interval
        can collide with it again and one pass over the record suffices.

        Args:
            preferred: The y the note would like to sit at

        Keyword Args:
            height: Height of the interval to claim

        Returns:
            The claimed y

        """
        step = ROW_HEIGHT + ROW_SPACING
        y = preferred
        for start, size in self.intervals:
            if start >= y + height:
                break
            if y < start + size:
                y += step * math.ceil((start + size - y) / step)
        insort(self.intervals, (y, height))
        return y

    def release(self, y: float, height: float = ROW_HEIGHT) -> None:
        """Give back the interval claimed at ``y``; unknown intervals are ignored."""
        try:
            self.intervals.remove((y, height))
        except ValueError:
            return

    def reset(self) -> None:
        """Forget every claimed interval."""
        self.intervals.clear()


@dataclass(frozen=True)
class Placement:
    """Where a note goes on the canvas."""

    #: The note.
    note: Note
    #: Canvas x.
    x: float
    #: Canvas y.
    y: float


class LayoutPass:
    """
    One full layout of a note set.

    A pass owns the per-column occupancy records, so every full reload must
    start a new pass (or call :meth:`reset`).

    Args:
        columns: The column map of the loaded notes

    """

    def __init__(self, columns: DateColumnMap) -> None:
        #: The column map this pass lays notes out on.
        self.columns = columns
        #: Day key -> occupancy of that column.
        self.occupancy: dict[str, ColumnOccupancy] = {}
        #: Note ID -> the ``(day key, y)`` slot it holds.
        self.slots: dict[str, tuple[str, float]] = {}

    def reset(self) -> None:
        """Drop the occupancy of every column."""
        self.occupancy.clear()
        self.slots.clear()

    def place(self, note: Note) -> Placement:
        """
        Place one note.

        - Manually positioned notes keep their stored position and claim no
          slot.
        - Other notes go to their date's column, in the first free slot at
          or below the y their time of day asks for.
        - A note placed before gives back the slot it held, so a note moved
          to another date frees its old column.

        Args:
            note: The note to place

        Returns:
            The placement

        """
        self.release(note.id)
        if note.manually_positioned:
            return Placement(note, note.x, note.y)
        x = column_x(note.day_key, self.columns)
        column = self.occupancy.setdefault(note.day_key, ColumnOccupancy())
        y = column.claim(preferred_y(note.time_of_day))
        self.slots[note.id] = (note.day_key, y)
        return Placement(note, x, y)

    def release(self, note_id: str) -> None:
        """Give back the slot held by ``note_id``, if any."""
        slot = self.slots.pop(note_id, None)
        if slot is not None:
            day, y = slot
            self.occupancy[day].release(y)

    def place_all(self, notes: Iterable[Note]) -> list[Placement]:
        """
        Place a whole note set, earliest first so each column reads top to
        bottom in time order.
        """
        return [self.place(note) for note in sorted(notes, key=lambda n: n.date)]


@dataclass(frozen=True)
class DateHeader:
    """A column heading."""

    #: ``YYYY-MM-DD`` day key.
    day: str
    #: Canvas x of the column.
    x: float
    #: Two-line label, e.g. ``"07\\nAUG"``.
    label: str
    #: Whether this is today's column.
    is_today: bool


def date_headers(columns: DateColumnMap) -> list[DateHeader]:
    """
    Headings for every column, plus today's even when today has no notes.
    """
    today_key = day_key(columns.today)
    entries = list(columns.items())
    if today_key not in columns and 0 not in {index for _, index in entries}:
        # An empty today sits at column 0 unless a later date took it
        entries.append((today_key, 0))
    headers = []
    for key, index in sorted(entries, key=lambda item: item[1]):
        day = date.fromisoformat(key)
        headers.append(
            DateHeader(
                day=key,
                x=TODAY_X + index * COLUMN_SPACING,
                label=f"{day:%d}\n{day:%b}".upper(),
                is_today=key == today_key,
            )
        )
    return headers
