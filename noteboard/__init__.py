"""Note Board: a date-indexed canvas of notes kept in sync with a backend."""

__version__ = "0.3.0"
