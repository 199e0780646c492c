from .abstract import Command
from .merge import MergeNotesCommand, compose_merge, degraded_source
from .note import CreateNoteCommand, DeleteNoteCommand

__all__ = [
    "Command",
    "CreateNoteCommand",
    "DeleteNoteCommand",
    "MergeNotesCommand",
    "compose_merge",
    "degraded_source",
]
