"""Text buffer, undo actions, and the yank/delete register."""

from .actions import Action, EndGroup, Insert, Noop, Remove, StartGroup
from .buffer import TextBuffer
from .registers import RegisterValue

__all__ = [
    "Action",
    "EndGroup",
    "Insert",
    "Noop",
    "RegisterValue",
    "Remove",
    "StartGroup",
    "TextBuffer",
]
