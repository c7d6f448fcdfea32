"""Vi mode stack, motions, text objects and the vi keymap."""

from .mode_stack import (
    CharMovement,
    Mode,
    ModeKind,
    ModeStack,
    MoveType,
    TextObjectScope,
)
from .text_objects import surround_range, word_object_range
from .vi_mode import COUNT_MAX, ViMode

__all__ = [
    "COUNT_MAX",
    "CharMovement",
    "Mode",
    "ModeKind",
    "ModeStack",
    "MoveType",
    "TextObjectScope",
    "ViMode",
    "surround_range",
    "word_object_range",
]
