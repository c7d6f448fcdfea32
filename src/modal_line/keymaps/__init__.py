"""Key events, key notation, and the keymap capability interface."""

from .base import EndOfInput, InputInterrupted, KeyMap
from .models import (
    BACKSPACE,
    DELETE,
    DOWN,
    END,
    ESC,
    HOME,
    LEFT,
    NULL,
    RIGHT,
    UP,
    Key,
    KeyCode,
    Modifier,
    parse_keys,
)

__all__ = [
    "BACKSPACE",
    "DELETE",
    "DOWN",
    "END",
    "ESC",
    "EndOfInput",
    "HOME",
    "InputInterrupted",
    "Key",
    "KeyCode",
    "KeyMap",
    "LEFT",
    "Modifier",
    "NULL",
    "RIGHT",
    "UP",
    "parse_keys",
]
