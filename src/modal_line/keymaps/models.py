"""Key events understood by the keymaps, plus a compact key-notation parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

import grapheme


class KeyCode(str, Enum):
    CHAR = "char"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    BACKSPACE = "backspace"
    DELETE = "delete"
    ESC = "esc"
    NULL = "null"


class Modifier(str, Enum):
    NONE = "none"
    CTRL = "ctrl"
    ALT = "alt"


@dataclass(frozen=True, slots=True)
class Key:
    """Single normalized key press.

    ``char`` is set only for ``KeyCode.CHAR`` and holds exactly one grapheme
    cluster. Modifiers apply to characters only.
    """

    code: KeyCode
    char: str | None = None
    modifier: Modifier = Modifier.NONE

    def __post_init__(self) -> None:
        if self.code is KeyCode.CHAR:
            if not self.char or grapheme.length(self.char) != 1:
                raise ValueError(f"char key needs one grapheme, got {self.char!r}")
        elif self.char is not None:
            raise ValueError(f"{self.code.value} key cannot carry a char")
        elif self.modifier is not Modifier.NONE:
            raise ValueError("modifiers apply to char keys only")

    @classmethod
    def of(cls, char: str) -> "Key":
        return cls(KeyCode.CHAR, char)

    @classmethod
    def ctrl(cls, char: str) -> "Key":
        return cls(KeyCode.CHAR, char, Modifier.CTRL)

    @classmethod
    def alt(cls, char: str) -> "Key":
        return cls(KeyCode.CHAR, char, Modifier.ALT)

    def is_char(self, char: str | None = None) -> bool:
        """Plain (unmodified) character, optionally equal to ``char``."""

        if self.code is not KeyCode.CHAR or self.modifier is not Modifier.NONE:
            return False
        return char is None or self.char == char

    def is_ctrl(self, char: str) -> bool:
        return self.modifier is Modifier.CTRL and self.char == char

    @property
    def token(self) -> str:
        if self.code is KeyCode.CHAR:
            if self.modifier is Modifier.CTRL:
                return f"<C-{self.char}>"
            if self.modifier is Modifier.ALT:
                return f"<A-{self.char}>"
            return "<lt>" if self.char == "<" else str(self.char)
        return _CODE_TOKENS[self.code]


ESC = Key(KeyCode.ESC)
LEFT = Key(KeyCode.LEFT)
RIGHT = Key(KeyCode.RIGHT)
UP = Key(KeyCode.UP)
DOWN = Key(KeyCode.DOWN)
HOME = Key(KeyCode.HOME)
END = Key(KeyCode.END)
BACKSPACE = Key(KeyCode.BACKSPACE)
DELETE = Key(KeyCode.DELETE)
NULL = Key(KeyCode.NULL)

_CODE_TOKENS = {
    KeyCode.ESC: "<Esc>",
    KeyCode.LEFT: "<Left>",
    KeyCode.RIGHT: "<Right>",
    KeyCode.UP: "<Up>",
    KeyCode.DOWN: "<Down>",
    KeyCode.HOME: "<Home>",
    KeyCode.END: "<End>",
    KeyCode.BACKSPACE: "<BS>",
    KeyCode.DELETE: "<Del>",
    KeyCode.NULL: "<Null>",
}

_NAMED = {
    "esc": ESC,
    "left": LEFT,
    "right": RIGHT,
    "up": UP,
    "down": DOWN,
    "home": HOME,
    "end": END,
    "bs": BACKSPACE,
    "del": DELETE,
    "null": NULL,
    "tab": Key.of("\t"),
    "cr": Key.of("\n"),
    "lt": Key.of("<"),
}


def _parse_token(name: str) -> Key:
    lowered = name.lower()
    if lowered in _NAMED:
        return _NAMED[lowered]
    if len(name) > 2 and name[1] == "-":
        prefix, char = lowered[0], name[2:]
        if grapheme.length(char) == 1:
            if prefix == "c":
                return Key.ctrl(char.lower())
            if prefix == "a":
                return Key.alt(char)
    raise ValueError(f"Unknown key token '<{name}>'")


def parse_keys(notation: str) -> List[Key]:
    """Turn ``"if<Esc>3."`` style notation into keys.

    Plain text maps one grapheme to one key; ``<...>`` names special keys.
    A ``<`` with no closing ``>`` is taken literally.
    """

    keys: List[Key] = []
    clusters = list(grapheme.graphemes(notation))
    index = 0
    while index < len(clusters):
        cluster = clusters[index]
        if cluster == "<":
            try:
                close = clusters.index(">", index + 1)
            except ValueError:
                close = -1
            if close > index + 1:
                keys.append(_parse_token("".join(clusters[index + 1 : close])))
                index = close + 1
                continue
        keys.append(Key.of(cluster))
        index += 1
    return keys


__all__ = [
    "BACKSPACE",
    "DELETE",
    "DOWN",
    "END",
    "ESC",
    "HOME",
    "Key",
    "KeyCode",
    "LEFT",
    "Modifier",
    "NULL",
    "RIGHT",
    "UP",
    "parse_keys",
]
