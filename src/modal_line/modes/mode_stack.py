"""Mode tags and the explicit mode stack driving the vi keymap."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class ModeKind(str, Enum):
    INSERT = "insert"
    NORMAL = "normal"
    REPLACE = "replace"
    DELETE = "delete"
    YANK = "yank"
    TEXT_OBJECT = "text_object"
    MOVE_TO_CHAR = "move_to_char"
    G = "g"
    TILDE = "tilde"


class CharMovement(str, Enum):
    RIGHT_UNTIL = "right_until"
    RIGHT_AT = "right_at"
    LEFT_UNTIL = "left_until"
    LEFT_AT = "left_at"
    REPEAT = "repeat"
    REVERSE_REPEAT = "reverse_repeat"

    def reversed(self) -> "CharMovement":
        return _REVERSED.get(self, self)


_REVERSED = {
    CharMovement.RIGHT_UNTIL: CharMovement.LEFT_UNTIL,
    CharMovement.LEFT_UNTIL: CharMovement.RIGHT_UNTIL,
    CharMovement.RIGHT_AT: CharMovement.LEFT_AT,
    CharMovement.LEFT_AT: CharMovement.RIGHT_AT,
}


class MoveType(str, Enum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


class TextObjectScope(str, Enum):
    INNER = "inner"
    OUTER = "outer"


@dataclass(frozen=True, slots=True)
class Mode:
    """One entry of the mode stack.

    Only the payload matching ``kind`` is set: ``position`` for operators,
    ``movement`` for char searches, ``scope`` for text objects.
    """

    kind: ModeKind
    position: Optional[int] = None
    movement: Optional[CharMovement] = None
    scope: Optional[TextObjectScope] = None

    @classmethod
    def delete(cls, position: int) -> "Mode":
        return cls(ModeKind.DELETE, position=position)

    @classmethod
    def yank(cls, position: int) -> "Mode":
        return cls(ModeKind.YANK, position=position)

    @classmethod
    def move_to_char(cls, movement: CharMovement) -> "Mode":
        return cls(ModeKind.MOVE_TO_CHAR, movement=movement)

    @classmethod
    def text_object(cls, scope: TextObjectScope) -> "Mode":
        return cls(ModeKind.TEXT_OBJECT, scope=scope)

    @property
    def is_operator(self) -> bool:
        return self.kind in (ModeKind.DELETE, ModeKind.YANK)

    @property
    def label(self) -> str:
        if self.position is not None:
            return f"{self.kind.value}({self.position})"
        if self.movement is not None:
            return f"{self.kind.value}({self.movement.value})"
        if self.scope is not None:
            return f"{self.kind.value}({self.scope.value})"
        return self.kind.value


INSERT = Mode(ModeKind.INSERT)
NORMAL = Mode(ModeKind.NORMAL)
REPLACE = Mode(ModeKind.REPLACE)
G = Mode(ModeKind.G)
TILDE = Mode(ModeKind.TILDE)


class ModeStack:
    """Stack of pending modes; empty means Normal."""

    def __init__(self, modes: Optional[List[Mode]] = None) -> None:
        self._modes: List[Mode] = list(modes or [])

    @classmethod
    def with_insert(cls) -> "ModeStack":
        return cls([INSERT])

    @property
    def mode(self) -> Mode:
        return self._modes[-1] if self._modes else NORMAL

    def push(self, mode: Mode) -> None:
        self._modes.append(mode)

    def pop(self) -> Mode:
        return self._modes.pop() if self._modes else NORMAL

    def clear(self) -> None:
        self._modes.clear()

    def __len__(self) -> int:
        return len(self._modes)

    def __iter__(self) -> Iterator[Mode]:
        return iter(list(self._modes))


__all__ = [
    "CharMovement",
    "G",
    "INSERT",
    "Mode",
    "ModeKind",
    "ModeStack",
    "MoveType",
    "NORMAL",
    "REPLACE",
    "TILDE",
    "TextObjectScope",
]
