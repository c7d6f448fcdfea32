"""Undoable actions recorded by ``TextBuffer``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

import grapheme

if TYPE_CHECKING:  # pragma: no cover
    from .buffer import TextBuffer


@dataclass(frozen=True, slots=True)
class Insert:
    start: int
    text: str

    def do_on(self, buf: "TextBuffer") -> Optional[int]:
        buf.insert_raw(self.start, self.text)
        return self.start

    def undo(self, buf: "TextBuffer") -> Optional[int]:
        buf.remove_raw(self.start, self.start + grapheme.length(self.text))
        return self.start


@dataclass(frozen=True, slots=True)
class Remove:
    start: int
    text: str

    def do_on(self, buf: "TextBuffer") -> Optional[int]:
        length = grapheme.length(self.text)
        buf.remove_raw(self.start, self.start + length)
        return 0 if length > self.start else self.start - length

    def undo(self, buf: "TextBuffer") -> Optional[int]:
        buf.insert_raw(self.start, self.text)
        return self.start


@dataclass(frozen=True, slots=True)
class Noop:
    """Placeholder logged when a recorded removal touched nothing."""

    start: int

    def do_on(self, buf: "TextBuffer") -> Optional[int]:
        return self.start

    def undo(self, buf: "TextBuffer") -> Optional[int]:
        return self.start


@dataclass(frozen=True, slots=True)
class StartGroup:
    def do_on(self, buf: "TextBuffer") -> Optional[int]:
        return None

    def undo(self, buf: "TextBuffer") -> Optional[int]:
        return None


@dataclass(frozen=True, slots=True)
class EndGroup:
    def do_on(self, buf: "TextBuffer") -> Optional[int]:
        return None

    def undo(self, buf: "TextBuffer") -> Optional[int]:
        return None


Action = Union[Insert, Remove, Noop, StartGroup, EndGroup]

__all__ = ["Action", "EndGroup", "Insert", "Noop", "Remove", "StartGroup"]
