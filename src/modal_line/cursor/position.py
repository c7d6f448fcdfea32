"""Classification of a cursor offset against word spans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

WordSpan = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class InWord:
    index: int


@dataclass(frozen=True, slots=True)
class OnWordLeftEdge:
    index: int


@dataclass(frozen=True, slots=True)
class OnWordRightEdge:
    index: int


@dataclass(frozen=True, slots=True)
class InSpace:
    """Between words; either neighbor is ``None`` at the line edges."""

    left: Optional[int]
    right: Optional[int]


CursorPosition = Union[InWord, OnWordLeftEdge, OnWordRightEdge, InSpace]


def classify(cursor: int, words: Sequence[WordSpan]) -> CursorPosition:
    """Locate ``cursor`` relative to the half-open ``words`` spans."""

    if not words:
        return InSpace(None, None)
    if cursor == words[0][0]:
        return OnWordLeftEdge(0)
    if cursor < words[0][0]:
        return InSpace(None, 0)

    for index, (start, end) in enumerate(words):
        if start == cursor:
            return OnWordLeftEdge(index)
        if end == cursor:
            return OnWordRightEdge(index)
        if start < cursor < end:
            return InWord(index)
        if cursor < start:
            return InSpace(index - 1, index)

    return InSpace(len(words) - 1, None)


__all__ = [
    "CursorPosition",
    "InSpace",
    "InWord",
    "OnWordLeftEdge",
    "OnWordRightEdge",
    "WordSpan",
    "classify",
]
