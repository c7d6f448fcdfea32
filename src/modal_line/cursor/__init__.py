"""Cursor offset model and word-boundary classification."""

from .cursor import Cursor
from .position import (
    CursorPosition,
    InSpace,
    InWord,
    OnWordLeftEdge,
    OnWordRightEdge,
    WordSpan,
    classify,
)
from .rules import EditorRules, divide_words_by_space, last_non_space_is_not_backslash

__all__ = [
    "Cursor",
    "CursorPosition",
    "EditorRules",
    "InSpace",
    "InWord",
    "OnWordLeftEdge",
    "OnWordRightEdge",
    "WordSpan",
    "classify",
    "divide_words_by_space",
    "last_non_space_is_not_backslash",
]
