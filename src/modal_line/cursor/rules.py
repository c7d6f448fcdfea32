"""Pluggable editor rules: word division and newline evaluation."""

from __future__ import annotations

from typing import List, Optional

from modal_line.buffer import TextBuffer

from .position import WordSpan


def divide_words_by_space(buf: TextBuffer) -> List[WordSpan]:
    """Split on spaces; a backslash escapes the space after it."""

    spans: List[WordSpan] = []
    word_start: Optional[int] = None
    escaped = False

    for index, cluster in enumerate(buf.graphemes()):
        if cluster == "\\":
            escaped = True
            continue

        if word_start is not None:
            if cluster == " " and not escaped:
                spans.append((word_start, index))
                word_start = None
        elif cluster != " ":
            word_start = index

        escaped = False

    if word_start is not None:
        spans.append((word_start, len(buf)))
    return spans


def last_non_space_is_not_backslash(buf: TextBuffer) -> bool:
    """True unless the line ends in a continuation backslash."""

    for cluster in reversed(buf.graphemes()):
        if cluster == " ":
            continue
        return cluster != "\\"
    return True


class EditorRules:
    """Default behaviors; subclass and override to customize an editor."""

    def divide_words(self, buf: TextBuffer) -> List[WordSpan]:
        return divide_words_by_space(buf)

    def evaluate_on_newline(self, buf: TextBuffer) -> bool:
        return last_non_space_is_not_backslash(buf)


__all__ = ["EditorRules", "divide_words_by_space", "last_non_space_is_not_backslash"]
