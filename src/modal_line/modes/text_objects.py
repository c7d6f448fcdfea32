"""Range selection for ``iw``/``aw`` and delimiter text objects."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from modal_line.buffer import TextBuffer
from modal_line.cursor import WordSpan

from .mode_stack import TextObjectScope

Range = Tuple[int, int]

SURROUND_PAIRS: Dict[str, Tuple[str, str]] = {
    "(": ("(", ")"),
    ")": ("(", ")"),
    "b": ("(", ")"),
    "[": ("[", "]"),
    "]": ("[", "]"),
    "{": ("{", "}"),
    "}": ("{", "}"),
    "B": ("{", "}"),
    "<": ("<", ">"),
    ">": ("<", ">"),
    '"': ('"', '"'),
    "'": ("'", "'"),
    "`": ("`", "`"),
}

WORD_OBJECTS = frozenset("wW")


def _segments(length: int, words: Sequence[WordSpan]) -> List[Tuple[int, int, bool]]:
    """Split ``[0, length)`` into alternating word and gap runs."""

    segments: List[Tuple[int, int, bool]] = []
    position = 0
    for start, end in words:
        if start > position:
            segments.append((position, start, False))
        segments.append((start, end, True))
        position = end
    if position < length:
        segments.append((position, length, False))
    return segments


def word_object_range(
    buf: TextBuffer,
    cursor: int,
    words: Sequence[WordSpan],
    scope: TextObjectScope,
    count: int,
) -> Optional[Range]:
    """Range for ``iw``/``aw`` starting at the run under ``cursor``.

    Inner counts word and gap runs alike. Outer takes ``count`` words plus
    the trailing gap, or the leading gap when nothing trails.
    """

    segments = _segments(len(buf), words)
    current = next(
        (i for i, (start, end, _) in enumerate(segments) if start <= cursor < end),
        None,
    )
    if current is None:
        return None

    count = max(count, 1)
    if scope is TextObjectScope.INNER:
        last = min(current + count - 1, len(segments) - 1)
        return segments[current][0], segments[last][1]

    start = segments[current][0]
    index = current
    taken = 0
    on_word = segments[current][2]
    if not on_word:
        index += 1
    last = current
    while index < len(segments) and taken < count:
        if segments[index][2]:
            taken += 1
            last = index
        index += 1

    if on_word:
        trailing = last + 1
        if trailing < len(segments) and not segments[trailing][2]:
            return start, segments[trailing][1]
        if current > 0 and not segments[current - 1][2]:
            return segments[current - 1][0], segments[last][1]
    return start, segments[last][1]


def _find_open(clusters: Sequence[str], cursor: int, opener: str, closer: str) -> Optional[int]:
    if cursor < len(clusters) and clusters[cursor] == opener:
        return cursor
    depth = 0
    for index in range(min(cursor, len(clusters)) - 1, -1, -1):
        cluster = clusters[index]
        if cluster == closer:
            depth += 1
        elif cluster == opener:
            if depth == 0:
                return index
            depth -= 1
    return None


def _find_close(clusters: Sequence[str], cursor: int, opener: str, closer: str) -> Optional[int]:
    if cursor < len(clusters) and clusters[cursor] == closer:
        return cursor
    depth = 0
    for index in range(cursor + 1, len(clusters)):
        cluster = clusters[index]
        if cluster == opener:
            depth += 1
        elif cluster == closer:
            if depth == 0:
                return index
            depth -= 1
    return None


def _quote_span(clusters: Sequence[str], cursor: int, quote: str) -> Optional[Range]:
    if cursor >= len(clusters):
        return None
    if clusters[cursor] == quote:
        before = sum(1 for cluster in clusters[:cursor] if cluster == quote)
        if before % 2:
            start = _last_index(clusters, quote, cursor)
            return (start, cursor) if start is not None else None
        end = _first_index(clusters, quote, cursor + 1)
        return (cursor, end) if end is not None else None
    start = _last_index(clusters, quote, cursor)
    end = _first_index(clusters, quote, cursor + 1)
    if start is None or end is None:
        return None
    return start, end


def _last_index(clusters: Sequence[str], target: str, before: int) -> Optional[int]:
    for index in range(before - 1, -1, -1):
        if clusters[index] == target:
            return index
    return None


def _first_index(clusters: Sequence[str], target: str, start: int) -> Optional[int]:
    for index in range(start, len(clusters)):
        if clusters[index] == target:
            return index
    return None


def surround_range(
    buf: TextBuffer, cursor: int, opener: str, closer: str, scope: TextObjectScope
) -> Optional[Range]:
    """Range enclosed by the nearest delimiter pair around ``cursor``.

    Distinct delimiters are matched with nesting; quotes are matched by a
    plain search. ``None`` when either side is missing.
    """

    clusters = buf.graphemes()
    if opener == closer:
        span = _quote_span(clusters, cursor, opener)
    else:
        start = _find_open(clusters, cursor, opener, closer)
        end = _find_close(clusters, cursor, opener, closer) if start is not None else None
        span = (start, end) if start is not None and end is not None else None

    if span is None:
        return None
    start, end = span
    if scope is TextObjectScope.INNER:
        return start + 1, end
    return start, end + 1


__all__ = [
    "Range",
    "SURROUND_PAIRS",
    "WORD_OBJECTS",
    "surround_range",
    "word_object_range",
]
