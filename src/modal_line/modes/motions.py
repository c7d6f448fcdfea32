"""Word motions and character searches used by the vi keymap."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from modal_line.buffer import TextBuffer
from modal_line.keymaps.models import Key, KeyCode

if TYPE_CHECKING:
    from modal_line.editor import Editor


class WordMode(Enum):
    KEYWORD = "keyword"
    WHITESPACE = "whitespace"


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"

    def opposite(self) -> "Direction":
        return Direction.RIGHT if self is Direction.LEFT else Direction.LEFT


_MOVEMENT_CHARS = frozenset("hlwWbBeEg $tfTF;,^")
_MOVEMENT_CODES = frozenset(
    {KeyCode.LEFT, KeyCode.RIGHT, KeyCode.BACKSPACE, KeyCode.HOME, KeyCode.END}
)


def is_movement_key(key: Key) -> bool:
    """Keys that complete a pending operator as a motion."""

    if key.code is KeyCode.CHAR:
        return key.is_char() and key.char in _MOVEMENT_CHARS
    return key.code in _MOVEMENT_CODES


def is_vi_keyword(cluster: str) -> bool:
    head = cluster[:1]
    return head == "_" or head.isalnum()


def _is_space(cluster: str) -> bool:
    return cluster.isspace()


def _step(cursor: int, limit: int, direction: Direction) -> Optional[int]:
    if direction is Direction.RIGHT:
        return cursor + 1 if cursor < limit else None
    return cursor - 1 if cursor > 0 else None


def vi_move_word(
    editor: "Editor", mode: WordMode, direction: Direction, count: int
) -> None:
    """``w``/``W`` (right) and ``ge``/``gE`` (left) word motions."""

    buf = editor.current_buffer()
    cursor = editor.cursor
    limit = len(buf)

    for _ in range(count):
        start = cursor
        cluster = buf.grapheme_at(cursor)
        if cluster is None:
            break
        if _is_space(cluster):
            state = "space"
        elif is_vi_keyword(cluster):
            state = "keyword"
        else:
            state = "other"

        exhausted = False
        while True:
            moved = _step(cursor, limit, direction)
            if moved is None:
                break
            cursor = moved
            cluster = buf.grapheme_at(cursor)
            if cluster is None:
                exhausted = True
                break
            if state == "space":
                if not _is_space(cluster):
                    break
            elif _is_space(cluster):
                state = "space"
            elif mode is WordMode.KEYWORD and is_vi_keyword(cluster) != (
                state == "keyword"
            ):
                break
        if exhausted or cursor == start:
            break

    editor.move_cursor_to(cursor)


def vi_move_word_end(
    editor: "Editor", mode: WordMode, direction: Direction, count: int
) -> None:
    """``e``/``E`` (right) and ``b``/``B`` (left) word-end motions."""

    buf = editor.current_buffer()
    cursor = editor.cursor
    limit = len(buf)

    for _ in range(count):
        start = cursor
        state = "space"
        exhausted = False
        while True:
            moved = _step(cursor, limit, direction)
            if moved is None:
                break
            cursor = moved
            cluster = buf.grapheme_at(cursor)
            if cluster is None:
                exhausted = True
                break

            if state == "space":
                if _is_space(cluster):
                    continue
                if mode is WordMode.KEYWORD and is_vi_keyword(cluster):
                    state = "end_on_word"
                elif mode is WordMode.WHITESPACE:
                    state = "end_on_space"
                else:
                    state = "end_on_other"
                continue

            if (
                (state == "end_on_word" and not is_vi_keyword(cluster))
                or (state == "end_on_space" and _is_space(cluster))
                or (
                    state == "end_on_other"
                    and (_is_space(cluster) or is_vi_keyword(cluster))
                )
            ):
                back = _step(cursor, limit, direction.opposite())
                if back is not None:
                    cursor = back
                break
        if exhausted or cursor == start:
            break

    editor.move_cursor_to(cursor)


def find_char(buf: TextBuffer, start: int, target: str, count: int) -> Optional[int]:
    """Index of the ``count``-th ``target`` at or after ``start``."""

    seen = 0
    for index, cluster in enumerate(buf.graphemes()):
        if index < start or cluster != target:
            continue
        seen += 1
        if seen == count:
            return index
    return None


def find_char_rev(
    buf: TextBuffer, start: int, target: str, count: int
) -> Optional[int]:
    """Index of the ``count``-th ``target`` strictly before ``start``, scanning left."""

    clusters = buf.graphemes()
    seen = 0
    for index in range(min(start, len(clusters)) - 1, -1, -1):
        if clusters[index] != target:
            continue
        seen += 1
        if seen == count:
            return index
    return None


__all__ = [
    "Direction",
    "WordMode",
    "find_char",
    "find_char_rev",
    "is_movement_key",
    "is_vi_keyword",
    "vi_move_word",
    "vi_move_word_end",
]
