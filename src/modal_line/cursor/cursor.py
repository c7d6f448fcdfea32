"""Cursor offset model operating on a ``TextBuffer``."""

from __future__ import annotations

from typing import List, Optional, Tuple

from modal_line.buffer import TextBuffer

from .position import CursorPosition, WordSpan, classify
from .rules import EditorRules


class Cursor:
    """Offset between clusters, plus the vi ``no_eol`` rest rule.

    Moves clamp to ``[0, len(buf)]``. The ``no_eol`` bound (cursor rests on
    the last cluster) is applied by ``pre_display_adjustment`` only, so a
    transient end-of-line position during a compound edit is allowed.
    """

    def __init__(self, rules: Optional[EditorRules] = None) -> None:
        self.offset = 0
        self.no_eol = False
        self.rules = rules or EditorRules()

    def words_and_position(
        self, buf: TextBuffer
    ) -> Tuple[List[WordSpan], CursorPosition]:
        words = self.rules.divide_words(buf)
        return words, classify(self.offset, words)

    # -- movement --------------------------------------------------------

    def move_to(self, buf: TextBuffer, position: int) -> None:
        self.offset = min(max(position, 0), len(buf))

    def move_left(self, count: int) -> None:
        self.offset -= min(max(count, 0), self.offset)

    def move_right(self, buf: TextBuffer, count: int) -> None:
        room = max(len(buf) - self.offset, 0)
        self.offset += min(max(count, 0), room)

    def move_to_start_of_line(self) -> None:
        self.offset = 0

    def move_to_end_of_line(self, buf: TextBuffer) -> None:
        self.offset = len(buf)

    def pre_display_adjustment(self, buf: TextBuffer) -> None:
        length = len(buf)
        if self.offset > length:
            self.offset = length
        if self.no_eol and self.offset != 0 and self.offset == length:
            self.offset -= 1

    def reset(self, buf: TextBuffer) -> None:
        self.offset = 0
        buf.truncate(0)

    # -- edits -----------------------------------------------------------

    def insert_str_after_cursor(self, buf: TextBuffer, text: str) -> None:
        self.offset += buf.insert(self.offset, text)

    def insert_around(self, buf: TextBuffer, right: bool, count: int) -> Optional[int]:
        """Paste the register; the cursor lands on the last pasted cluster."""

        delta = buf.paste(self.offset, count, right)
        if delta:
            self.move_to(buf, self.offset + (delta if right else delta - 1))
        return delta

    def delete_before_cursor(self, buf: TextBuffer, *, keep_register: bool = False) -> None:
        if self.offset > 0:
            buf.remove(self.offset - 1, self.offset, keep_register=keep_register)
            self.offset -= 1

    def delete_after_cursor(self, buf: TextBuffer) -> None:
        if self.offset < len(buf):
            buf.remove(self.offset, self.offset + 1)

    def delete_all_before_cursor(self, buf: TextBuffer) -> None:
        buf.remove(0, self.offset)
        self.offset = 0

    def delete_all_after_cursor(self, buf: TextBuffer) -> None:
        buf.truncate(self.offset)

    def delete_until(self, buf: TextBuffer, position: int) -> None:
        buf.remove(min(self.offset, position), max(self.offset, position))
        self.offset = min(self.offset, position)

    def delete_until_inclusive(self, buf: TextBuffer, position: int) -> None:
        buf.remove(min(self.offset, position), max(self.offset + 1, position + 1))
        self.offset = min(self.offset, position)

    def delete_until_silent(self, buf: TextBuffer, position: int) -> None:
        buf.remove_silent(min(self.offset, position), max(self.offset, position))
        self.offset = min(self.offset, position)

    def yank_until(self, buf: TextBuffer, position: int) -> None:
        buf.yank(min(self.offset, position), max(self.offset, position))

    def yank_until_inclusive(self, buf: TextBuffer, position: int) -> None:
        buf.yank(min(self.offset, position), max(self.offset + 1, position + 1))

    def yank_all_after_cursor(self, buf: TextBuffer) -> None:
        buf.yank(self.offset, len(buf))


__all__ = ["Cursor"]
