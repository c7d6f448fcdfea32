"""Grapheme-aware line buffer with grouped undo/redo and a register."""

from __future__ import annotations

from typing import List, Optional, Tuple

import grapheme

from modal_line.runtime import telemetry

from .actions import Action, EndGroup, Insert, Noop, Remove, StartGroup
from .registers import RegisterValue


class TextBuffer:
    """Line contents addressed by grapheme cluster index.

    Every recorded mutation is appended to the undo log as an ``Action`` and
    invalidates the redo log. Positions handed to the public methods are
    clamped into range; nothing here raises on a bad index.
    """

    def __init__(self, text: str = "") -> None:
        self._data = text
        self._graphemes: List[str] = []
        self._offsets: List[int] = []
        self._actions: List[Action] = []
        self._undone: List[Action] = []
        self.register: Optional[RegisterValue] = None
        self._recompute()

    @classmethod
    def from_text(cls, text: str) -> "TextBuffer":
        return cls(text)

    # -- queries ---------------------------------------------------------

    @property
    def text(self) -> str:
        """Raw contents, including any continuation backslash-newlines."""

        return self._data

    @property
    def undo_log(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def redo_log(self) -> Tuple[Action, ...]:
        return tuple(self._undone)

    def __len__(self) -> int:
        return len(self._graphemes)

    def __str__(self) -> str:
        return self._data.replace("\\\n", "")

    def __repr__(self) -> str:
        return f"TextBuffer({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TextBuffer):
            return NotImplemented
        return self._data == other._data

    def is_empty(self) -> bool:
        return not self._data

    def graphemes(self) -> List[str]:
        return list(self._graphemes)

    def grapheme_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._graphemes):
            return self._graphemes[index]
        return None

    def grapheme_before(self, index: int) -> Optional[str]:
        return self.grapheme_at(index - 1) if index > 0 else None

    def range(self, start: int, end: int) -> str:
        start, end = self._span(start, end)
        return "".join(self._graphemes[start:end])

    def first(self) -> Optional[str]:
        return self.grapheme_at(0)

    def last(self) -> Optional[str]:
        return self.grapheme_at(len(self._graphemes) - 1)

    # -- undo groups -----------------------------------------------------

    def start_undo_group(self) -> None:
        self._actions.append(StartGroup())

    def end_undo_group(self) -> None:
        self._actions.append(EndGroup())

    def clear_actions(self) -> None:
        self._actions.clear()
        self._undone.clear()

    def undo(self) -> Optional[int]:
        """Undo the most recent group (or lone action).

        Nested groups unwind as part of their parent; empty groups are
        skipped. Returns the last affected position, ``None`` when nothing
        was undone.
        """

        position: Optional[int] = None
        nest = 0
        count = 0
        while self._actions:
            action = self._actions.pop()
            self._undone.append(action)
            moved = action.undo(self)
            if moved is not None:
                position = moved
            if isinstance(action, EndGroup):
                nest += 1
                count = 0
            elif isinstance(action, StartGroup):
                nest -= 1
            else:
                count += 1
            if nest == 0 and count > 0:
                break
        telemetry.record_event(
            "buffer.undo", level="debug", data={"position": position}
        )
        return position

    def redo(self) -> Optional[int]:
        position: Optional[int] = None
        nest = 0
        count = 0
        while self._undone:
            action = self._undone.pop()
            moved = action.do_on(self)
            if moved is not None:
                position = moved
            self._actions.append(action)
            if isinstance(action, StartGroup):
                nest += 1
                count = 0
            elif isinstance(action, EndGroup):
                nest -= 1
            else:
                count += 1
            if nest == 0 and count > 0:
                break
        telemetry.record_event(
            "buffer.redo", level="debug", data={"position": position}
        )
        return position

    def revert(self) -> bool:
        """Undo everything. Returns False when the undo log was empty."""

        if not self._actions:
            return False
        while self.undo() is not None:
            pass
        return True

    # -- recorded mutations ---------------------------------------------

    def insert(self, start: int, text: str) -> int:
        """Insert ``text`` at ``start`` and return how many clusters were added."""

        if not text:
            return 0
        before = len(self)
        self._apply(Insert(self._clamp(start), text))
        return len(self) - before

    def remove(self, start: int, end: int, *, keep_register: bool = False) -> int:
        """Remove ``[start, end)`` into the register; returns the count removed.

        With ``keep_register`` the removal is still logged but the register
        keeps its previous value.
        """

        start, end = self._span(start, end)
        before = len(self)
        removed = self.remove_raw(start, end)
        if removed:
            if not keep_register:
                self.register = RegisterValue(start, removed)
            self._push(Remove(start, removed))
        else:
            self._push(Noop(start))
        return before - len(self)

    def truncate(self, length: int) -> int:
        return self.remove(length, len(self))

    def yank(self, start: int, end: int) -> None:
        start, end = self._span(start, end)
        self.register = RegisterValue(start, self.range(start, end))

    def paste(self, index: int, count: int = 1, right: bool = False) -> Optional[int]:
        """Insert the register ``count`` times next to ``index``.

        With ``right`` the text lands after the cluster at ``index`` (when
        there is one). Returns the number of clusters inserted, or ``None``
        when the register is empty.
        """

        if self.register is None or not self.register.text:
            return None
        index = self._clamp(index)
        if right and len(self) > index:
            index += 1
        before = len(self)
        self._apply(Insert(index, self.register.repeated(count)))
        return len(self) - before

    # -- unrecorded mutations -------------------------------------------

    def remove_silent(self, start: int, end: int) -> None:
        """Remove ``[start, end)`` without logging or touching the register."""

        start, end = self._span(start, end)
        self.remove_raw(start, end)

    def push(self, text: str) -> None:
        self._data += text
        self._recompute()

    def insert_raw(self, start: int, text: str) -> None:
        offset = self._offset(self._clamp(start))
        self._data = self._data[:offset] + text + self._data[offset:]
        self._recompute()

    def remove_raw(self, start: int, end: int) -> str:
        start, end = self._span(start, end)
        if start == end:
            return ""
        begin, finish = self._offset(start), self._offset(end)
        removed = self._data[begin:finish]
        self._data = self._data[:begin] + self._data[finish:]
        self._recompute()
        return removed

    # -- internals -------------------------------------------------------

    def _apply(self, action: Action) -> None:
        action.do_on(self)
        self._push(action)

    def _push(self, action: Action) -> None:
        self._actions.append(action)
        self._undone.clear()

    def _clamp(self, position: int) -> int:
        return min(max(position, 0), len(self._graphemes))

    def _span(self, start: int, end: int) -> Tuple[int, int]:
        start, end = self._clamp(start), self._clamp(end)
        return (start, end) if start <= end else (end, start)

    def _offset(self, index: int) -> int:
        if index >= len(self._offsets):
            return len(self._data)
        return self._offsets[index]

    def _recompute(self) -> None:
        self._graphemes = list(grapheme.graphemes(self._data))
        offsets = []
        running = 0
        for cluster in self._graphemes:
            offsets.append(running)
            running += len(cluster)
        self._offsets = offsets


__all__ = ["TextBuffer"]
