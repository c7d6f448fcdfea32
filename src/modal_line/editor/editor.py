"""Editor facade: the operations keymaps perform on the active buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from modal_line.buffer import TextBuffer
from modal_line.cursor import (
    Cursor,
    CursorPosition,
    EditorRules,
    InSpace,
    InWord,
    OnWordLeftEdge,
    OnWordRightEdge,
    WordSpan,
)
from modal_line.runtime import telemetry

from .completion import Completer, longest_common_prefix
from .history import History, HistorySource
from .render import LineSnapshot, NullRenderer, Renderer


@dataclass(frozen=True, slots=True)
class Fresh:
    """Editing the new line."""


@dataclass(frozen=True, slots=True)
class HistoryEdit:
    """Editing a copy of history entry ``index``; the copy is made on first use."""

    index: int
    scratch: Optional[TextBuffer] = None


Location = Union[Fresh, HistoryEdit]
CompletionHint = Tuple[List[str], Optional[int]]


class Editor:
    """Owns the fresh buffer, the cursor, and the history position.

    Every operation ends by requesting a redraw; the display adjustment
    that keeps a Normal-mode cursor on the last cluster runs there.
    """

    def __init__(
        self,
        history: Optional[HistorySource] = None,
        renderer: Optional[Renderer] = None,
        rules: Optional[EditorRules] = None,
        initial: str = "",
    ) -> None:
        self.history: HistorySource = history if history is not None else History()
        self.renderer: Renderer = renderer or NullRenderer()
        self.fresh = TextBuffer.from_text(initial)
        self.location: Location = Fresh()
        self._cursor = Cursor(rules)
        self._subset: List[int] = []
        self._subset_loc: Optional[int] = None
        self._completion_hint: Optional[CompletionHint] = None
        self._clear_screen = False
        if not self.fresh.is_empty():
            self._cursor.move_to_end_of_line(self.fresh)

    # -- state -----------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self._cursor.offset

    @property
    def no_eol(self) -> bool:
        return self._cursor.no_eol

    @no_eol.setter
    def no_eol(self, value: bool) -> None:
        self._cursor.no_eol = value

    @property
    def rules(self) -> EditorRules:
        return self._cursor.rules

    @property
    def history_location(self) -> Optional[int]:
        if isinstance(self.location, HistoryEdit):
            return self.location.index
        return None

    @property
    def completion_hint(self) -> Optional[CompletionHint]:
        return self._completion_hint

    @property
    def line(self) -> str:
        return str(self.current_buffer())

    def __str__(self) -> str:
        return self.line

    def current_buffer(self) -> TextBuffer:
        location = self.location
        if isinstance(location, HistoryEdit):
            if location.scratch is None:
                entry = self.history.get(location.index) or ""
                location = HistoryEdit(location.index, TextBuffer.from_text(entry))
                self.location = location
            return location.scratch
        return self.fresh

    def words_and_position(self) -> Tuple[List[WordSpan], CursorPosition]:
        return self._cursor.words_and_position(self.current_buffer())

    def pre_display_adjustment(self) -> None:
        self._cursor.pre_display_adjustment(self.current_buffer())

    def snapshot(self) -> LineSnapshot:
        hint = self._completion_hint
        return LineSnapshot(
            text=self.line,
            cursor=self.cursor,
            completions=tuple(hint[0]) if hint else (),
            highlighted=hint[1] if hint else None,
            clear_screen=self._clear_screen,
            history_index=self.history_location,
        )

    def display(self) -> None:
        self.pre_display_adjustment()
        snapshot = self.snapshot()
        self._clear_screen = False
        self.renderer.request_redraw(snapshot)

    def clear(self) -> None:
        self._clear_screen = True
        self.display()

    # -- inserting -------------------------------------------------------

    def insert_after_cursor(self, char: str) -> None:
        self.insert_str_after_cursor(char)

    def insert_str_after_cursor(self, text: str) -> None:
        self._cursor.insert_str_after_cursor(self.current_buffer(), text)
        self.display()

    # -- deleting --------------------------------------------------------

    def delete_before_cursor(self, *, keep_register: bool = False) -> None:
        self._cursor.delete_before_cursor(
            self.current_buffer(), keep_register=keep_register
        )
        self.display()

    def delete_after_cursor(self) -> None:
        self._cursor.delete_after_cursor(self.current_buffer())
        self.display()

    def delete_all_before_cursor(self) -> None:
        self._cursor.delete_all_before_cursor(self.current_buffer())
        self.display()

    def delete_all_after_cursor(self) -> None:
        self._cursor.delete_all_after_cursor(self.current_buffer())
        self.display()

    def delete_until(self, position: int) -> None:
        self._cursor.delete_until(self.current_buffer(), position)
        self.display()

    def delete_until_inclusive(self, position: int) -> None:
        self._cursor.delete_until_inclusive(self.current_buffer(), position)
        self.display()

    def delete_until_silent(self, position: int) -> None:
        """Delete toward ``position`` without recording an undo action."""

        self._cursor.delete_until_silent(self.current_buffer(), position)
        self.display()

    def get_word_before_cursor(self, ignore_space: bool = False) -> Optional[WordSpan]:
        words, position = self.words_and_position()
        if isinstance(position, (InWord, OnWordRightEdge)):
            return words[position.index]
        if isinstance(position, InSpace):
            if position.left is not None and ignore_space:
                return words[position.left]
            return None
        if isinstance(position, OnWordLeftEdge) and ignore_space and position.index > 0:
            return words[position.index - 1]
        return None

    def delete_word_before_cursor(self, ignore_space: bool = False) -> None:
        span = self.get_word_before_cursor(ignore_space)
        if span is not None:
            self._cursor.delete_until(self.current_buffer(), span[0])
        self.display()

    # -- yanking and pasting ---------------------------------------------

    def yank_until(self, position: int) -> None:
        self._cursor.yank_until(self.current_buffer(), position)

    def yank_until_inclusive(self, position: int) -> None:
        self._cursor.yank_until_inclusive(self.current_buffer(), position)

    def yank_all_after_cursor(self) -> None:
        self._cursor.yank_all_after_cursor(self.current_buffer())

    def paste(self, right: bool, count: int = 1) -> bool:
        """Paste the register around the cursor; False when it is empty."""

        pasted = self._cursor.insert_around(self.current_buffer(), right, count)
        self.display()
        return pasted is not None

    def flip_case_at_cursor(self) -> bool:
        """Swap the case of the cluster under the cursor and step past it.

        Caseless clusters are skipped over. Returns True when text changed.
        """

        cluster = self.current_buffer().grapheme_at(self.cursor)
        if cluster is None:
            return False
        if cluster.islower():
            flipped = cluster.upper()
        elif cluster.isupper():
            flipped = cluster.lower()
        else:
            self.move_cursor_right(1)
            return False
        buf = self.current_buffer()
        self._cursor.delete_after_cursor(buf)
        self._cursor.insert_str_after_cursor(buf, flipped)
        self.display()
        return True

    # -- moving ----------------------------------------------------------

    def move_cursor_left(self, count: int) -> None:
        self._cursor.move_left(count)
        self.display()

    def move_cursor_right(self, count: int) -> None:
        self._cursor.move_right(self.current_buffer(), count)
        self.display()

    def move_cursor_to(self, position: int) -> None:
        self._cursor.move_to(self.current_buffer(), position)
        self.display()

    def move_cursor_to_start_of_line(self) -> None:
        self._cursor.move_to_start_of_line()
        self.display()

    def move_cursor_to_end_of_line(self) -> None:
        self._cursor.move_to_end_of_line(self.current_buffer())
        self.display()

    # -- undo ------------------------------------------------------------

    def undo(self) -> bool:
        return self._after_history_op(self.current_buffer().undo() is not None)

    def redo(self) -> bool:
        return self._after_history_op(self.current_buffer().redo() is not None)

    def revert(self) -> bool:
        return self._after_history_op(self.current_buffer().revert())

    def _after_history_op(self, did: bool) -> bool:
        if did:
            self.move_cursor_to_end_of_line()
        else:
            self.display()
        return did

    # -- history ---------------------------------------------------------

    def _enter_history(self, index: int) -> None:
        self.location = HistoryEdit(index)

    def _leave_history(self) -> None:
        self.location = Fresh()
        self._subset_loc = None
        self._subset = []

    def move_up(self) -> None:
        """Step to an older entry.

        With text on the fresh line only entries matching it are visited.
        Any edits made to the previous history copy are discarded.
        """

        if not self.fresh.is_empty():
            if self._subset_loc is None:
                self._subset = list(self.history.search_subset(str(self.fresh)))
                if self._subset:
                    self._subset_loc = len(self._subset) - 1
                    self._enter_history(self._subset[-1])
            elif self._subset_loc > 0:
                self._subset_loc -= 1
                self._enter_history(self._subset[self._subset_loc])
        else:
            index = self.history_location
            if index is None:
                if len(self.history):
                    self._enter_history(len(self.history) - 1)
            elif index > 0:
                self._enter_history(index - 1)

        if isinstance(self.location, HistoryEdit):
            self._enter_history(self.location.index)
        self.move_cursor_to_end_of_line()

    def move_down(self) -> None:
        """Step to a newer entry, back to the fresh line past the newest."""

        if not self.fresh.is_empty():
            if self._subset_loc is not None:
                if self._subset_loc < len(self._subset) - 1:
                    self._subset_loc += 1
                    self._enter_history(self._subset[self._subset_loc])
                else:
                    self._leave_history()
        else:
            index = self.history_location
            if index is not None and index < len(self.history) - 1:
                self._enter_history(index + 1)
            else:
                self._leave_history()

        if isinstance(self.location, HistoryEdit):
            self._enter_history(self.location.index)
        self.move_cursor_to_end_of_line()

    def move_to_start_of_history(self) -> None:
        if not len(self.history):
            self._leave_history()
            self.display()
            return
        self._enter_history(0)
        self.move_cursor_to_end_of_line()

    def move_to_end_of_history(self) -> None:
        if isinstance(self.location, HistoryEdit):
            self._leave_history()
            self.move_cursor_to_end_of_line()
        else:
            self.display()

    # -- completion ------------------------------------------------------

    def skip_completions_hint(self) -> None:
        self._completion_hint = None

    def complete(self, completer: Completer) -> None:
        """Complete the word before the cursor.

        A single candidate replaces the word, several extend it to their
        common prefix, otherwise the list is shown and further calls cycle
        through it.
        """

        hint = self._completion_hint
        if hint is not None:
            candidates, highlighted = hint
            self._completion_hint = None
            chosen = 0 if highlighted is None else (highlighted + 1) % len(candidates)
            if highlighted is not None and self.line == candidates[highlighted]:
                self._cursor.reset(self.current_buffer())
            else:
                self.delete_word_before_cursor(False)
            self.insert_str_after_cursor(candidates[chosen])
            self._completion_hint = (candidates, chosen)
            self.display()
            return

        span = self.get_word_before_cursor(False)
        word = self.current_buffer().range(*span) if span else ""
        candidates = sorted(set(completer.completions(word)))

        if not candidates:
            self._completion_hint = None
            return
        if len(candidates) == 1:
            self.delete_word_before_cursor(False)
            self.insert_str_after_cursor(candidates[0])
            return

        prefix = longest_common_prefix(candidates)
        if prefix is not None and len(prefix) > len(word) and prefix.startswith(word):
            self.delete_word_before_cursor(False)
            self.insert_str_after_cursor(prefix)
            return

        self._completion_hint = (candidates, None)
        telemetry.record_event(
            "editor.completions", level="debug", data={"count": len(candidates)}
        )
        self.display()

    # -- newline ---------------------------------------------------------

    def handle_newline(self) -> bool:
        """Returns True when the line is complete.

        A visible completion list is dismissed first; a line the rules do
        not accept gets a continuation newline instead.
        """

        if self._completion_hint is not None:
            self._completion_hint = None
            self.display()
            return False

        buf = self.current_buffer()
        if not self.rules.evaluate_on_newline(buf):
            buf.push("\n")
            self.move_cursor_to_end_of_line()
            return False

        self.move_cursor_to_end_of_line()
        return True


__all__ = ["CompletionHint", "Editor", "Fresh", "HistoryEdit", "Location"]
