"""Vi keymap: a mode stack driving the editor facade.

Keys are dispatched on the mode at the top of the stack. Operators (``d``,
``c``, ``y``) push a pending mode that the next motion or text object pops,
applying the operator over the range the motion covered. Everything typed
since the last insert entry (or the operator keys) is kept in
``last_command`` so ``.`` can replay it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from modal_line.keymaps.base import KeyMap
from modal_line.keymaps.models import ESC, Key, KeyCode
from modal_line.runtime import telemetry
from modal_line.runtime.config import EscapeSequence

from .mode_stack import (
    G,
    INSERT,
    NORMAL,
    REPLACE,
    TILDE,
    CharMovement,
    Mode,
    ModeKind,
    ModeStack,
    MoveType,
    TextObjectScope,
)
from .motions import (
    Direction,
    WordMode,
    find_char,
    find_char_rev,
    is_movement_key,
    vi_move_word,
    vi_move_word_end,
)
from .text_objects import SURROUND_PAIRS, WORD_OBJECTS, surround_range, word_object_range

if TYPE_CHECKING:
    from modal_line.editor import Editor

COUNT_MAX = 2**32 - 1
DIGITS = "0123456789"


def _saturate(value: int) -> int:
    return min(value, COUNT_MAX)


class ViMode(KeyMap):
    name = "vi"

    def __init__(
        self,
        *,
        escape_sequence: Optional[EscapeSequence] = None,
        start_in_normal: bool = False,
    ) -> None:
        self.start_in_normal = start_in_normal
        self.escape_sequence = escape_sequence
        self.mode_stack = ModeStack() if start_in_normal else ModeStack.with_insert()
        self.current_command: List[Key] = []
        self.last_command: List[Key] = []
        self.current_insert: Optional[Key] = None
        self.last_insert: Optional[Key] = None if start_in_normal else Key.of("i")
        self.count = 0
        self.secondary_count = 0
        self.last_count = 0
        self.movement_reset = False
        self.last_char_movement: Optional[Tuple[str, CharMovement]] = None
        self._pending_escape: Optional[Tuple[str, float]] = None

    @property
    def mode(self) -> Mode:
        return self.mode_stack.mode

    @property
    def mode_label(self) -> str:
        return self.mode.label

    def init(self, editor: "Editor") -> None:
        if self.start_in_normal:
            editor.no_eol = True
            editor.pre_display_adjustment()
        else:
            editor.current_buffer().start_undo_group()

    # -- mode stack --------------------------------------------------------

    def _set_mode(self, mode: Mode, editor: "Editor") -> None:
        self._set_mode_preserve_last(mode, editor)
        if mode.kind is ModeKind.INSERT:
            self.last_count = 0
            self.last_command.clear()

    def _set_mode_preserve_last(self, mode: Mode, editor: "Editor") -> None:
        editor.no_eol = mode.kind is ModeKind.NORMAL
        self.movement_reset = mode.kind is not ModeKind.INSERT
        self.mode_stack.push(mode)
        if mode.kind in (ModeKind.INSERT, ModeKind.TILDE):
            editor.current_buffer().start_undo_group()
        telemetry.record_event("mode.change", level="debug", data={"mode": mode.label})

    def _sync_flags(self, editor: "Editor") -> None:
        editor.no_eol = self.mode.kind is ModeKind.NORMAL
        self.movement_reset = self.mode.kind is not ModeKind.INSERT

    def _pop_mode_after_movement(self, move_type: MoveType, editor: "Editor") -> None:
        original = self.mode_stack.pop()
        # operators sit under MoveToChar and G, pop them together
        last_mode = self.mode_stack.pop() if self.mode.is_operator else original
        self._sync_flags(editor)

        if last_mode.kind is ModeKind.DELETE:
            start = int(last_mode.position or 0)
            if move_type is MoveType.INCLUSIVE:
                editor.delete_until_inclusive(start)
            else:
                editor.delete_until(start)
            self._commit_operator()
        elif last_mode.kind is ModeKind.YANK:
            start = int(last_mode.position or 0)
            if move_type is MoveType.INCLUSIVE:
                editor.yank_until_inclusive(start)
            else:
                editor.yank_until(start)
            editor.move_cursor_to(min(start, editor.cursor))
            self.count = 0
            self.secondary_count = 0

        if original.kind is ModeKind.NORMAL:
            self.count = 0

    def _commit_operator(self) -> None:
        self.last_command, self.current_command = self.current_command, self.last_command
        self.last_insert = self.current_insert
        self.last_count = self.count
        self.count = 0
        self.secondary_count = 0

    def _pop_mode(self, editor: "Editor") -> None:
        last_mode = self.mode_stack.pop()
        self._sync_flags(editor)
        if last_mode.kind in (ModeKind.INSERT, ModeKind.TILDE):
            editor.current_buffer().end_undo_group()
        if last_mode.kind is ModeKind.TILDE:
            editor.display()
        telemetry.record_event(
            "mode.change", level="debug", data={"mode": self.mode.label}
        )

    def normal_mode_abort(self, editor: "Editor") -> None:
        """Drop every pending mode and return to Normal, buffer untouched."""

        open_groups = sum(
            1 for mode in self.mode_stack if mode.kind in (ModeKind.INSERT, ModeKind.TILDE)
        )
        for _ in range(open_groups):
            editor.current_buffer().end_undo_group()
        telemetry.record_event(
            "vi.abort", level="debug", data={"mode": self.mode.label}
        )
        self.mode_stack.clear()
        editor.no_eol = True
        self.count = 0

    # -- counts ------------------------------------------------------------

    def move_count(self) -> int:
        return self.count or 1

    def move_count_left(self, editor: "Editor") -> int:
        return min(editor.cursor, self.move_count())

    def move_count_right(self, editor: "Editor") -> int:
        remaining = max(len(editor.current_buffer()) - editor.cursor, 0)
        return min(remaining, self.move_count())

    def _combined_count(self) -> int:
        if self.secondary_count == 0:
            return self.count
        if self.count == 0:
            return self.secondary_count
        return _saturate(self.secondary_count * self.count)

    # -- dispatch ----------------------------------------------------------

    def handle_key_core(
        self, key: Key, editor: "Editor", now: Optional[float] = None
    ) -> None:
        editor.pre_display_adjustment()
        kind = self.mode.kind
        if kind is ModeKind.NORMAL:
            self._handle_key_normal(key, editor)
        elif kind is ModeKind.INSERT:
            self._handle_key_insert(key, editor, now)
        elif kind is ModeKind.REPLACE:
            self._handle_key_replace(key, editor)
        elif kind in (ModeKind.DELETE, ModeKind.YANK):
            self._handle_key_operator(key, editor)
        elif kind is ModeKind.TEXT_OBJECT:
            self._handle_key_text_object(key, editor)
        elif kind is ModeKind.MOVE_TO_CHAR:
            movement = self.mode.movement or CharMovement.RIGHT_AT
            self._handle_key_move_to_char(key, movement, editor)
        elif kind is ModeKind.G:
            self._handle_key_g(key, editor)
        else:
            # tilde is pushed and popped within one key
            self.normal_mode_abort(editor)

    def repeat(self, editor: "Editor") -> None:
        """Replay the last change: its insert key, its keys, then Esc."""

        self.last_count = self.count
        keys = self.last_command
        self.last_command = []

        if self.last_insert is not None:
            self.handle_key_core(self.last_insert, editor)
        for key in keys:
            self.handle_key_core(key, editor)
        if self.last_insert is not None:
            self.handle_key_core(ESC, editor)

        self.last_command = keys

    def _handle_key_common(self, key: Key, editor: "Editor") -> None:
        code = key.code
        if key.is_ctrl("l"):
            editor.clear()
        elif code is KeyCode.LEFT:
            editor.move_cursor_left(1)
        elif code is KeyCode.RIGHT:
            editor.move_cursor_right(1)
        elif code is KeyCode.UP:
            editor.move_up()
        elif code is KeyCode.DOWN:
            editor.move_down()
        elif code is KeyCode.HOME:
            editor.move_cursor_to_start_of_line()
        elif code is KeyCode.END:
            editor.move_cursor_to_end_of_line()
        elif code is KeyCode.BACKSPACE:
            editor.delete_before_cursor()
        elif code is KeyCode.DELETE:
            editor.delete_after_cursor()

    # -- insert ------------------------------------------------------------

    def _leave_insert(self, editor: "Editor") -> None:
        if self.count > 0:
            self.last_count = self.count
            for _ in range(1, self.count):
                keys = self.last_command
                self.last_command = []
                for key in keys:
                    self.handle_key_core(key, editor)
            self.count = 0
        editor.move_cursor_left(1)
        self._pop_mode(editor)

    def _restart_insert_group(self, editor: "Editor") -> None:
        if self.movement_reset:
            buf = editor.current_buffer()
            buf.end_undo_group()
            buf.start_undo_group()
            self.last_command.clear()
            self.movement_reset = False
            self.last_insert = Key.of("i")

    def _escape_alias(self, key: Key, editor: "Editor", now: Optional[float]) -> bool:
        sequence = self.escape_sequence
        pending = self._pending_escape
        self._pending_escape = None
        if sequence is None or now is None or not key.is_char():
            return False

        if (
            pending is not None
            and key.char == sequence.second
            and sequence.within(now - pending[1])
            and editor.current_buffer().grapheme_before(editor.cursor) == sequence.first
        ):
            editor.delete_before_cursor(keep_register=True)
            if self.last_command and self.last_command[-1].is_char(sequence.first):
                self.last_command.pop()
            self._leave_insert(editor)
            return True

        if key.char == sequence.first:
            self._pending_escape = (sequence.first, now)
        return False

    def _handle_key_insert(
        self, key: Key, editor: "Editor", now: Optional[float]
    ) -> None:
        if key.code is KeyCode.ESC or key.is_ctrl("["):
            self._pending_escape = None
            self._leave_insert(editor)
            return
        if self._escape_alias(key, editor, now):
            return

        code = key.code
        if key.is_char():
            self._restart_insert_group(editor)
            self.last_command.append(key)
            editor.insert_after_cursor(str(key.char))
        elif code in (KeyCode.BACKSPACE, KeyCode.DELETE):
            self._restart_insert_group(editor)
            self.last_command.append(key)
            self._handle_key_common(key, editor)
        elif code in (KeyCode.LEFT, KeyCode.RIGHT, KeyCode.HOME, KeyCode.END):
            self.count = 0
            self.movement_reset = True
            self._handle_key_common(key, editor)
        elif code in (KeyCode.UP, KeyCode.DOWN):
            self.count = 0
            self.movement_reset = True
            editor.current_buffer().end_undo_group()
            if code is KeyCode.UP:
                editor.move_up()
            else:
                editor.move_down()
            editor.current_buffer().start_undo_group()
        else:
            self._handle_key_common(key, editor)

    # -- normal ------------------------------------------------------------

    def _record_simple_command(self, key: Key) -> None:
        self.last_insert = None
        self.last_command = [key]
        self.last_count = self.count

    def _handle_key_normal(self, key: Key, editor: "Editor") -> None:
        char = key.char if key.is_char() else None
        code = key.code

        if code is KeyCode.ESC:
            self.count = 0
        elif char in ("i", "a", "A", "I"):
            self.last_insert = key
            self._set_mode(INSERT, editor)
            if char == "a":
                editor.move_cursor_right(1)
            elif char == "A":
                editor.move_cursor_to_end_of_line()
            elif char == "I":
                editor.move_cursor_to_start_of_line()
        elif char == "s":
            self.last_insert = key
            self._set_mode(INSERT, editor)
            editor.delete_until(editor.cursor + self.move_count_right(editor))
            self.last_count = self.count
            self.count = 0
        elif char == "r":
            self._set_mode(REPLACE, editor)
        elif char in ("d", "c", "y"):
            self.current_command.clear()
            if char == "d":
                self.current_insert = None
                self.current_command.append(key)
            elif char == "c":
                self.current_insert = key
                self._set_mode(INSERT, editor)
            start = editor.cursor
            operator = Mode.yank(start) if char == "y" else Mode.delete(start)
            self._set_mode(operator, editor)
            self.secondary_count = self.count
            self.count = 0
        elif char in ("D", "C"):
            self.last_insert = None
            self.last_command = [key]
            self.count = 0
            self.last_count = 0
            if char == "C":
                self._set_mode_preserve_last(INSERT, editor)
            editor.delete_all_after_cursor()
        elif char == ".":
            if self.count == 0:
                self.count = self.last_count or 1
            self.repeat(editor)
        elif char == "h" or code in (KeyCode.LEFT, KeyCode.BACKSPACE):
            editor.move_cursor_left(self.move_count_left(editor))
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char in ("l", " ") or code is KeyCode.RIGHT:
            editor.move_cursor_right(self.move_count_right(editor))
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "k" or code is KeyCode.UP:
            editor.move_up()
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "j" or code is KeyCode.DOWN:
            editor.move_down()
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "t":
            self._set_mode(Mode.move_to_char(CharMovement.RIGHT_UNTIL), editor)
        elif char == "T":
            self._set_mode(Mode.move_to_char(CharMovement.LEFT_UNTIL), editor)
        elif char == "f":
            self._set_mode(Mode.move_to_char(CharMovement.RIGHT_AT), editor)
        elif char == "F":
            self._set_mode(Mode.move_to_char(CharMovement.LEFT_AT), editor)
        elif char == ";":
            self._handle_key_move_to_char(key, CharMovement.REPEAT, editor)
        elif char == ",":
            self._handle_key_move_to_char(key, CharMovement.REVERSE_REPEAT, editor)
        elif char in ("w", "W"):
            mode = WordMode.KEYWORD if char == "w" else WordMode.WHITESPACE
            vi_move_word(editor, mode, Direction.RIGHT, self.move_count())
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char in ("e", "E"):
            mode = WordMode.KEYWORD if char == "e" else WordMode.WHITESPACE
            vi_move_word_end(editor, mode, Direction.RIGHT, self.move_count())
            self._pop_mode_after_movement(MoveType.INCLUSIVE, editor)
        elif char in ("b", "B"):
            mode = WordMode.KEYWORD if char == "b" else WordMode.WHITESPACE
            vi_move_word_end(editor, mode, Direction.LEFT, self.move_count())
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "g":
            self._set_mode(G, editor)
        elif (char == "0" and self.count == 0) or code is KeyCode.HOME:
            editor.move_cursor_to_start_of_line()
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char is not None and char in DIGITS:
            self.count = _saturate(self.count * 10 + int(char))
        elif char == "^":
            clusters = editor.current_buffer().graphemes()
            first = next(
                (i for i, cluster in enumerate(clusters) if not cluster.isspace()),
                len(clusters),
            )
            editor.move_cursor_to(first)
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "$" or code is KeyCode.END:
            editor.move_cursor_to_end_of_line()
            self._pop_mode_after_movement(MoveType.EXCLUSIVE, editor)
        elif char == "x" or code is KeyCode.DELETE:
            self._record_simple_command(key)
            editor.delete_until(editor.cursor + self.move_count_right(editor))
            self.count = 0
        elif char == "~":
            self._record_simple_command(key)
            self._set_mode(TILDE, editor)
            for _ in range(self.move_count_right(editor)):
                editor.flip_case_at_cursor()
            self._pop_mode(editor)
        elif char in ("p", "P"):
            self._record_simple_command(key)
            editor.paste(right=char == "p", count=self.move_count())
            self.count = 0
        elif char == "u":
            count = self.move_count()
            self.count = 0
            for _ in range(count):
                if not editor.undo():
                    break
        elif key.is_ctrl("r"):
            count = self.move_count()
            self.count = 0
            for _ in range(count):
                if not editor.redo():
                    break
        else:
            self._handle_key_common(key, editor)

    # -- pending modes -------------------------------------------------------

    def _handle_key_replace(self, key: Key, editor: "Editor") -> None:
        if key.is_char():
            replacement = str(key.char)
            if self.move_count_right(editor) == self.move_count():
                self.last_insert = None
                self.last_command = [Key.of("r"), key]
                self.last_count = self.count

                buf = editor.current_buffer()
                buf.start_undo_group()
                for _ in range(self.move_count_right(editor)):
                    editor.delete_after_cursor()
                    editor.insert_after_cursor(replacement)
                buf.end_undo_group()
                editor.move_cursor_left(1)
            self._pop_mode(editor)
        else:
            self.normal_mode_abort(editor)
        self.count = 0

    def _is_linewise(self, key: Key) -> bool:
        if self.mode.kind is ModeKind.YANK:
            return key.is_char("y")
        if self.current_insert is None:
            return key.is_char("d")
        return key.is_char("c") and self.current_insert.is_char("c")

    def _handle_key_operator(self, key: Key, editor: "Editor") -> None:
        if (
            is_movement_key(key)
            or key.is_char("^")
            or (key.is_char("0") and self.count == 0)
        ):
            self.count = self._combined_count()
            self.current_command.append(key)
            self._handle_key_normal(key, editor)
        elif key.is_char() and key.char in DIGITS:
            self._handle_key_normal(key, editor)
        elif key.is_char("i") or key.is_char("a"):
            scope = TextObjectScope.INNER if key.is_char("i") else TextObjectScope.OUTER
            self.count = self._combined_count()
            self.current_command.append(key)
            self._set_mode(Mode.text_object(scope), editor)
        elif self._is_linewise(key):
            self.current_command.append(key)
            self.count = 0
            self.secondary_count = 0
            if self.mode.kind is ModeKind.YANK:
                buf = editor.current_buffer()
                buf.yank(0, len(buf))
            else:
                editor.move_cursor_to_start_of_line()
                editor.delete_all_after_cursor()
            self._pop_mode(editor)
        else:
            self.normal_mode_abort(editor)

    def _handle_key_text_object(self, key: Key, editor: "Editor") -> None:
        scope = self.mode.scope or TextObjectScope.INNER
        char = key.char if key.is_char() else None
        buf = editor.current_buffer()
        span = None
        if char in WORD_OBJECTS:
            words, _ = editor.words_and_position()
            span = word_object_range(buf, editor.cursor, words, scope, self.move_count())
        elif char is not None and char in SURROUND_PAIRS:
            opener, closer = SURROUND_PAIRS[char]
            span = surround_range(buf, editor.cursor, opener, closer, scope)

        if span is None:
            self.normal_mode_abort(editor)
            return

        self.current_command.append(key)
        self.mode_stack.pop()
        operator = self.mode_stack.pop()
        self._sync_flags(editor)

        start, end = span
        if operator.kind is ModeKind.DELETE:
            editor.move_cursor_to(start)
            editor.delete_until(end)
            self._commit_operator()
        else:
            buf.yank(start, end)
            editor.move_cursor_to(start)
            self.count = 0
            self.secondary_count = 0

    def _handle_key_move_to_char(
        self, key: Key, movement: CharMovement, editor: "Editor"
    ) -> None:
        count = self.move_count()
        self.count = 0

        if movement in (CharMovement.REPEAT, CharMovement.REVERSE_REPEAT):
            if self.last_char_movement is None:
                self.normal_mode_abort(editor)
                return
            target, last = self.last_char_movement
            movement = last if movement is CharMovement.REPEAT else last.reversed()
        elif key.is_char():
            target = str(key.char)
            self.last_char_movement = (target, movement)
            self.current_command.append(key)
        else:
            self.normal_mode_abort(editor)
            return

        buf = editor.current_buffer()
        cursor = editor.cursor
        if movement in (CharMovement.RIGHT_UNTIL, CharMovement.RIGHT_AT):
            move_type = MoveType.INCLUSIVE
            found = find_char(buf, cursor + 1, target, count)
            offset = -1 if movement is CharMovement.RIGHT_UNTIL else 0
        else:
            move_type = MoveType.EXCLUSIVE
            found = find_char_rev(buf, cursor, target, count)
            offset = 1 if movement is CharMovement.LEFT_UNTIL else 0

        if found is None:
            self.normal_mode_abort(editor)
            return
        editor.move_cursor_to(found + offset)
        self._pop_mode_after_movement(move_type, editor)

    def _handle_key_g(self, key: Key, editor: "Editor") -> None:
        count = self.move_count()
        self.current_command.append(key)

        if key.is_char("e") or key.is_char("E"):
            mode = WordMode.KEYWORD if key.is_char("e") else WordMode.WHITESPACE
            vi_move_word(editor, mode, Direction.LEFT, count)
            self._pop_mode_after_movement(MoveType.INCLUSIVE, editor)
        else:
            self.normal_mode_abort(editor)
        self.count = 0


__all__ = ["COUNT_MAX", "ViMode"]
