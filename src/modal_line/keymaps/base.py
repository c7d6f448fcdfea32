"""Keymap capability interface and the input signals it surfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from modal_line.runtime import telemetry

from .models import BACKSPACE, Key

if TYPE_CHECKING:
    from modal_line.editor import Completer, Editor


class InputInterrupted(RuntimeError):
    """Ctrl-c: the input loop should abandon the current line."""

    def __init__(self, message: str = "interrupted", *, key: Optional[Key] = None) -> None:
        super().__init__(message)
        self.key = key


class EndOfInput(EOFError):
    """Ctrl-d on an empty line."""

    def __init__(self, message: str = "end of input", *, key: Optional[Key] = None) -> None:
        super().__init__(message)
        self.key = key


class KeyMap:
    """Turns keys into editor operations.

    Subclasses implement ``handle_key_core``; ``handle_key`` layers the
    shared bindings (newline, completion, interrupt, end of input) on top.
    """

    name: str = "keymap"

    def init(self, editor: "Editor") -> None:
        del editor

    @property
    def mode_label(self) -> str:
        return self.name

    def handle_key_core(
        self, key: Key, editor: "Editor", now: Optional[float] = None
    ) -> None:  # pragma: no cover - abstract override
        raise NotImplementedError

    def handle_key(
        self,
        key: Key,
        editor: "Editor",
        completer: "Completer",
        now: Optional[float] = None,
    ) -> bool:
        """Process one key; returns True once the line is submitted."""

        if key.is_ctrl("h"):
            key = BACKSPACE

        if key.is_ctrl("c"):
            editor.handle_newline()
            telemetry.record_event("input.interrupt", data={"keymap": self.name})
            raise InputInterrupted("ctrl-c", key=key)
        if key.is_ctrl("d") and editor.current_buffer().is_empty():
            editor.handle_newline()
            telemetry.record_event("input.eof", data={"keymap": self.name})
            raise EndOfInput("ctrl-d", key=key)

        if key.is_char("\t"):
            editor.complete(completer)
            return False
        if key.is_char("\n"):
            return editor.handle_newline()

        self.handle_key_core(key, editor, now)
        editor.skip_completions_hint()
        return False


__all__ = ["EndOfInput", "InputInterrupted", "KeyMap"]
