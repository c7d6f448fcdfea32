"""Textual-facing adapter that feeds a LineSession and relays redraws."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import grapheme

from modal_line.cursor import EditorRules
from modal_line.editor import Completer, History, LineSnapshot
from modal_line.keymaps import (
    BACKSPACE,
    DELETE,
    DOWN,
    END,
    ESC,
    HOME,
    LEFT,
    RIGHT,
    UP,
    EndOfInput,
    InputInterrupted,
    Key,
)
from modal_line.runtime import EngineConfig
from modal_line.session import LineSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_line: Callable[[LineSnapshot], None]
    update_status: Callable[[str], None] = _noop
    submit_line: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


_NAMED_KEYS: Dict[str, Key] = {
    "escape": ESC,
    "enter": Key.of("\n"),
    "return": Key.of("\n"),
    "tab": Key.of("\t"),
    "backspace": BACKSPACE,
    "delete": DELETE,
    "left": LEFT,
    "right": RIGHT,
    "up": UP,
    "down": DOWN,
    "home": HOME,
    "end": END,
    "space": Key.of(" "),
}


def normalize_textual_key(key: str, character: Optional[str] = None) -> Optional[Key]:
    """Map a Textual key name (and its character, if any) to a ``Key``.

    Returns ``None`` for keys the line editor has no use for.
    """

    name = key.lower()
    if name in _NAMED_KEYS:
        return _NAMED_KEYS[name]
    if name.startswith("ctrl+"):
        rest = name[len("ctrl+") :]
        if rest == "left_square_bracket":
            return Key.ctrl("[")
        if grapheme.length(rest) == 1:
            return Key.ctrl(rest)
        return None
    if name.startswith("alt+"):
        rest = key[len("alt+") :]
        return Key.alt(rest) if grapheme.length(rest) == 1 else None
    if character and grapheme.length(character) == 1 and character.isprintable():
        return Key.of(character)
    return None


class TextualLineAdapter:
    """Owns a ``LineSession`` and acts as its renderer.

    Every redraw request is forwarded to ``hooks.update_line``; the mode label
    goes to ``hooks.update_status`` after each key.
    """

    def __init__(
        self,
        hooks: TextualUIHooks,
        config: Optional[EngineConfig] = None,
        *,
        history: Optional[History] = None,
        completer: Optional[Completer] = None,
        rules: Optional[EditorRules] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.hooks = hooks
        options = {} if clock is None else {"clock": clock}
        self.session = LineSession(
            config,
            history=history,
            renderer=self,
            completer=completer,
            rules=rules,
            **options,
        )
        self.hooks.update_status(self.session.mode_label)

    def request_redraw(self, snapshot: LineSnapshot) -> None:
        self.hooks.update_line(snapshot)

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> Optional[str]:
        """Dispatch one Textual key; returns the line if it was submitted.

        Ctrl-c abandons the line and reports it on the status hook.
        ``EndOfInput`` propagates so the host can shut down.
        """

        normalized = normalize_textual_key(key, character)
        if normalized is None:
            self._log_state("ignored ->", key=key)
            return None

        self._log_state("key ->", key=normalized.token)
        try:
            submitted = self.session.handle_key(normalized)
        except InputInterrupted:
            self.hooks.update_status("interrupted")
            self._log_state("signal <-", signal="interrupt")
            return None
        except EndOfInput:
            self._log_state("signal <-", signal="eof")
            raise

        self.hooks.update_status(self.session.mode_label)
        if submitted is not None:
            self.hooks.submit_line(submitted)
            self._log_state("submit <-", line=submitted)
        return submitted

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "mode": self.session.mode_label,
            "cursor": self.session.cursor,
            "line": self.session.line,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))


__all__ = ["TextualLineAdapter", "TextualUIHooks", "normalize_textual_key"]
