"""Line session: picks the keymap, injects the clock, traces every key."""

from __future__ import annotations

import time
from typing import Callable, Dict, Iterable, List, Optional, Union

from modal_line.cursor import EditorRules
from modal_line.editor import Completer, Editor, EmptyCompleter, History, Renderer
from modal_line.keymaps import EndOfInput, InputInterrupted, Key, KeyMap, parse_keys
from modal_line.modes import ViMode
from modal_line.runtime import EngineConfig, telemetry

KeymapFactory = Callable[[EngineConfig], KeyMap]


def _vi_factory(config: EngineConfig) -> KeyMap:
    return ViMode(
        escape_sequence=config.escape_sequence,
        start_in_normal=config.start_in_normal,
    )


_KEYMAPS: Dict[str, KeymapFactory] = {"vi": _vi_factory}


def register_keymap(name: str, factory: KeymapFactory, *, replace: bool = False) -> None:
    if not name:
        raise ValueError("keymap name cannot be empty")
    if name in _KEYMAPS and not replace:
        raise ValueError(f"Keymap '{name}' already registered")
    _KEYMAPS[name] = factory


def available_keymaps() -> tuple[str, ...]:
    return tuple(sorted(_KEYMAPS))


class LineSession:
    """Feeds keys to one editor at a time and hands back submitted lines.

    A new editor and keymap are built for every line. ``clock`` supplies the
    timestamps the escape alias compares; pass ``None`` to disable it.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        history: Optional[History] = None,
        renderer: Optional[Renderer] = None,
        completer: Optional[Completer] = None,
        rules: Optional[EditorRules] = None,
        clock: Optional[Callable[[], float]] = time.monotonic,
    ) -> None:
        self.config = config or EngineConfig()
        factory = _KEYMAPS.get(self.config.keymap)
        if factory is None:
            raise KeyError(f"Unknown keymap '{self.config.keymap}'")
        self._factory = factory
        self.history = history if history is not None else History(self.config.history_size)
        self.renderer = renderer
        self.completer: Completer = completer or EmptyCompleter()
        self.rules = rules
        self.clock = clock
        self.editor: Editor
        self.keymap: KeyMap
        self.start_line()

    @property
    def mode_label(self) -> str:
        return self.keymap.mode_label

    @property
    def line(self) -> str:
        return self.editor.line

    @property
    def cursor(self) -> int:
        return self.editor.cursor

    def start_line(self, initial: str = "") -> None:
        self.editor = Editor(
            history=self.history,
            renderer=self.renderer,
            rules=self.rules,
            initial=initial,
        )
        self.keymap = self._factory(self.config)
        self.keymap.init(self.editor)
        self.editor.display()

    def handle_key(self, key: Key) -> Optional[str]:
        """Process ``key``; returns the line when the key submits it.

        ``InputInterrupted`` and ``EndOfInput`` propagate to the caller after
        the session has been reset for the next line.
        """

        now = self.clock() if self.clock is not None else None
        signal: Optional[Union[InputInterrupted, EndOfInput]] = None
        with telemetry.span(
            name=f"keymap::{self.keymap.name}",
            component=True,
            metadata={"key": key.token, "mode": self.keymap.mode_label},
        ) as handle:
            try:
                done = self.keymap.handle_key(key, self.editor, self.completer, now)
            except (InputInterrupted, EndOfInput) as exc:
                handle.add_metadata("signal", type(exc).__name__)
                signal = exc
                done = False

        if signal is not None:
            self.start_line()
            raise signal
        if not done:
            return None

        line = self.editor.line
        if line.strip():
            self.history.push(line)
        self.start_line()
        return line

    def feed(self, keys: Union[str, Iterable[Key]]) -> List[str]:
        """Handle every key in order; ``keys`` may use ``parse_keys`` notation."""

        sequence = parse_keys(keys) if isinstance(keys, str) else keys
        submitted: List[str] = []
        for key in sequence:
            line = self.handle_key(key)
            if line is not None:
                submitted.append(line)
        return submitted


__all__ = ["KeymapFactory", "LineSession", "available_keymaps", "register_keymap"]
