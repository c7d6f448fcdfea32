from __future__ import annotations

import pytest

from modal_line import EngineConfig, EscapeSequence, History, Key, LineSession
from modal_line.editor import BasicCompleter, RecordingRenderer
from modal_line.keymaps import EndOfInput, InputInterrupted, KeyMap
from modal_line.session import available_keymaps, register_keymap


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_session(config: EngineConfig | None = None, **options: object) -> LineSession:
    return LineSession(config, **options)  # type: ignore[arg-type]


def test_feed_returns_submitted_lines() -> None:
    session = make_session()
    assert session.feed("echo hi<CR>ls<CR>") == ["echo hi", "ls"]
    assert list(session.history) == ["echo hi", "ls"]
    assert session.line == ""


def test_blank_lines_are_not_recorded() -> None:
    session = make_session()
    assert session.feed("   <CR>") == ["   "]
    assert len(session.history) == 0


def test_each_line_starts_fresh() -> None:
    session = make_session(EngineConfig(start_in_normal=True))
    assert session.mode_label == "normal"
    session.feed("ifirst<CR>")
    assert session.mode_label == "normal"
    assert session.cursor == 0


def test_history_is_shared_across_lines() -> None:
    history = History()
    session = make_session(history=history)
    session.feed("first<CR>")
    session.feed("<Up>")
    assert session.line == "first"
    assert session.feed("<CR>") == ["first"]
    assert list(history) == ["first"]


def test_ctrl_c_resets_and_propagates() -> None:
    session = make_session()
    session.feed("abandoned")
    with pytest.raises(InputInterrupted):
        session.handle_key(Key.ctrl("c"))
    assert session.line == ""
    assert len(session.history) == 0


def test_ctrl_d_on_empty_line_ends_input() -> None:
    session = make_session()
    with pytest.raises(EndOfInput):
        session.feed("<C-d>")


def test_tab_completes_through_session_completer() -> None:
    session = make_session(completer=BasicCompleter(["status"]))
    session.feed("git st<Tab>")
    assert session.line == "git status"


def test_renderer_receives_snapshots() -> None:
    renderer = RecordingRenderer()
    session = make_session(renderer=renderer)
    session.feed("ab")
    assert renderer.last is not None
    assert (renderer.last.text, renderer.last.cursor) == ("ab", 2)


def test_escape_alias_uses_injected_clock() -> None:
    clock = FakeClock()
    config = EngineConfig(escape_sequence=EscapeSequence("j", "k", timeout_ms=100))
    session = make_session(config, clock=clock)
    session.feed("ab")
    session.handle_key(Key.of("j"))
    clock.now += 0.05
    session.handle_key(Key.of("k"))
    assert session.line == "ab"
    assert session.mode_label == "normal"


def test_escape_alias_disabled_without_clock() -> None:
    config = EngineConfig(escape_sequence=EscapeSequence("j", "k"))
    session = make_session(config, clock=None)
    session.feed("jk")
    assert session.line == "jk"


def test_unknown_keymap_is_rejected() -> None:
    with pytest.raises(KeyError):
        make_session(EngineConfig(keymap="emacs-nope"))


class UpperKeyMap(KeyMap):
    name = "upper"

    def handle_key_core(self, key, editor, now=None) -> None:  # type: ignore[override]
        if key.is_char():
            editor.insert_after_cursor(str(key.char).upper())


def test_registered_keymap_is_used() -> None:
    register_keymap("upper", lambda config: UpperKeyMap(), replace=True)
    assert "upper" in available_keymaps()
    session = make_session(EngineConfig(keymap="upper"))
    assert session.feed("abc<CR>") == ["ABC"]
    assert session.mode_label == "upper"


def test_duplicate_registration_needs_replace() -> None:
    with pytest.raises(ValueError):
        register_keymap("vi", lambda config: UpperKeyMap())
