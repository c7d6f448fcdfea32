from __future__ import annotations

from typing import List

import pytest

from modal_line.adapters.textual.controller import (
    TextualLineAdapter,
    TextualUIHooks,
    normalize_textual_key,
)
from modal_line.editor import BasicCompleter, LineSnapshot
from modal_line.keymaps import ESC, LEFT, EndOfInput, Key
from modal_line.runtime import EngineConfig


def make_adapter(
    config: EngineConfig | None = None,
) -> tuple[TextualLineAdapter, List[LineSnapshot], List[str], List[str]]:
    lines: List[LineSnapshot] = []
    statuses: List[str] = []
    submitted: List[str] = []
    hooks = TextualUIHooks(
        update_line=lines.append,
        update_status=statuses.append,
        submit_line=submitted.append,
    )
    adapter = TextualLineAdapter(hooks, config, completer=BasicCompleter(["status"]))
    return adapter, lines, statuses, submitted


def press(adapter: TextualLineAdapter, text: str) -> None:
    for char in text:
        adapter.handle_textual_key(char, character=char)


def test_normalize_textual_keys() -> None:
    assert normalize_textual_key("escape") == ESC
    assert normalize_textual_key("left") == LEFT
    assert normalize_textual_key("enter") == Key.of("\n")
    assert normalize_textual_key("ctrl+r") == Key.ctrl("r")
    assert normalize_textual_key("ctrl+left_square_bracket") == Key.ctrl("[")
    assert normalize_textual_key("A", "A") == Key.of("A")
    assert normalize_textual_key("space", " ") == Key.of(" ")
    assert normalize_textual_key("f5") is None


def test_adapter_updates_line_and_status() -> None:
    adapter, lines, statuses, _ = make_adapter()
    assert statuses == ["insert"]

    press(adapter, "hi")
    adapter.handle_textual_key("escape")

    assert lines[-1].text == "hi"
    assert lines[-1].cursor == 1
    assert statuses[-1] == "normal"


def test_adapter_submits_lines() -> None:
    adapter, lines, _, submitted = make_adapter()
    press(adapter, "git st")
    adapter.handle_textual_key("tab")
    assert lines[-1].text == "git status"

    result = adapter.handle_textual_key("enter")

    assert result == "git status"
    assert submitted == ["git status"]
    assert lines[-1].text == ""


def test_adapter_reports_interrupt() -> None:
    adapter, lines, statuses, submitted = make_adapter()
    press(adapter, "oops")
    assert adapter.handle_textual_key("ctrl+c") is None
    assert statuses[-1] == "interrupted"
    assert submitted == []
    assert lines[-1].text == ""


def test_adapter_propagates_end_of_input() -> None:
    adapter, *_ = make_adapter()
    with pytest.raises(EndOfInput):
        adapter.handle_textual_key("ctrl+d")


def test_adapter_logs_key_flow() -> None:
    logs: List[str] = []
    hooks = TextualUIHooks(update_line=lambda snapshot: None, log=logs.append)
    adapter = TextualLineAdapter(hooks, EngineConfig(start_in_normal=True))
    adapter.handle_textual_key("i", character="i")
    adapter.handle_textual_key("f5")

    assert logs[0].startswith("key -> mode='normal'")
    assert "key='i'" in logs[0]
    assert logs[-1].startswith("ignored ->")
