from __future__ import annotations

from typing import Iterable

import pytest

from modal_line.editor import (
    BasicCompleter,
    Editor,
    EmptyCompleter,
    History,
    HistorySource,
    RecordingRenderer,
    longest_common_prefix,
)


def make_history(entries: Iterable[str], max_size: int = 100) -> History:
    history = History(max_size)
    for entry in entries:
        history.push(entry)
    return history


def make_editor(
    text: str = "", *, history: Iterable[str] = (), renderer: RecordingRenderer | None = None
) -> Editor:
    return Editor(history=make_history(history), renderer=renderer, initial=text)


# -- history store ----------------------------------------------------------------------


def test_history_push_dedupes_and_bounds() -> None:
    history = make_history(["a", "b", "a", "c", "c"], max_size=2)
    assert list(history) == ["a", "c"]
    assert len(history) == 2
    assert isinstance(history, HistorySource)


def test_history_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        History(0)


def test_history_search_orders_prefix_matches_last() -> None:
    history = make_history(["git status", "echo git", "git log", "ls"])
    assert history.search_subset("git") == [1, 0, 2]
    assert history.search_subset("cd") == []


# -- history walking ------------------------------------------------------------------


def test_walk_history_from_empty_line() -> None:
    editor = make_editor(history=["first", "second"])
    editor.move_up()
    assert (editor.line, editor.history_location) == ("second", 1)
    editor.move_up()
    assert editor.line == "first"
    editor.move_up()
    assert editor.line == "first"
    editor.move_down()
    editor.move_down()
    assert editor.line == ""
    assert editor.history_location is None


def test_walk_history_filters_by_fresh_text() -> None:
    editor = make_editor("gi", history=["git add", "ls", "git commit"])
    editor.move_up()
    assert editor.line == "git commit"
    editor.move_up()
    assert editor.line == "git add"
    editor.move_up()
    assert editor.line == "git add"
    editor.move_down()
    editor.move_down()
    assert editor.line == "gi"
    assert editor.cursor == 2


def test_history_edits_do_not_touch_the_store() -> None:
    history = make_history(["entry"])
    editor = Editor(history=history)
    editor.move_up()
    editor.insert_str_after_cursor("!")
    assert editor.line == "entry!"
    assert history.get(0) == "entry"

    editor.move_down()
    editor.move_up()
    assert editor.line == "entry"


def test_history_jumps() -> None:
    editor = make_editor(history=["one", "two", "three"])
    editor.move_to_start_of_history()
    assert editor.line == "one"
    editor.move_to_end_of_history()
    assert editor.line == ""
    assert editor.history_location is None


# -- completion -----------------------------------------------------------------------


def test_single_completion_replaces_word() -> None:
    editor = make_editor("git ch")
    editor.complete(BasicCompleter(["checkout", "commit"]))
    assert editor.line == "git checkout"


def test_common_prefix_is_inserted_first() -> None:
    editor = make_editor("re")
    editor.complete(BasicCompleter(["rebase", "rebuild"]))
    assert editor.line == "reb"
    assert editor.completion_hint is None


def test_ambiguous_completion_shows_then_cycles() -> None:
    renderer = RecordingRenderer()
    editor = make_editor("x", renderer=renderer)
    completer = BasicCompleter(["xa", "xb"])
    editor.complete(completer)
    assert editor.line == "x"
    assert editor.completion_hint == (["xa", "xb"], None)
    assert renderer.last is not None
    assert renderer.last.completions == ("xa", "xb")

    editor.complete(completer)
    assert editor.line == "xa"
    editor.complete(completer)
    assert editor.line == "xb"
    assert editor.completion_hint == (["xa", "xb"], 1)


def test_no_candidates_changes_nothing() -> None:
    editor = make_editor("zz")
    editor.complete(EmptyCompleter())
    assert editor.line == "zz"
    assert editor.completion_hint is None


def test_longest_common_prefix() -> None:
    assert longest_common_prefix([]) is None
    assert longest_common_prefix(["only"]) == "only"
    assert longest_common_prefix(["abc", "abd"]) == "ab"
    assert longest_common_prefix(["abc", "xyz"]) is None
    assert longest_common_prefix(["abc", ""]) is None


# -- newline, editing and rendering ---------------------------------------------------


def test_newline_completes_plain_line() -> None:
    editor = make_editor("done")
    assert editor.handle_newline() is True


def test_trailing_backslash_continues_line() -> None:
    editor = make_editor("echo \\")
    assert editor.handle_newline() is False
    editor.insert_str_after_cursor("more")
    assert editor.line == "echo more"
    assert editor.handle_newline() is True


def test_newline_dismisses_completion_list_first() -> None:
    editor = make_editor("x")
    editor.complete(BasicCompleter(["xa", "xb"]))
    assert editor.handle_newline() is False
    assert editor.completion_hint is None
    assert editor.handle_newline() is True


def test_delete_word_before_cursor() -> None:
    editor = make_editor("one two")
    editor.delete_word_before_cursor()
    assert editor.line == "one "
    editor.delete_word_before_cursor()
    assert editor.line == "one "
    editor.delete_word_before_cursor(ignore_space=True)
    assert editor.line == ""


def test_undo_redo_report_success() -> None:
    editor = make_editor()
    assert editor.undo() is False
    editor.insert_str_after_cursor("abc")
    editor.move_cursor_to_start_of_line()
    assert editor.undo() is True
    assert (editor.line, editor.cursor) == ("", 0)
    assert editor.redo() is True
    assert (editor.line, editor.cursor) == ("abc", 3)
    assert editor.revert() is True
    assert editor.line == ""


def test_clear_requests_screen_clear_once() -> None:
    renderer = RecordingRenderer()
    editor = make_editor("abc", renderer=renderer)
    editor.clear()
    editor.move_cursor_left(1)
    flags = [snapshot.clear_screen for snapshot in renderer.snapshots]
    assert flags == [True, False]
    assert renderer.last is not None
    assert renderer.last.cursor == 2


def test_snapshot_tracks_history_index() -> None:
    renderer = RecordingRenderer()
    editor = make_editor(history=["old"], renderer=renderer)
    editor.move_up()
    assert renderer.last is not None
    assert renderer.last.text == "old"
    assert renderer.last.history_index == 0
