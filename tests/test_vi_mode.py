from __future__ import annotations

from typing import Iterable, Optional

import pytest

from modal_line.editor import Editor, EmptyCompleter, History
from modal_line.keymaps import EndOfInput, InputInterrupted, Key, parse_keys
from modal_line.modes import COUNT_MAX, ModeKind, ViMode
from modal_line.runtime import EscapeSequence


def make_editor(text: str = "", *, history: Iterable[str] = ()) -> Editor:
    store = History()
    for entry in history:
        store.push(entry)
    return Editor(history=store, initial=text)


def make_vi(editor: Editor, **options: object) -> ViMode:
    vi = ViMode(**options)  # type: ignore[arg-type]
    vi.init(editor)
    return vi


def simulate_keys(vi: ViMode, editor: Editor, notation: str) -> bool:
    completer = EmptyCompleter()
    for key in parse_keys(notation):
        if vi.handle_key(key, editor, completer):
            return True
    return False


def run(text: str, notation: str, **options: object) -> Editor:
    editor = make_editor(text)
    simulate_keys(make_vi(editor, **options), editor, notation)
    return editor


# -- inserting and leaving insert mode -----------------------------------------


def test_enter_is_done() -> None:
    editor = make_editor()
    vi = make_vi(editor)
    editor.insert_str_after_cursor("done")
    assert simulate_keys(vi, editor, "<CR>") is True
    assert editor.cursor == 4


def test_escape_steps_back_onto_last_grapheme() -> None:
    editor = make_editor("data")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>")
    assert editor.cursor == 3
    assert vi.mode.kind is ModeKind.NORMAL


def test_normal_mode_cursor_stays_off_end_of_line() -> None:
    editor = make_editor("data")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc><Right><Right>")
    assert editor.cursor == 3
    simulate_keys(vi, editor, "i<Right><Right>")
    assert editor.cursor == 4


def test_switch_from_insert_at_start_stays_at_zero() -> None:
    editor = run("data", "<Esc>0i<Esc>")
    assert editor.line == "data"
    assert editor.cursor == 0


def test_append_variants() -> None:
    assert run("bc", "<Esc>Ia<Esc>").line == "abc"
    assert run("ab", "<Esc>0Ac<Esc>").line == "abc"
    assert run("ac", "<Esc>0ab<Esc>").line == "abc"


def test_substitute_replaces_grapheme_under_cursor() -> None:
    assert run("abc", "<Esc>0sX<Esc>").line == "Xbc"


def test_ctrl_h_is_backspace() -> None:
    assert run("abc", "<C-h>").line == "ab"


# -- counts and dot repeat ---------------------------------------------------------


def test_insert_count_repeats_typed_text() -> None:
    assert run("", "<Esc>3ithis<Esc>").line == "thisthisthis"


def test_insert_count_is_cancelled_by_movement() -> None:
    assert run("", "<Esc>3ithis<Left><Esc>").line == "this"


@pytest.mark.parametrize(
    ("notation", "expected"),
    [
        ("if<Esc>..", "iiifff"),
        ("if<Esc>3.", "iifififf"),
        ("if<Esc>3..", "iififiifififff"),
        ("<Esc>aif<Esc>..", "ififif"),
    ],
)
def test_dot_repeats_last_insert(notation: str, expected: str) -> None:
    assert run("", notation).line == expected


def test_dot_after_movement_repeats_only_new_insert() -> None:
    editor = run("", "<Esc>adt <Left><Left>a<Esc><Right><Right>.")
    assert editor.line == "data "


def test_dot_repeats_delete_with_count() -> None:
    editor = run("abcdefgh", "<Esc>02x.")
    assert editor.line == "efgh"


def test_count_saturates() -> None:
    editor = make_editor()
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>" + "9" * 15)
    assert vi.count == COUNT_MAX
    simulate_keys(vi, editor, "<Esc>")
    assert vi.count == 0


def test_start_in_normal_has_nothing_to_repeat() -> None:
    editor = make_editor("abc")
    vi = make_vi(editor, start_in_normal=True)
    assert vi.mode_label == "normal"
    assert editor.cursor == 2
    simulate_keys(vi, editor, ".")
    assert editor.line == "abc"


# -- motions -------------------------------------------------------------------------


def test_word_motions() -> None:
    editor = make_editor("one two three")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>0w")
    assert editor.cursor == 4
    simulate_keys(vi, editor, "0" + "2w")
    assert editor.cursor == 8
    simulate_keys(vi, editor, "$b")
    assert editor.cursor == 8
    simulate_keys(vi, editor, "0e")
    assert editor.cursor == 2


def test_first_non_blank() -> None:
    editor = run("   indented", "<Esc>^")
    assert editor.cursor == 3


def test_char_search_and_repeat() -> None:
    editor = make_editor("hello world")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>0fo")
    assert editor.cursor == 4
    simulate_keys(vi, editor, ";")
    assert editor.cursor == 7
    simulate_keys(vi, editor, ",")
    assert editor.cursor == 4
    simulate_keys(vi, editor, "$Th")
    assert editor.cursor == 1


def test_normal_mode_history_keeps_no_eol() -> None:
    editor = make_editor("data", history=["data second", "skip1", "data one", "skip2"])
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Up>")
    assert editor.cursor == 8
    simulate_keys(vi, editor, "<C-[>k")
    assert editor.cursor == 10


def test_history_cursor_at_end_of_line() -> None:
    editor = make_editor("data", history=["data hostory", "data history"])
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Up>")
    assert editor.cursor == 12
    simulate_keys(vi, editor, "<C-[><Up>")
    assert editor.cursor == 11


# -- operators -------------------------------------------------------------------------


def test_delete_word() -> None:
    assert run("one two", "<Esc>0dw").line == "two"
    assert run("one two", "<Esc>0de").line == " two"


def test_delete_until_char_is_inclusive() -> None:
    assert run("hello world", "<Esc>0dto").line == "o world"
    assert run("hello world", "<Esc>0dfo").line == " world"


def test_char_search_miss_aborts_operator() -> None:
    editor = make_editor("abc")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>0dfz")
    assert editor.line == "abc"
    assert vi.mode.kind is ModeKind.NORMAL


def test_delete_line() -> None:
    editor = run("delete", "<Esc>dd")
    assert editor.line == ""
    assert editor.cursor == 0


def test_change_to_end_of_line() -> None:
    editor = run("old text", "<Esc>0c$new<Esc>")
    assert editor.line == "new"
    assert editor.cursor == 2


def test_delete_and_change_rest_of_line() -> None:
    assert run("one two", "<Esc>0wD").line == "one "
    assert run("one two", "<Esc>0wCthree<Esc>").line == "one three"


def test_yank_then_paste() -> None:
    editor = run("abc", "<Esc>0ylp")
    assert editor.line == "aabc"
    assert editor.cursor == 1


def test_yank_line_then_paste_before() -> None:
    assert run("ab", "<Esc>yyP").line == "aabb"


def test_delete_then_paste_moves_text() -> None:
    assert run("ab cd", "<Esc>0dwP").line == "ab cd"


def test_flip_case() -> None:
    editor = run("abc", "<Esc>0~~")
    assert editor.line == "ABc"
    assert editor.cursor == 2


def test_replace_single_grapheme() -> None:
    editor = run("replace", "<Esc>rx")
    assert editor.line == "replacx"
    assert editor.cursor == 6


def test_replace_with_count() -> None:
    editor = run("abcd", "<Esc>02rx")
    assert editor.line == "xxcd"
    assert editor.cursor == 1


def test_replace_count_past_end_does_nothing() -> None:
    assert run("abcd", "<Esc>05rx").line == "abcd"


# -- text objects -------------------------------------------------------------------------


def test_delete_a_word_with_trailing_space() -> None:
    editor = run("data data data", "<Esc>2bdaw")
    assert editor.line == "data data"
    assert editor.cursor == 5


def test_delete_inner_word() -> None:
    assert run("foo bar", "<Esc>diw").line == "foo "


def test_delete_inside_parens_with_wide_graphemes() -> None:
    editor = run("(ab😀 😀efg)", "<Esc>0di(")
    assert editor.line == "()"
    assert editor.cursor == 1


def test_unbalanced_parens_leave_line_alone() -> None:
    editor = run("aaaa(bbbb)ccc)ddd", "<Esc>4hdi(")
    assert editor.line == "aaaa(bbbb)ccc)ddd"


def test_change_inside_quotes() -> None:
    editor = run('say "hi there" now', '<Esc>0fhci"yo<Esc>')
    assert editor.line == 'say "yo" now'


# -- undo --------------------------------------------------------------------------------


def test_undo_and_redo_insert() -> None:
    editor = make_editor()
    vi = make_vi(editor)
    simulate_keys(vi, editor, "abc<Esc>u")
    assert editor.line == ""
    simulate_keys(vi, editor, "<C-r>")
    assert editor.line == "abc"


def test_undo_insert_with_history() -> None:
    editor = make_editor(history=["insert something"])
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>iinsert<Up>history<Down> text<Esc>u")
    assert editor.line == "insert"


def test_undo_insert_with_empty_history_entry() -> None:
    editor = make_editor(history=[""])
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>iinsert<Up><Esc><Down>u")
    assert editor.line == ""


# -- wrapper bindings and escape alias ------------------------------------------------------


def test_ctrl_c_interrupts() -> None:
    editor = make_editor("partial")
    vi = make_vi(editor)
    with pytest.raises(InputInterrupted):
        vi.handle_key(Key.ctrl("c"), editor, EmptyCompleter())


def test_ctrl_d_only_ends_input_on_empty_line() -> None:
    editor = make_editor("x")
    vi = make_vi(editor)
    assert vi.handle_key(Key.ctrl("d"), editor, EmptyCompleter()) is False
    assert editor.line == "x"

    simulate_keys(vi, editor, "<BS>")
    with pytest.raises(EndOfInput):
        vi.handle_key(Key.ctrl("d"), editor, EmptyCompleter())


def feed_timed(vi: ViMode, editor: Editor, keys: str, times: Iterable[Optional[float]]) -> None:
    for char, now in zip(keys, times):
        vi.handle_key(Key.of(char), editor, EmptyCompleter(), now)


def test_escape_sequence_leaves_insert() -> None:
    editor = make_editor("ab")
    vi = make_vi(editor, escape_sequence=EscapeSequence("j", "k"))
    feed_timed(vi, editor, "jk", [1.0, 1.1])
    assert editor.line == "ab"
    assert editor.cursor == 1
    assert vi.mode.kind is ModeKind.NORMAL


def test_escape_sequence_times_out() -> None:
    editor = make_editor("ab")
    vi = make_vi(editor, escape_sequence=EscapeSequence("j", "k", timeout_ms=200))
    feed_timed(vi, editor, "jk", [1.0, 1.5])
    assert editor.line == "abjk"
    assert vi.mode.kind is ModeKind.INSERT


def test_escape_sequence_needs_a_clock() -> None:
    editor = make_editor()
    vi = make_vi(editor, escape_sequence=EscapeSequence("j", "k"))
    feed_timed(vi, editor, "jk", [None, None])
    assert editor.line == "jk"


def test_escape_sequence_keeps_register() -> None:
    editor = make_editor("foo bar")
    vi = make_vi(editor, escape_sequence=EscapeSequence("j", "k", timeout_ms=200))
    simulate_keys(vi, editor, "<Esc>0yiw$a")
    feed_timed(vi, editor, "jk", [1.0, 1.1])
    assert editor.line == "foo bar"
    simulate_keys(vi, editor, "p")
    assert editor.line == "foo barfoo"


# -- more counts, motions and undo -------------------------------------------------------


def test_operator_count_multiplies_motion_count() -> None:
    assert run("a b c d e f g h", "<Esc>02d3w").line == "g h"


def test_insert_movement_splits_undo_group() -> None:
    assert run("", "<Esc>iinsert<Left><Right> text<Esc>u").line == "insert"


def test_whitespace_word_motions() -> None:
    editor = make_editor("a.b c.d e")
    vi = make_vi(editor)
    simulate_keys(vi, editor, "<Esc>0W")
    assert editor.cursor == 4
    simulate_keys(vi, editor, "W")
    assert editor.cursor == 8
    simulate_keys(vi, editor, "B")
    assert editor.cursor == 4
    simulate_keys(vi, editor, "0E")
    assert editor.cursor == 2
    simulate_keys(vi, editor, "0e")
    assert editor.cursor == 1


def test_backward_word_end_is_inclusive_under_delete() -> None:
    assert run("one two", "<Esc>dge").line == "on"
    assert run("a.b c.d", "<Esc>dge").line == "a.b c"
    assert run("a.b c.d", "<Esc>dgE").line == "a."


def test_delete_repeating_char_search() -> None:
    editor = run("a,b,c,d", "<Esc>0f,d;")
    assert editor.line == "ac,d"
    assert editor.cursor == 1

    editor = run("a,b,c,d", "<Esc>0f,;d,")
    assert editor.line == "a,c,d"
    assert editor.cursor == 1
