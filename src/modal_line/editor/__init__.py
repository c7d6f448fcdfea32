"""Editor facade plus its history, completion and render collaborators."""

from .completion import BasicCompleter, Completer, EmptyCompleter, longest_common_prefix
from .editor import CompletionHint, Editor, Fresh, HistoryEdit, Location
from .history import History, HistorySource
from .render import LineSnapshot, NullRenderer, RecordingRenderer, Renderer

__all__ = [
    "BasicCompleter",
    "Completer",
    "CompletionHint",
    "Editor",
    "EmptyCompleter",
    "Fresh",
    "History",
    "HistoryEdit",
    "HistorySource",
    "LineSnapshot",
    "Location",
    "NullRenderer",
    "RecordingRenderer",
    "Renderer",
    "longest_common_prefix",
]
