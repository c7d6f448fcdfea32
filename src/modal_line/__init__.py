"""Embeddable modal (vi-style) line-editing engine."""

from .buffer import TextBuffer
from .editor import BasicCompleter, Editor, History, LineSnapshot
from .keymaps import EndOfInput, InputInterrupted, Key, parse_keys
from .modes import ViMode
from .runtime import ConfigError, EngineConfig, EscapeSequence
from .session import LineSession, register_keymap

__all__ = [
    "BasicCompleter",
    "ConfigError",
    "Editor",
    "EndOfInput",
    "EngineConfig",
    "EscapeSequence",
    "History",
    "InputInterrupted",
    "Key",
    "LineSession",
    "LineSnapshot",
    "TextBuffer",
    "ViMode",
    "parse_keys",
    "register_keymap",
]

__version__ = "0.1.0"
