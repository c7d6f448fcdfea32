"""Engine configuration resolved from code or ``MODAL_LINE_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import grapheme

from .telemetry import ENV_PREFIX

START_MODES = ("insert", "normal")
DEFAULT_KEYMAP = "vi"
DEFAULT_HISTORY_SIZE = 1000


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


@dataclass(frozen=True, slots=True)
class EscapeSequence:
    """Two-key alias for Escape in insert mode (``jk``-style)."""

    first: str
    second: str
    timeout_ms: int = 200

    def __post_init__(self) -> None:
        for name in ("first", "second"):
            value = getattr(self, name)
            if grapheme.length(value) != 1:
                raise ConfigError(
                    f"escape sequence key '{value}' must be one character",
                    field="escape_sequence",
                )
        if self.timeout_ms <= 0:
            raise ConfigError(
                "escape sequence timeout must be positive", field="escape_timeout_ms"
            )

    @classmethod
    def parse(cls, keys: str, *, timeout_ms: int = 200) -> "EscapeSequence":
        chars = list(grapheme.graphemes(keys.strip()))
        if len(chars) != 2:
            raise ConfigError(
                f"escape sequence '{keys}' must be exactly two characters",
                field="escape_sequence",
            )
        return cls(chars[0], chars[1], timeout_ms)

    def within(self, elapsed_seconds: float) -> bool:
        return 0 <= elapsed_seconds * 1000.0 <= self.timeout_ms


@dataclass(frozen=True, slots=True)
class EngineConfig:
    keymap: str = DEFAULT_KEYMAP
    start_in_normal: bool = False
    escape_sequence: Optional[EscapeSequence] = None
    history_size: int = DEFAULT_HISTORY_SIZE

    def __post_init__(self) -> None:
        if not self.keymap:
            raise ConfigError("keymap name cannot be empty", field="keymap")
        if self.history_size <= 0:
            raise ConfigError("history size must be positive", field="history_size")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from ``MODAL_LINE_*`` variables.

        ``environ`` defaults to ``os.environ``; unset variables keep the
        dataclass defaults.
        """

        if environ is None:
            environ = os.environ

        def read(name: str) -> Optional[str]:
            value = environ.get(f"{ENV_PREFIX}{name}")
            return value.strip() if value is not None else None

        keymap = read("KEYMAP") or DEFAULT_KEYMAP

        start_mode = (read("START_MODE") or "insert").lower()
        if start_mode not in START_MODES:
            raise ConfigError(
                f"start mode must be one of {START_MODES}, got '{start_mode}'",
                field="start_mode",
            )

        timeout_ms = _read_int(read("ESCAPE_TIMEOUT_MS"), 200, "escape_timeout_ms")
        raw_sequence = read("ESCAPE_SEQUENCE")
        escape_sequence = (
            EscapeSequence.parse(raw_sequence, timeout_ms=timeout_ms)
            if raw_sequence
            else None
        )

        return cls(
            keymap=keymap,
            start_in_normal=start_mode == "normal",
            escape_sequence=escape_sequence,
            history_size=_read_int(
                read("HISTORY_SIZE"), DEFAULT_HISTORY_SIZE, "history_size"
            ),
        )


def _read_int(raw: Optional[str], fallback: int, field: str) -> int:
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{field} must be an integer, got '{raw}'", field=field) from exc


__all__ = ["ConfigError", "EngineConfig", "EscapeSequence", "START_MODES"]
