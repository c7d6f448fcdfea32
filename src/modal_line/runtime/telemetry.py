"""Structured events and per-key spans for the line engine, on telelog.

Engine code calls ``record_event`` for state changes (mode switches, aborts,
undo/redo, input signals) and ``span`` around each handled key. Hosts call
``configure`` once; otherwise ``LogSettings.from_env`` decides on first use.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MODAL_LINE_"
LOGGER_NAME = "modal_line"
LEVELS = ("debug", "info", "warning", "error")

_logger: Optional[Any] = None


def _flag(raw: Optional[str]) -> bool:
    return raw is not None and raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class LogSettings:
    """Where engine events go. Quiet (``warning``) on the console by default."""

    level: str = "warning"
    log_file: Optional[str] = None
    json: bool = False
    console: bool = True
    color: bool = True

    def __post_init__(self) -> None:
        if self.level not in LEVELS:
            raise ValueError(f"log level must be one of {LEVELS}, got '{self.level}'")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LogSettings":
        """Read ``MODAL_LINE_LOG_LEVEL``, ``_LOG_FILE``, ``_LOG_JSON``,
        ``_DISABLE_CONSOLE`` and ``_NO_COLOR``."""

        if environ is None:
            environ = os.environ

        def read(name: str) -> Optional[str]:
            return environ.get(f"{ENV_PREFIX}{name}")

        return cls(
            level=(read("LOG_LEVEL") or "warning").strip().lower(),
            log_file=read("LOG_FILE") or None,
            json=_flag(read("LOG_JSON")),
            console=not _flag(read("DISABLE_CONSOLE")),
            color=not _flag(read("NO_COLOR")),
        )

    def to_config(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level.upper())
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        config.with_json_format(self.json)
        if self.log_file:
            config.with_file_output(self.log_file)
        config.with_profiling(True)
        return config


def configure(settings: Optional[LogSettings] = None) -> None:
    """Rebuild the engine logger from ``settings`` (default: the environment)."""

    global _logger
    settings = settings or LogSettings.from_env()
    _logger = tl.Logger.with_config(LOGGER_NAME, settings.to_config())


def get_logger() -> Any:
    if _logger is None:
        configure()
    return _logger


def _text(value: Any) -> str:
    return value if isinstance(value, str) else repr(value)


def _emit(level: str, message: str, payload: Dict[str, Any]) -> None:
    log = get_logger()
    with_data = getattr(log, f"{level}_with", None)
    if with_data is None:
        getattr(log, level)(f"{message} {payload}")
        return
    with_data(message, [(str(key), _text(value)) for key, value in payload.items()])


def record_event(
    name: str, *, level: str = "info", data: Optional[Dict[str, Any]] = None
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    if level not in LEVELS:
        raise ValueError(f"Unsupported log level '{level}'.")
    _emit(level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    name: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)


@contextmanager
def span(
    name: str,
    *,
    component: bool = False,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block; ``component`` also tracks it as a telelog component.

    ``metadata`` is attached as logger context while the block runs. A block
    that raises logs ``span::fail`` and the exception propagates.
    """

    log = get_logger()
    handle = SpanHandle(name, {key: _text(value) for key, value in (metadata or {}).items()})
    for key, value in handle.metadata.items():
        log.add_context(key, value)
    context_keys = list(handle.metadata)

    with ExitStack() as stack:
        if component:
            stack.enter_context(log.track_component(name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            _emit("error", "span::fail", {"span": name, **handle.metadata, "reason": str(exc)})
            raise
        finally:
            for key in context_keys:
                log.remove_context(key)


__all__ = [
    "ENV_PREFIX",
    "LogSettings",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
