"""Runtime services: telemetry and engine configuration."""

from . import telemetry
from .config import ConfigError, EngineConfig, EscapeSequence

__all__ = ["ConfigError", "EngineConfig", "EscapeSequence", "telemetry"]
