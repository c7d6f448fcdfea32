"""Render requests handed to the host; no terminal layout happens here."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple, runtime_checkable


@dataclass(frozen=True, slots=True)
class LineSnapshot:
    """What a host needs to draw the line after an edit."""

    text: str
    cursor: int
    completions: Tuple[str, ...] = ()
    highlighted: Optional[int] = None
    clear_screen: bool = False
    history_index: Optional[int] = None


@runtime_checkable
class Renderer(Protocol):
    def request_redraw(self, snapshot: LineSnapshot) -> None:
        ...


class NullRenderer:
    def request_redraw(self, snapshot: LineSnapshot) -> None:
        del snapshot


@dataclass(slots=True)
class RecordingRenderer:
    """Keeps every snapshot; handy for hosts that draw lazily."""

    snapshots: List[LineSnapshot] = field(default_factory=list)

    def request_redraw(self, snapshot: LineSnapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def last(self) -> Optional[LineSnapshot]:
        return self.snapshots[-1] if self.snapshots else None


__all__ = ["LineSnapshot", "NullRenderer", "RecordingRenderer", "Renderer"]
