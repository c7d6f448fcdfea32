"""The single yank/delete register."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RegisterValue:
    """Most recent yanked or deleted span: where it came from and its text."""

    start: int
    text: str

    def repeated(self, count: int) -> str:
        return self.text * max(count, 1)


__all__ = ["RegisterValue"]
