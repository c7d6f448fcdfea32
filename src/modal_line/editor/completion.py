"""Completer protocol and the fixed word-list completer."""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Completer(Protocol):
    def completions(self, prefix: str) -> List[str]:
        ...


class BasicCompleter:
    """Offers every known word starting with the prefix."""

    def __init__(self, words: Iterable[str]) -> None:
        self.words = list(words)

    def completions(self, prefix: str) -> List[str]:
        return [word for word in self.words if word.startswith(prefix)]


class EmptyCompleter:
    def completions(self, prefix: str) -> List[str]:
        del prefix
        return []


def longest_common_prefix(candidates: Sequence[str]) -> Optional[str]:
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    if any(not candidate for candidate in candidates):
        return None
    shortest = min(candidates, key=len)
    for end in range(len(shortest), 0, -1):
        prefix = shortest[:end]
        if all(candidate.startswith(prefix) for candidate in candidates):
            return prefix
    return None


__all__ = ["BasicCompleter", "Completer", "EmptyCompleter", "longest_common_prefix"]
