"""History collaborator protocol and a bounded in-memory history."""

from __future__ import annotations

from typing import Iterator, List, Optional, Protocol, runtime_checkable

from modal_line.runtime.config import DEFAULT_HISTORY_SIZE


@runtime_checkable
class HistorySource(Protocol):
    """Read-only view the editor needs; persistence lives elsewhere."""

    def get(self, index: int) -> Optional[str]:
        ...

    def __len__(self) -> int:
        ...

    def search_subset(self, term: str) -> List[int]:
        ...


class History:
    """Entries ordered oldest first, without duplicates."""

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._entries: List[str] = []

    def push(self, entry: str) -> None:
        """Append ``entry``, dropping an older copy and the oldest overflow."""

        if self._entries and self._entries[-1] == entry:
            return
        self._entries = [item for item in self._entries if item != entry]
        self._entries.append(entry)
        overflow = len(self._entries) - self.max_size
        if overflow > 0:
            del self._entries[:overflow]

    def get(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def search_subset(self, term: str) -> List[int]:
        """Indices to walk with up/down for ``term``.

        Entries merely containing the term come first, prefix matches last,
        so the newest prefix match is reached first when walking backward.
        """

        contains: List[int] = []
        starts: List[int] = []
        for index, entry in enumerate(self._entries):
            if entry.startswith(term):
                starts.append(index)
            elif term in entry:
                contains.append(index)
        return contains + starts


__all__ = ["History", "HistorySource"]
