"""The shell's environment: an ordered list of ``KEY=VALUE`` entries."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping

from .splitting import split_quoted


class Environment:
    """Ordered environment entries; an entry without ``=`` is exported with no value."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Environment":
        """Build an environment from a mapping such as ``os.environ``."""
        return cls(f"{key}={value}" for key, value in mapping.items())

    def index_of(self, key: str) -> int | None:
        """Return the index of the first ``key=...`` entry, or None."""
        prefix = key + "="
        for index, entry in enumerate(self._entries):
            if entry.startswith(prefix):
                return index
        return None

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None when it has no ``key=`` entry."""
        index = self.index_of(key)
        if index is None:
            return None
        return self._entries[index][len(key) + 1:]

    def update(self, key: str, value: str) -> bool:
        """Set an existing ``key`` to ``value``; return False if ``key`` is absent."""
        index = self.index_of(key)
        if index is None:
            return False
        self._entries[index] = f"{key}={value}"
        return True

    def append_entry(self, entry: str) -> None:
        """Add a raw entry at the end."""
        self._entries.append(entry)

    def replace_entry(self, index: int, entry: str) -> None:
        """Replace the raw entry at ``index``."""
        self._entries[index] = entry

    def remove(self, key: str) -> bool:
        """Remove the first ``key=...`` entry; return False if there was none."""
        index = self.index_of(key)
        if index is None:
            return False
        del self._entries[index]
        return True

    def sort(self) -> None:
        """Sort entries in place by character order."""
        self._entries.sort()

    def to_mapping(self) -> dict[str, str]:
        """Return the entries that carry a value as a dict; the first one wins."""
        result: dict[str, str] = {}
        for entry in self._entries:
            key, sep, value = entry.partition("=")
            if sep:
                result.setdefault(key, value)
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"


def resolve_path(command: str, env: Environment) -> str | None:
    """Find an executable ``command`` in the directories of ``PATH``."""
    path = env.get("PATH")
    if path is None:
        return None
    for directory in split_quoted(path, ":"):
        candidate = f"{directory}/{command}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None