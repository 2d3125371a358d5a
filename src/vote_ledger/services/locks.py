"""Per-key mutual exclusion for vote transitions."""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from threading import Lock


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = Lock()
        self.holders = 0


class KeyedLock:
    """Registry of locks keyed by arbitrary hashable values.

    Callers contending on the same key are serialized while different keys
    never block each other. Entries are dropped once no thread holds or waits
    on them, so the registry stays proportional to in-flight keys.

    Usage:
        with locks.hold((voter_id, post_id), timeout=2.0) as acquired:
            if acquired:
                ...
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def acquire(self, key: Hashable, timeout: float | None = None) -> bool:
        """Acquire the lock for ``key``; return False if ``timeout`` elapses."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1

        acquired = entry.lock.acquire(timeout=-1 if timeout is None else max(timeout, 0.0))
        if not acquired:
            self._discard(key, entry)
        return acquired

    def release(self, key: Hashable) -> None:
        """Release a lock previously acquired for ``key``."""
        with self._guard:
            entry = self._entries.get(key)
        if entry is None:
            raise RuntimeError(f"Lock for {key!r} is not held")
        entry.lock.release()
        self._discard(key, entry)

    @contextmanager
    def hold(self, key: Hashable, timeout: float | None = None) -> Iterator[bool]:
        """Context manager yielding whether the lock for ``key`` was acquired."""
        acquired = self.acquire(key, timeout)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(key)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _discard(self, key: Hashable, entry: _Entry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0 and self._entries.get(key) is entry:
                del self._entries[key]
