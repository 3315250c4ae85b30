"""Lazily populated, per-key single-flight cache."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class KeyedLazyCache(Generic[K, V]):
    """Build each value at most once, even under concurrent first use.

    Callers asking for different keys never wait on each other; callers asking
    for the same key while it is being built wait for that single build. A
    factory that raises caches nothing. Entries live until the cache is
    discarded.
    """

    def __init__(self, factory: Callable[[K], V]) -> None:
        self._factory = factory
        self._values: dict[K, V] = {}
        self._locks: dict[K, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: K) -> V:
        try:
            return self._values[key]
        except KeyError:
            pass
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            try:
                return self._values[key]
            except KeyError:
                value = self._factory(key)
                self._values[key] = value
                return value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def snapshot(self) -> Mapping[K, V]:
        """Return a copy of the values built so far."""

        return dict(self._values)
