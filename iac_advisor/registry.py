"""Process-wide holder for immutable lookup tables.

Rule tables and scaffold profiles are loaded once at startup.  If they are
reloaded while the process runs, the new table is fully built and validated
under a single writer lock and then swapped in with one attribute
assignment, so readers always see either the old or the new snapshot.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class TableRegistry(Generic[T]):
    """Single-writer, lock-free-reader holder for one immutable table."""

    def __init__(self, loader: Callable[[], T]) -> None:
        self._lock = threading.Lock()
        self._loader = loader
        self._table: T = loader()
        self._generation = 1

    @property
    def current(self) -> T:
        """The active snapshot.  Never partially built."""
        return self._table

    @property
    def generation(self) -> int:
        """Number of successful loads, starting at 1."""
        return self._generation

    def reload(self, loader: Callable[[], T] | None = None) -> T:
        """Build a new table and swap it in atomically.

        If *loader* raises, the previous snapshot stays active and the
        exception propagates to the caller.
        """
        with self._lock:
            build = loader or self._loader
            table = build()
            self._table = table
            self._loader = build
            self._generation += 1
            return table
