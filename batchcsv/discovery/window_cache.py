"""
Lazy windowed line cache.

Wraps the tokenizer's line iterator so that cheap early inspection
(separator detection, header access) can look at the first lines as often
as it likes without re-tokenizing and without buffering the whole source.

Contract:
  - At most ``window_size`` lines are ever cached.
  - The underlying iterator is advanced at most once per element, in order.
  - Any number of cursors may replay the cached prefix.
  - A cursor past the window pulls straight from the underlying iterator;
    those lines are never cached. Only one cursor should stream past the
    window, since lines it pulls are not seen by any other cursor.
  - Exhaustion of the underlying iterator ends every cursor cleanly.

Each cursor is an explicit state machine::

    SERVING_FROM_CACHE ──(position == window)──▶ SERVING_FROM_SOURCE
            │                                            │
            └──────(source exhausted)──▶ EXHAUSTED ◀─────┘

Usage::

    cache = WindowedLineCache(stream_lines(source, "utf-8"), window_size=10)
    sample = cache.take(10)          # fills the window
    header = cache.first()           # served from the window
    for line in cache.cursor():      # replays the window, then streams
        ...
"""

from __future__ import annotations

import enum
from typing import Iterator

from batchcsv.configs.config import DEFAULT_WINDOW_SIZE


class CursorState(enum.Enum):
    SERVING_FROM_CACHE = "serving-from-cache"
    SERVING_FROM_SOURCE = "serving-from-source"
    EXHAUSTED = "exhausted"


class WindowedLineCache:
    """
    Bounded memoizing prefix over a lazy line iterator.

    Args:
        source:      The underlying iterator. Owned by the cache from here on.
        window_size: Maximum number of leading lines to keep.
    """

    def __init__(self, source: Iterator[str], window_size: int = DEFAULT_WINDOW_SIZE) -> None:
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self._source = source
        self._window_size = window_size
        self._cache: list[str] = []
        self._source_exhausted = False

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def cached(self) -> tuple[str, ...]:
        """Snapshot of the lines realized so far (never more than the window)."""
        return tuple(self._cache)

    def cursor(self) -> "CacheCursor":
        """Return a new cursor positioned at line 0."""
        return CacheCursor(self)

    def take(self, n: int) -> list[str]:
        """Return up to ``n`` leading lines, capped at the window size."""
        n = min(n, self._window_size)
        self._fill_to(n - 1)
        return self._cache[:n]

    def first(self) -> str | None:
        """Return line 0, or ``None`` if the source produced no lines."""
        if self._fill_to(0):
            return self._cache[0]
        return None

    def close(self) -> None:
        """Stop the underlying iterator, releasing whatever it holds open."""
        close = getattr(self._source, "close", None)
        if callable(close):
            close()
        self._source_exhausted = True

    # ── internals shared with CacheCursor ────────────────────────────────

    def _pull(self) -> str | None:
        """Advance the underlying iterator exactly once."""
        if self._source_exhausted:
            return None
        try:
            return next(self._source)
        except StopIteration:
            self._source_exhausted = True
            return None

    def _fill_to(self, position: int) -> bool:
        """Realize cached lines up to ``position``; False if the source ends first."""
        while len(self._cache) <= position:
            value = self._pull()
            if value is None:
                return False
            self._cache.append(value)
        return True


class CacheCursor:
    """Forward-only iterator over a ``WindowedLineCache``."""

    def __init__(self, cache: WindowedLineCache) -> None:
        self._cache = cache
        self._position = 0
        self.state = CursorState.SERVING_FROM_CACHE

    @property
    def position(self) -> int:
        """Index of the next line this cursor will return."""
        return self._position

    def __iter__(self) -> "CacheCursor":
        return self

    def __next__(self) -> str:
        if self.state is CursorState.SERVING_FROM_CACHE:
            if self._position < self._cache.window_size:
                if not self._cache._fill_to(self._position):
                    self.state = CursorState.EXHAUSTED
                    raise StopIteration
                value = self._cache._cache[self._position]
                self._position += 1
                return value
            self.state = CursorState.SERVING_FROM_SOURCE

        if self.state is CursorState.SERVING_FROM_SOURCE:
            value = self._cache._pull()
            if value is None:
                self.state = CursorState.EXHAUSTED
                raise StopIteration
            self._position += 1
            return value

        raise StopIteration
