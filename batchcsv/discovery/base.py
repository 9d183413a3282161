"""
Abstract base class for tabular source readers.

Every concrete reader must implement this interface. The row generator
helpers work exclusively against ``AbstractSource`` so they do not care
how a reader gets its lines.

Usage:
    with CSVBatchReader(path="contacts.csv") as source:
        header = source.header()
        for row in source.rows():
            process(row)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator


class AbstractSource(ABC):
    """
    Interface for all tabular source readers.

    Subclasses must implement ``header``, ``rows``, ``separator`` and
    ``close``. Context manager support (``__enter__`` / ``__exit__``) is
    provided by this base class; exiting the block calls ``close``.
    """

    @property
    @abstractmethod
    def separator(self) -> str:
        """The field delimiter in effect for this source."""

    @abstractmethod
    def header(self) -> list[str]:
        """
        Return the header row.

        Returns the same list on every call (the header is parsed once and
        cached internally).
        """

    @abstractmethod
    def rows(self) -> Iterator[list[str]]:
        """
        Yield each data row as a list of strings.

        The header row is NOT included. The iterator is single-pass.
        """

    @abstractmethod
    def close(self) -> None:
        """Release any open file handles or resources."""

    # ── context manager ──────────────────────────────────────────────────

    def __enter__(self) -> "AbstractSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None
