"""
Streaming CSV reader implementing ``AbstractSource``.

Composes the pipeline::

    InputSource → stream_lines → WindowedLineCache ─┬─ detect_separator (first window)
                                                    └─ parse_header / parse_row

Handles:
- In-memory text or bytes, an open handle, or a file path.
- Any declared source encoding; invalid bytes are deleted, not raised.
- CR, LF and CRLF line endings, mixed freely.
- Comma, semicolon, tab and pipe delimiters, detected from the first lines.
- Corrupt data lines: skipped and counted in ``stats``, never raised.

Memory use is bounded by the chunk size, the longest line and the window
size, whatever the size of the source.

Re-entrancy policy for ``rows()``: the first call creates the iterator and
every later call returns that same iterator, so a partially consumed
reader continues from its cursor. A fresh pass needs a fresh reader.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterator

from batchcsv.configs.config import ReaderConfig
from batchcsv.configs.csv_dialect import make_dialect
from batchcsv.discovery.base import AbstractSource
from batchcsv.discovery.sniffer import detect_separator
from batchcsv.discovery.sources import resolve_source
from batchcsv.discovery.tokenizer import stream_lines
from batchcsv.discovery.window_cache import WindowedLineCache
from batchcsv.transformers.row_parser import parse_header, parse_row

logger = logging.getLogger(__name__)


@dataclass
class ReaderStats:
    """
    Counters for one pass over ``rows()``.

    Attributes:
        lines_read:    Logical lines consumed, header included.
        rows_yielded:  Data rows handed to the caller.
        lines_skipped: Data lines dropped as blank or unparseable.

    Once ``rows()`` is exhausted,
    ``lines_read == 1 + rows_yielded + lines_skipped`` (for a non-empty source).
    """
    lines_read: int = 0
    rows_yielded: int = 0
    lines_skipped: int = 0


class CSVBatchReader(AbstractSource):
    """
    Memory-bounded CSV reader with delimiter detection.

    Exactly one of ``content``, ``file`` or ``path`` must be given.

    Args:
        content:    In-memory ``str`` or bytes-like content.
        file:       Open stream with ``read(size)``. Closed by the reader
                    once exhausted, abandoned, or on ``close()``.
        path:       File-system path, opened in binary mode.
        quote_char: Quote character; overrides ``config.quote_char``.
        encoding:   ``"SOURCE:TARGET"`` pair; overrides ``config.encoding``.
        config:     Base configuration. Defaults to ``ReaderConfig()``.

    Raises:
        ConfigurationError: On a missing/duplicate/unsupported source or an
                            invalid option. Nothing is read in that case.
    """

    def __init__(
        self,
        content: Any = None,
        file: Any = None,
        path: str | os.PathLike | None = None,
        *,
        quote_char: str | None = None,
        encoding: str | None = None,
        config: ReaderConfig | None = None,
    ) -> None:
        overrides = {}
        if quote_char is not None:
            overrides["quote_char"] = quote_char
        if encoding is not None:
            overrides["encoding"] = encoding
        self.config = dataclasses.replace(config or ReaderConfig(), **overrides)
        self.config.validate()

        self.source_encoding, self.target_encoding = self.config.encodings()
        self.quote_char = self.config.quote_char
        self.stats = ReaderStats()

        self._source = resolve_source(content=content, file=file, path=path)
        self._lines = WindowedLineCache(
            stream_lines(self._source, self.source_encoding, self.config.chunk_size),
            window_size=self.config.window_size,
        )

        # Sample the window once, up front: header and rows both need the separator.
        self._separator = detect_separator(
            self._lines.take(self.config.window_size),
            quote_char=self.quote_char,
        )
        self._dialect = make_dialect(self._separator, self.quote_char)
        self._header: list[str] | None = None
        self._rows: Iterator[list[str]] | None = None

        logger.debug(
            "Reader ready for %s: separator=%r quote=%r encoding=%s:%s",
            self.describe(), self._separator, self.quote_char,
            self.source_encoding, self.target_encoding,
        )

    # ── AbstractSource interface ─────────────────────────────────────────

    @property
    def separator(self) -> str:
        """Detected delimiter. Resolved once, at construction."""
        return self._separator

    def header(self) -> list[str]:
        """
        Return the parsed header row.

        Served from the line window; never advances the source past it.

        Raises:
            HeaderParseError: If the source is empty or line 0 is malformed.
        """
        if self._header is None:
            self._header = parse_header(
                self._lines.first(),
                self._dialect,
                self.target_encoding,
                source=self.describe(),
            )
        return self._header

    def rows(self) -> Iterator[list[str]]:
        """
        Return the lazy, forward-only iterator of data rows.

        The first call starts it at logical line 1; later calls return the
        same iterator.

        The reader holds on to this iterator, so breaking out of a loop over
        it does not release the source. Abandoned iteration is released by
        ``close()`` or by leaving the reader's ``with`` block.
        """
        if self._rows is None:
            self._rows = self._generate_rows()
        return self._rows

    def close(self) -> None:
        """Stop iteration and release the source handle."""
        if self._rows is not None:
            self._rows.close()
        self._lines.close()

    # ── helpers ──────────────────────────────────────────────────────────

    def describe(self) -> str:
        """Description of the input, for logs and errors."""
        return self._source.describe()

    @property
    def line_cache(self) -> WindowedLineCache:
        """The windowed line cache backing this reader (read-only use)."""
        return self._lines

    def _generate_rows(self) -> Iterator[list[str]]:
        for index, line in enumerate(self._lines.cursor()):
            self.stats.lines_read += 1
            if index == 0:
                continue  # header

            row = parse_row(line, self._dialect, self.target_encoding)
            if row is None:
                self.stats.lines_skipped += 1
                logger.debug("Skipped line %d of %s", index + 1, self.describe())
                continue

            self.stats.rows_yielded += 1
            yield row

        if self.stats.lines_skipped:
            logger.info(
                "Finished %s: %d rows, %d lines skipped",
                self.describe(), self.stats.rows_yielded, self.stats.lines_skipped,
            )
