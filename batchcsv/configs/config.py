"""
Reader configuration.

All tuneable constants live here. Import from this module everywhere;
never hardcode chunk sizes, window sizes, or delimiter candidates inline.

Usage:
    from batchcsv.configs.config import ReaderConfig
    cfg = ReaderConfig()                    # defaults
    cfg = ReaderConfig(chunk_size=65536)

Environment overrides (optional) are read from ``os.environ`` when the
config object is constructed; this module does not load .env itself.
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass, field

from batchcsv.configs.exceptions import ConfigurationError


DEFAULT_CHUNK_SIZE: int = 4096
"""Bytes read from the source per tokenizer step."""

DEFAULT_WINDOW_SIZE: int = 10
"""Lines kept in the replayable prefix cache (and sampled for detection)."""

DEFAULT_ENCODING: str = "utf-8:utf-8"
"""``SOURCE:TARGET`` pair used when the caller declares nothing."""

SEPARATOR_CANDIDATES: tuple[str, ...] = (",", ";", "\t", "|")
"""Delimiters tried by the sniffer, in tie-break priority order."""


@dataclass(slots=True)
class ReaderConfig:
    """
    Runtime configuration for ``CSVBatchReader``.

    Attributes:
        chunk_size: Bytes per ``read()`` call on the underlying stream.
            Memory use of the tokenizer is bounded by this plus the longest line.
        window_size: Number of leading lines cached for replay. The header
            and separator detection are both served from this window.
        quote_char: Quote character of the dialect.
        encoding: ``SOURCE:TARGET`` pair. ``SOURCE`` is the byte encoding of
            the input, ``TARGET`` the encoding cells must be representable in.
            A single name means ``NAME:utf-8``.
        batch_size: Default rows per batch for ``generate_batches``.
    """

    chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("CSV_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)))
    )
    window_size: int = field(
        default_factory=lambda: int(os.environ.get("CSV_WINDOW_SIZE", str(DEFAULT_WINDOW_SIZE)))
    )
    quote_char: str = field(
        default_factory=lambda: os.environ.get("CSV_QUOTE_CHAR", '"')
    )
    encoding: str = field(
        default_factory=lambda: os.environ.get("CSV_ENCODING", DEFAULT_ENCODING)
    )
    batch_size: int = field(
        default_factory=lambda: int(os.environ.get("CSV_BATCH_SIZE", "1000"))
    )

    def encodings(self) -> tuple[str, str]:
        """
        Split ``encoding`` into ``(source, target)`` codec names.

        Raises:
            ConfigurationError: If either half is empty or not a known codec.
        """
        source, sep, target = self.encoding.partition(":")
        source = source.strip()
        target = target.strip() if sep else "utf-8"

        for name in (source, target):
            if not name:
                raise ConfigurationError(
                    f"Invalid encoding pair {self.encoding!r}; expected 'SOURCE:TARGET'."
                )
            try:
                codecs.lookup(name)
            except LookupError as e:
                raise ConfigurationError(f"Unknown encoding {name!r}.") from e
        return source, target

    def validate(self) -> None:
        """
        Check every option once, before any I/O happens.

        Raises:
            ConfigurationError: On the first invalid option found.
        """
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}.")
        if self.window_size <= 0:
            raise ConfigurationError(f"window_size must be positive, got {self.window_size}.")
        if self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {self.batch_size}.")
        if not isinstance(self.quote_char, str) or len(self.quote_char) != 1:
            raise ConfigurationError(
                f"quote_char must be a single character, got {self.quote_char!r}."
            )
        self.encodings()
