"""
Batch and record streams over an ``AbstractSource``.

Import pipelines rarely want one row at a time: they insert in batches, or
map cells onto header names. Both helpers here stay lazy.

Key properties:
  - **Lazy**: at most one batch of rows is in memory at a time.
  - **Single-pass**: both consume ``source.rows()``; the reader's rows
    iterator is forward-only, so a second call continues where the first
    stopped.
  - **Non-validating**: rows shorter than the header are padded with
    ``""``, longer rows are truncated. Field counts are not enforced.

Usage::

    for batch in generate_batches(reader, batch_size=500):
        cursor.executemany(sql, batch)

    for record in generate_records(reader):
        # record == {"email": "john@example.com", "first_name": "John", ...}
        pass
"""

from __future__ import annotations

from itertools import islice
from typing import Iterator

from batchcsv.configs.config import ReaderConfig
from batchcsv.discovery.base import AbstractSource


def generate_batches(
    source: AbstractSource,
    batch_size: int | None = None,
) -> Iterator[list[list[str]]]:
    """
    Stream ``source.rows()`` in lists of at most ``batch_size`` rows.

    Args:
        source:     Any ``AbstractSource``.
        batch_size: Rows per batch. Defaults to ``source.config.batch_size``
                    when the source has a config, else ``ReaderConfig().batch_size``.

    Raises:
        ValueError: If ``batch_size`` is not positive.
    """
    if batch_size is None:
        config = getattr(source, "config", None) or ReaderConfig()
        batch_size = config.batch_size
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    rows = source.rows()
    while True:
        batch = list(islice(rows, batch_size))
        if not batch:
            return
        yield batch


def generate_records(source: AbstractSource) -> Iterator[dict[str, str]]:
    """
    Stream rows from ``source`` as header-keyed dicts.

    Notes:
        - Duplicate header names: the last column wins.
        - Missing cells are ``""``; surplus cells are dropped.
    """
    header = source.header()
    width = len(header)

    for row in source.rows():
        cells = row[:width] + [""] * (width - len(row))
        yield dict(zip(header, cells))
