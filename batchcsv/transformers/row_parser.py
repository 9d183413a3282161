"""
Per-line row parser.

Splits one logical line into cells with ``csv.reader`` and the strict
reader dialect, then normalizes every cell (``normalizers.clean_cell``).

Two entry points with different failure policies:

- ``parse_row`` (data lines) is **tolerant**: a blank line or a line that
  does not parse under the dialect returns ``None`` and the caller skips
  it. One corrupt line never stops the stream.
- ``parse_header`` (line 0) is **strict**: without a header nothing
  downstream can be mapped, so an empty source or a malformed header
  raises ``HeaderParseError``.

Lines never contain terminators (the tokenizer removed them), so quoted
fields spanning several physical lines are not supported.
"""

from __future__ import annotations

import csv
import logging

from batchcsv.configs.exceptions import HeaderParseError
from batchcsv.transformers.normalizers import clean_cell, is_blank

logger = logging.getLogger(__name__)


def split_record(line: str, dialect: type[csv.Dialect]) -> list[str]:
    """
    Split ``line`` as a single delimited record.

    Returns an empty list for an empty line.

    Raises:
        csv.Error: If the line is malformed under ``dialect``.
    """
    return next(csv.reader([line], dialect=dialect), [])


def parse_row(
    line: str,
    dialect: type[csv.Dialect],
    target_encoding: str,
) -> list[str] | None:
    """
    Parse one data line.

    Returns:
        The cleaned cells, or ``None`` if the line is blank or malformed.
    """
    if is_blank(line):
        return None
    try:
        fields = split_record(line, dialect)
    except csv.Error as e:
        logger.debug("Unparseable line skipped (%s): %r", e, line)
        return None
    return [clean_cell(cell, target_encoding) for cell in fields]


def parse_header(
    line: str | None,
    dialect: type[csv.Dialect],
    target_encoding: str,
    source: str | None = None,
) -> list[str]:
    """
    Parse the header line.

    Args:
        line:            Line 0 of the source, ``None`` if there is none.
        dialect:         Reader dialect.
        target_encoding: Output cell encoding.
        source:          Source description for error messages.

    Raises:
        HeaderParseError: If there is no header line, it is blank, or it is
                          malformed under ``dialect``.
    """
    separator = dialect.delimiter
    if line is None:
        raise HeaderParseError("Source is empty; no header row.", source=source)
    if is_blank(line):
        raise HeaderParseError("Header row is blank.", source=source, line=line, separator=separator)
    try:
        fields = split_record(line, dialect)
    except csv.Error as e:
        raise HeaderParseError(
            f"Malformed header row: {e}",
            source=source,
            line=line,
            separator=separator,
        ) from e
    return [clean_cell(cell, target_encoding) for cell in fields]
