"""
Line- and cell-level normalizers for the batch reader.

Each normalizer is a **pure function** on ``str``.

Line cleaning (applied by the tokenizer to every logical line):
  1. Strip null bytes (``\\x00``)
  2. Strip a leading byte-order mark (first line only)

Cell cleaning (applied by the row parser to every parsed cell):
  1. ``None`` → ``""``
  2. Transcode into the target encoding; characters it cannot represent
     are dropped, never raised
  3. Strip surrounding whitespace
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------
_NULL_BYTE_RE = re.compile(r"\x00")
_BOM = "\ufeff"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def clean_line(line: str, first: bool = False) -> str:
    """Remove null bytes and, on the first line, a leading BOM."""
    line = strip_null_bytes(line)
    if first and line.startswith(_BOM):
        line = line[len(_BOM):]
    return line


def clean_cell(raw: str | None, target_encoding: str) -> str:
    """
    Normalize a single parsed cell.

    Args:
        raw:             Cell from ``csv.reader``; ``None`` for a missing field.
        target_encoding: Codec every returned value must be representable in.

    Returns:
        The transcoded, stripped string (``""`` for a missing field).
    """
    if raw is None:
        return ""
    return transcode(raw, target_encoding).strip()


def transcode(value: str, target_encoding: str) -> str:
    """Drop every character of ``value`` that ``target_encoding`` cannot encode."""
    return value.encode(target_encoding, errors="ignore").decode(target_encoding, errors="ignore")


def strip_null_bytes(value: str) -> str:
    """Remove all null bytes from a string."""
    return _NULL_BYTE_RE.sub("", value)


def is_blank(value: str) -> bool:
    """Return True if the line carries no content at all."""
    return not strip_null_bytes(value).strip()
