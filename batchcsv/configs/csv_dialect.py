"""
CSV dialect construction for the batch reader.

Every reader gets its own dialect class built from the detected separator
and the configured quote character. Nothing is registered with the ``csv``
module, so two readers with different dialects never share state.

The base dialect:
- Raises on malformed records (``strict``) so callers can tell a broken
  line from a well-formed one and decide whether to skip it.
- Skips whitespace after a separator, so ``a, "b"`` still sees a quoted field.
- Uses ``\\n`` as line terminator; lines reaching the parser have already
  had their terminators removed by the tokenizer.

Usage:
    import csv
    from batchcsv.configs.csv_dialect import make_dialect

    dialect = make_dialect(";", '"')
    row = next(csv.reader([line], dialect=dialect))
"""

from __future__ import annotations

import csv


class StrictDialect(csv.excel):
    """
    Strict base dialect.

    Inherits from ``csv.excel`` (comma-delimited, double-quote, doubled
    quote escaping) and enables strict mode.
    """

    strict: bool = True
    skipinitialspace: bool = True
    lineterminator: str = "\n"


def make_dialect(separator: str, quote_char: str) -> type[csv.Dialect]:
    """
    Return a ``StrictDialect`` subclass for ``separator`` and ``quote_char``.

    Raises:
        ValueError: If the separator and quote char are the same character.
    """
    if separator == quote_char:
        raise ValueError(f"separator and quote_char must differ, both are {separator!r}")

    return type(
        "ReaderDialect",
        (StrictDialect,),
        {"delimiter": separator, "quotechar": quote_char},
    )
