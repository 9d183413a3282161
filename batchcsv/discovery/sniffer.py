"""
Separator detection (the sniff).

Scores every candidate delimiter against the first lines of the source:

1. Each sampled line is split as one record under a strict dialect built
   from the candidate and the quote character. A line that fails to parse
   under a candidate is skipped for that candidate only.
2. Per candidate, the minimum and maximum field counts over the lines it
   parsed are recorded.
3. The winner has the highest ``(min_fields, max_fields)``; ties go to the
   earlier candidate in ``SEPARATOR_CANDIDATES``.
4. If no candidate ever splits a line into more than one field, the first
   candidate (comma) is returned.

Ranking on the minimum first keeps a delimiter that only shows up inside
some values (``1,2,3`` list cells in a semicolon file) from beating the
delimiter that splits every line, header included.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from batchcsv.configs.config import SEPARATOR_CANDIDATES
from batchcsv.configs.csv_dialect import make_dialect
from batchcsv.transformers.normalizers import is_blank
from batchcsv.transformers.row_parser import split_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeparatorScore:
    """
    Field-count statistics for one candidate.

    Attributes:
        separator:    The candidate delimiter.
        min_fields:   Fewest fields in any line that parsed.
        max_fields:   Most fields in any line that parsed.
        lines_parsed: How many sampled lines parsed under this candidate.
    """
    separator: str
    min_fields: int
    max_fields: int
    lines_parsed: int

    @property
    def rank(self) -> tuple[int, int]:
        return self.min_fields, self.max_fields


def score_separators(
    lines: Iterable[str],
    quote_char: str = '"',
    candidates: Sequence[str] = SEPARATOR_CANDIDATES,
) -> list[SeparatorScore]:
    """
    Score every candidate against ``lines``.

    Blank lines are ignored. Candidates equal to ``quote_char`` and
    candidates that parsed no line are left out. The result keeps candidate priority order.
    """
    sample = [line for line in lines if not is_blank(line)]
    scores: list[SeparatorScore] = []

    for candidate in candidates:
        if candidate == quote_char:
            continue
        dialect = make_dialect(candidate, quote_char)
        counts = []
        for line in sample:
            try:
                fields = split_record(line, dialect)
            except csv.Error:
                continue
            if fields:
                counts.append(len(fields))
        if counts:
            scores.append(SeparatorScore(candidate, min(counts), max(counts), len(counts)))

    return scores


def detect_separator(
    lines: Iterable[str],
    quote_char: str = '"',
    candidates: Sequence[str] = SEPARATOR_CANDIDATES,
) -> str:
    """
    Pick the field delimiter for ``lines``.

    Args:
        lines:      Sampled leading lines (header first).
        quote_char: Quote character of the dialect.
        candidates: Delimiters to try, in priority order.

    Returns:
        The winning candidate, or the first candidate other than
        ``quote_char`` if none splits anything.
    """
    scores = score_separators(lines, quote_char, candidates)
    fallback = next((c for c in candidates if c != quote_char), candidates[0])
    for score in scores:
        logger.debug(
            "Separator %r: min=%d max=%d parsed=%d",
            score.separator, score.min_fields, score.max_fields, score.lines_parsed,
        )

    # max() keeps the first of equal ranks, i.e. the higher-priority candidate.
    best = max(scores, key=lambda s: s.rank, default=None)
    if best is None or best.max_fields <= 1:
        if scores:
            logger.warning(
                "No separator split any line into several fields; defaulting to %r",
                fallback,
            )
        return fallback

    logger.info("Detected separator %r", best.separator)
    return best.separator
