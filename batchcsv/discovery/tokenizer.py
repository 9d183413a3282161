"""
Chunked stream tokenizer.

Turns an ``InputSource`` into a lazy sequence of logical lines without
ever reading the whole source:

- Reads ``chunk_size`` bytes at a time (``read()`` is never called
  without a size).
- Decodes with an incremental decoder in ``errors="ignore"`` mode, so
  invalid or undefined bytes are deleted and multi-byte characters split
  across chunk boundaries are reassembled.
- Treats ``\\r\\n``, ``\\r`` and ``\\n`` as equivalent terminators. A ``\\r``
  ending a chunk is held back until the next chunk shows whether it is the
  first half of a ``\\r\\n``.
- Never yields empty lines. Flushes the non-empty residual at end of stream.

The source handle is held inside ``InputSource.open()``; closing the
generator early (``.close()``, garbage collection, ``break`` out of a
``with``-managed reader) exits that scope and releases the handle.
"""

from __future__ import annotations

import codecs
import logging
import re
from typing import Iterator

from batchcsv.configs.config import DEFAULT_CHUNK_SIZE
from batchcsv.configs.exceptions import ConfigurationError
from batchcsv.discovery.sources import InputSource
from batchcsv.transformers.normalizers import clean_line

logger = logging.getLogger(__name__)

_LINE_END_RE = re.compile(r"\r\n|\r|\n")


def stream_lines(
    source: InputSource,
    encoding: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[str]:
    """
    Yield the logical lines of ``source`` in order.

    Args:
        source:     A resolved ``InputSource``.
        encoding:   Declared byte encoding of the source.
        chunk_size: Bytes per read.

    Yields:
        Non-empty lines with terminators, null bytes and a leading BOM removed.

    Raises:
        ConfigurationError: If ``source`` is not an ``InputSource``.
        OSError:            Propagated unchanged from the underlying stream.
    """
    if not isinstance(source, InputSource):
        raise ConfigurationError(f"Unsupported stream type: {type(source).__name__}")

    decoder = codecs.getincrementaldecoder(encoding)(errors="ignore")
    buffer = ""
    first = True
    count = 0

    logger.debug("Streaming lines from %s (encoding=%s, chunk_size=%d)",
                 source.describe(), encoding, chunk_size)

    with source.open(encoding) as stream:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            buffer += decoder.decode(chunk)

            end = len(buffer)
            if buffer.endswith("\r"):
                end -= 1
            *complete, rest = _LINE_END_RE.split(buffer[:end])
            buffer = rest + buffer[end:]

            for raw in complete:
                line = clean_line(raw, first=first)
                first = False
                if line:
                    count += 1
                    yield line

        buffer += decoder.decode(b"", final=True)
        for raw in _LINE_END_RE.split(buffer):
            line = clean_line(raw, first=first)
            first = False
            if line:
                count += 1
                yield line

    logger.debug("Finished %s: %d lines", source.describe(), count)
