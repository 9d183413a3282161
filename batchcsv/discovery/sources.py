"""
Input source resolution.

A reader accepts exactly one of ``content``, ``file`` or ``path``. That
choice is resolved once, at construction, into an ``InputSource``: a
closed tagged variant whose ``open()`` yields the same capability for
every kind (an object with ``read(size) -> bytes``), so the tokenizer
never branches on where the bytes come from.

Kinds:
    TEXT    In-memory ``str``. Encoded lazily, chunk by chunk, into the
            declared source encoding (unrepresentable characters dropped).
    BYTES   In-memory ``bytes`` / ``bytearray`` / ``memoryview``.
    HANDLE  An open stream with ``read(size)``. Byte chunks are used as
            they come; ``str`` chunks (text-mode or duck-typed text
            readers) are encoded like TEXT.
    PATH    A file-system path, opened in binary mode on first read.

Handles (caller-supplied or opened from a path) are closed when the scope
opened by ``InputSource.open()`` exits: exhaustion, abandonment or error.
"""

from __future__ import annotations

import codecs
import enum
import io
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol

from batchcsv.configs.exceptions import ConfigurationError


class ByteReader(Protocol):
    def read(self, size: int) -> bytes: ...


class SourceKind(enum.Enum):
    TEXT = "text"
    BYTES = "bytes"
    HANDLE = "handle"
    PATH = "path"


@dataclass(frozen=True)
class InputSource:
    """
    One resolved input.

    Attributes:
        kind:  Which variant this is.
        value: The ``str``, ``bytes``, handle or ``Path`` behind it.
    """

    kind: SourceKind
    value: Any

    def describe(self) -> str:
        """Short description used in log lines and exception messages."""
        if self.kind is SourceKind.PATH:
            return str(self.value)
        if self.kind is SourceKind.HANDLE:
            name = getattr(self.value, "name", None)
            return str(name) if isinstance(name, (str, bytes, os.PathLike)) else f"<{type(self.value).__name__}>"
        return f"<{self.kind.value} content>"

    @contextmanager
    def open(self, encoding: str) -> Iterator[ByteReader]:
        """
        Acquire a byte reader for this source; release it on scope exit.

        Args:
            encoding: Declared source encoding. Only used to turn text
                      (TEXT kind or a text-mode handle) into bytes.
        """
        if self.kind is SourceKind.TEXT:
            yield _EncodingReader(io.StringIO(self.value), encoding)
        elif self.kind is SourceKind.BYTES:
            yield io.BytesIO(self.value)
        elif self.kind is SourceKind.PATH:
            with open(self.value, "rb") as f:
                yield f
        elif self.kind is SourceKind.HANDLE:
            handle = self.value
            try:
                yield _EncodingReader(handle, encoding)
            finally:
                close = getattr(handle, "close", None)
                if callable(close):
                    close()
        else:
            raise ConfigurationError(f"Unsupported source kind: {self.kind!r}")


class _EncodingReader:
    """
    Byte-reader view over a stream that may hand back text.

    ``str`` chunks go through one incremental encoder for the whole stream,
    so a BOM-writing codec emits its BOM once. Byte chunks pass through.
    """

    def __init__(self, stream: Any, encoding: str) -> None:
        self._stream = stream
        self._encoder = codecs.getincrementalencoder(encoding)(errors="ignore")
        self._exhausted = False

    def read(self, size: int) -> bytes:
        if self._exhausted:
            return b""
        data = self._stream.read(size)
        if isinstance(data, str):
            if not data:
                self._exhausted = True
                return self._encoder.encode("", final=True)
            return self._encoder.encode(data)
        return data


def resolve_source(
    content: Any = None,
    file: Any = None,
    path: str | os.PathLike | None = None,
) -> InputSource:
    """
    Resolve the caller's arguments into a single ``InputSource``.

    ``content`` may be a ``str``, a bytes-like object, or (for convenience)
    an object with ``read`` which is then treated as a handle.

    Raises:
        ConfigurationError: If no source, several sources, or a value of an
                            unsupported type is given.
    """
    given = [name for name, value in (("content", content), ("file", file), ("path", path))
             if value is not None]
    if not given:
        raise ConfigurationError("Please provide content, file, or path")
    if len(given) > 1:
        raise ConfigurationError(
            f"Provide exactly one of content, file, or path; got {', '.join(given)}"
        )

    if content is not None:
        if isinstance(content, str):
            return InputSource(SourceKind.TEXT, content)
        if isinstance(content, (bytes, bytearray, memoryview)):
            return InputSource(SourceKind.BYTES, bytes(content))
        if callable(getattr(content, "read", None)):
            return InputSource(SourceKind.HANDLE, content)
        raise ConfigurationError(f"Unsupported content type: {type(content).__name__}")

    if file is not None:
        if callable(getattr(file, "read", None)):
            return InputSource(SourceKind.HANDLE, file)
        raise ConfigurationError(f"Unsupported file type: {type(file).__name__}")

    if isinstance(path, (str, os.PathLike)):
        return InputSource(SourceKind.PATH, Path(path))
    raise ConfigurationError(f"Unsupported path type: {type(path).__name__}")
