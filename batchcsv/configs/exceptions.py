"""
Custom exceptions for the batch CSV reader.

Hierarchy:
    ReaderError
    ├── ConfigurationError    No source, several sources, unsupported source
    │                         type, or an invalid option. Raised at construction.
    └── HeaderParseError      Source is empty or its first line cannot be parsed
                              under the detected separator / quote rules.

Per-line parse failures on data rows are NOT exceptions: those lines are
skipped and counted. I/O errors from the underlying stream propagate as-is.
"""


class ReaderError(Exception):
    """
    Base class for all reader errors.

    Args:
        message: Human-readable description of the failure.
        source: Description of the input being read (path, handle repr, ...).
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        base = super().__str__()
        if self.source:
            return f"{base} | source={self.source}"
        return base


class ConfigurationError(ReaderError):
    """Raised when the reader is constructed with an unusable source or option."""


class HeaderParseError(ReaderError):
    """
    Raised when the header row cannot be produced.

    Args:
        message: Human-readable description.
        source: Description of the input being read.
        line: The raw header line, if one was read.
        separator: The separator in effect when parsing failed.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line: str | None = None,
        separator: str | None = None,
    ) -> None:
        super().__init__(message, source)
        self.line = line
        self.separator = separator

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.separator is not None:
            parts.append(f"separator={self.separator!r}")
        if self.line is not None:
            parts.append(f"line={self.line!r}")
        if parts:
            return f"{base} | {' '.join(parts)}"
        return base
