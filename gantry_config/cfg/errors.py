"""Error reporting for the printer configuration language.

Every failure raised by this package derives from ``ConfigError``:

    - ``ConfigSyntaxError``: malformed text; carries the position of the
      first character the grammar could not accept and what was expected
    - ``DuplicateEntry``: a key or section header declared twice
    - ``SectionNotFound``: lookup of an absent section
    - ``MissingKey``: lookup of an absent key in an existing section
    - ``TypeMismatch``: key present but stored as another value variant

Positions are described by ``SourceSpan`` objects.  Offsets are character
indices into the parsed ``str``; lines and columns are 1-based.  Syntax
errors also expose the UTF-8 byte offset of the failure.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Sequence


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Character range inside a configuration text.

    Parameters
    ----------
    start, end : int
        Character offsets, ``end`` exclusive.
    line, column : int
        1-based position of ``start``.
    end_line, end_column : int
        1-based position of ``end``.
    """

    start: int
    end: int
    line: int
    column: int
    end_line: int
    end_column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class LineIndex:
    """Offset to line/column lookup for one text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._starts.append(i + 1)

    def position(self, offset: int) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of *offset*."""
        row = bisect.bisect_right(self._starts, offset) - 1
        return row + 1, offset - self._starts[row] + 1

    def span(self, start: int, end: int) -> SourceSpan:
        line, column = self.position(start)
        end_line, end_column = self.position(end)
        return SourceSpan(start, end, line, column, end_line, end_column)

    def line_text(self, line: int) -> str:
        """Return the text of 1-based *line* without its newline."""
        start = self._starts[line - 1]
        end = self.text.find("\n", start)
        if end < 0:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def byte_offset(self, offset: int) -> int:
        return len(self.text[:offset].encode("utf-8"))


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Base exception for all configuration errors."""

    pass


def _location(source_name: str | None, span: SourceSpan) -> str:
    name = source_name or "<string>"
    return f"{name}:{span.line}:{span.column}"


def describe_expected(expected: Sequence[str]) -> str:
    """Join expected construct names into a readable phrase.

    >>> describe_expected(["']'", "whitespace"])
    "']' or whitespace"
    """
    items = list(expected)
    if not items:
        return "valid input"
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " or " + items[-1]


class ConfigSyntaxError(ConfigError):
    """Raised when configuration text does not match the grammar.

    Parameters
    ----------
    span : SourceSpan
        Zero-width span at the first offending character.
    expected : tuple[str, ...]
        Constructs that would have been accepted at that position.
    found : str
        Description of what was actually there (a quoted character,
        ``"end of line"`` or ``"end of input"``).
    byte_offset : int
        UTF-8 byte offset of the offending character.
    line_text : str
        The full source line containing the error.
    source_name : str | None
        File name (or other label) of the parsed text.
    """

    def __init__(
        self,
        span: SourceSpan,
        expected: tuple[str, ...],
        found: str,
        byte_offset: int,
        line_text: str,
        source_name: str | None = None,
    ) -> None:
        self.span = span
        self.expected = expected
        self.found = found
        self.byte_offset = byte_offset
        self.line_text = line_text
        self.source_name = source_name
        super().__init__(
            f"{_location(source_name, span)}: expected "
            f"{describe_expected(expected)}, found {found}"
        )

    @property
    def offset(self) -> int:
        return self.span.start

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def excerpt(self) -> str:
        """Return the offending line with a caret under the error column."""
        gutter = f"{self.line} | "
        pad = " " * (len(gutter) + self.column - 1)
        return f"{gutter}{self.line_text}\n{pad}^"


class DuplicateEntry(ConfigError):
    """Raised when a section header or a key inside a section repeats."""

    def __init__(
        self,
        what: str,
        span: SourceSpan,
        first_span: SourceSpan,
        source_name: str | None = None,
    ) -> None:
        self.what = what
        self.span = span
        self.first_span = first_span
        self.source_name = source_name
        super().__init__(
            f"{_location(source_name, span)}: duplicate {what} "
            f"(first declared at line {first_span.line})"
        )


class SectionNotFound(ConfigError):
    """Raised when no section matches a type/instance lookup."""

    def __init__(self, type_name: str, instance_name: str | None = None) -> None:
        self.type_name = type_name
        self.instance_name = instance_name
        label = type_name if instance_name is None else f"{type_name} {instance_name}"
        super().__init__(f"Section [{label}] not found")


class MissingKey(ConfigError):
    """Raised when a key is absent from an existing section."""

    def __init__(self, section: str, key: str) -> None:
        self.section = section
        self.key = key
        super().__init__(f"Option '{key}' missing from section [{section}]")


class TypeMismatch(ConfigError):
    """Raised when a value is read as a variant it does not hold."""

    def __init__(
        self,
        expected: str,
        actual: str,
        section: str | None = None,
        key: str | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.section = section
        self.key = key
        where = ""
        if key is not None:
            where = f"Option '{key}' in section [{section}]: "
        super().__init__(f"{where}expected {expected}, got {actual}")
