"""Source location tracking for nodes, diagnostics and patching.

Provides SourceLocation for node ranges and LineIndex for converting between
absolute offsets and (line, column) pairs. Offsets are character offsets into
the original source; they are what the patch engine splices against.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.
LineIndex is built once per source and only read afterwards.

"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source location of a node in the original text.

    ``offset``/``end_offset`` form the half-open range ``[start, end)`` used
    by the patch engine. Line and column are 1-indexed and only used for
    messages.

    Attributes:
        lineno: Starting line number (1-indexed)
        col_offset: Starting column offset (1-indexed)
        offset: Absolute start offset in the source buffer
        end_offset: Absolute end offset in the source buffer
        end_lineno: Ending line number (optional)
        end_col_offset: Ending column offset (optional)
        source_file: Source file path (optional)

    Examples:
            >>> loc = SourceLocation(lineno=1, col_offset=1, offset=0, end_offset=5)
            >>> loc.range
            (0, 5)

            >>> loc = SourceLocation(3, 7, source_file="App.vue")
            >>> str(loc)
            'App.vue:3:7'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    end_col_offset: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "App.vue:10:5" or "10:5"
        """
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    @property
    def range(self) -> tuple[int, int]:
        """Half-open ``(start, end)`` offsets into the original source."""
        return (self.offset, self.end_offset)

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Create an unknown/placeholder location.

        Use for nodes created synthetically or when location is unavailable.
        """
        return cls(lineno=0, col_offset=0)


class LineIndex:
    """Offset <-> (line, column) conversion for one source string.

    ``line_offset`` shifts reported line numbers, which is how embedded code
    parsed with leading padding maps back onto its own text.

    Columns passed to :meth:`offset_of` may be UTF-8 byte columns (as
    reported by Python's ``ast``) when ``utf8_columns`` is set.

    Usage:
            >>> index = LineIndex("a\\nbc\\n")
            >>> index.offset_of(2, 1)
            3
            >>> index.position_of(3)
            (2, 2)

    """

    __slots__ = ("_source", "_starts", "_line_offset")

    def __init__(self, source: str, line_offset: int = 0) -> None:
        self._source = source
        self._line_offset = line_offset
        starts = [0]
        pos = source.find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = source.find("\n", pos + 1)
        self._starts = starts

    def line_start(self, lineno: int) -> int:
        """Offset of the first character of a (shifted, 1-indexed) line."""
        index = lineno - 1 - self._line_offset
        if index < 0:
            return 0
        if index >= len(self._starts):
            return len(self._source)
        return self._starts[index]

    def line_text(self, lineno: int) -> str:
        """Text of a line without its newline."""
        start = self.line_start(lineno)
        end = self._source.find("\n", start)
        return self._source[start:] if end == -1 else self._source[start:end]

    def offset_of(self, lineno: int, col: int, *, utf8_columns: bool = False) -> int:
        """Absolute offset for a (shifted, 1-indexed) line and 0-indexed column."""
        start = self.line_start(lineno)
        if utf8_columns and col:
            line = self.line_text(lineno)
            return start + len(line.encode("utf-8")[:col].decode("utf-8", errors="ignore"))
        return start + col

    def position_of(self, offset: int) -> tuple[int, int]:
        """(1-indexed line, 1-indexed column) for an absolute offset."""
        index = bisect_right(self._starts, offset) - 1
        return index + 1 + self._line_offset, offset - self._starts[index] + 1

    def location(
        self,
        start: int,
        end: int,
        source_file: str | None = None,
    ) -> SourceLocation:
        """Build a SourceLocation covering ``[start, end)``."""
        lineno, col = self.position_of(start)
        end_lineno, end_col = self.position_of(end)
        return SourceLocation(
            lineno=lineno,
            col_offset=col,
            offset=start,
            end_offset=end,
            end_lineno=end_lineno,
            end_col_offset=end_col,
            source_file=source_file,
        )

    def indentation_at(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        index = bisect_right(self._starts, offset) - 1
        start = self._starts[index]
        end = start
        while end < len(self._source) and self._source[end] in " \t":
            end += 1
        return self._source[start:end]
