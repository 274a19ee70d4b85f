"""Token and TokenType definitions for the template lexer.

The lexer produces a stream of Token objects that the parser consumes.
Each Token has a type, value, and the half-open ``[start, end)`` offsets of
the text it was read from.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenType is an enum (inherently immutable).

"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types produced by the template lexer."""

    EOF = auto()

    # Character data
    TEXT = auto()  # Text between tags, raw text of <script>/<style>
    COMMENT = auto()  # <!-- ... -->
    MUSTACHE = auto()  # {{ expr }}

    # Tags
    TAG_OPEN = auto()  # <name
    ATTRIBUTE_NAME = auto()  # name, :prop, @event, v-dir:arg.mod
    ATTRIBUTE_VALUE = auto()  # "value", 'value' or value
    TAG_CLOSE = auto()  # >
    TAG_SELF_CLOSE = auto()  # />
    END_TAG = auto()  # </name>


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the lexer.

    Attributes:
        type: The token type (from TokenType enum)
        value: Decoded value: tag/attribute name, unquoted attribute value,
            comment or mustache body, raw text
        start: Absolute start offset in source
        end: Absolute end offset in source (exclusive)
        lineno: Start line number (1-indexed)
        col: Start column (1-indexed)

    """

    type: TokenType
    value: str
    start: int
    end: int
    lineno: int = 1
    col: int = 1

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.type.name}, {val!r}, {self.lineno}:{self.col})"
