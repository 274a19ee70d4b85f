"""State-machine lexer for component templates.

Scans markup into tags, attributes, text, comments and mustaches. Every
token carries the exact ``[start, end)`` offsets it was read from so the
parser can give each node its original range.

No regex in the hot path; every scanner advances the position.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator

from graft.errors import ParseError
from graft.lexer.modes import RAW_TEXT_ELEMENTS, TEMPLATE_ELEMENT, LexerMode
from graft.location import LineIndex
from graft.nodes import VOID_ELEMENTS
from graft.tokens import Token, TokenType

_WHITESPACE = " \t\n\r\f"


class Lexer:
    """Template lexer.

    Tracks a stack of open element names so it knows when content is raw
    text and when mustaches apply. Element nesting errors are left to the
    parser.

    Usage:
            >>> tokens = list(Lexer('<template><a :href="url"/></template>').tokenize())
            >>> [t.type.name for t in tokens][:4]
            ['TAG_OPEN', 'TAG_CLOSE', 'TAG_OPEN', 'ATTRIBUTE_NAME']

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_mode",
        "_source_file",
        "_index",
        "_open",  # Stack of open element names (lower-cased)
        "_tag_name",  # Name of the start tag being scanned
        "_raw_end",  # Name whose end tag terminates RAW_TEXT mode
    )

    def __init__(self, source: str, source_file: str | None = None) -> None:
        """Initialize lexer with source text.

        Args:
            source: Component source text
            source_file: Optional source file path for error messages
        """
        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._mode = LexerMode.DATA
        self._source_file = source_file
        self._index = LineIndex(source)
        self._open: list[str] = []
        self._tag_name = ""
        self._raw_end = ""

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into token stream.

        Yields:
            Token objects one at a time, ending with EOF

        Raises:
            ParseError: On unterminated comments, mustaches, tags or quotes
        """
        while self._pos < self._source_len:
            if self._mode == LexerMode.DATA:
                yield from self._scan_data()
            elif self._mode == LexerMode.TAG:
                yield from self._scan_tag()
            else:
                yield from self._scan_raw_text()

        if self._mode == LexerMode.TAG:
            raise self._error(f"Unterminated start tag <{self._tag_name}>", self._pos)
        yield self._token(TokenType.EOF, "", self._pos, self._pos)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _token(self, type: TokenType, value: str, start: int, end: int) -> Token:
        lineno, col = self._index.position_of(start)
        return Token(type, value, start, end, lineno, col)

    def _error(self, message: str, offset: int) -> ParseError:
        lineno, col = self._index.position_of(min(offset, self._source_len))
        return ParseError(message, lineno, col, self._source_file)

    def _in_template(self) -> bool:
        return bool(self._open) and self._open[0] == TEMPLATE_ELEMENT

    def _is_name_start(self, pos: int) -> bool:
        return pos < self._source_len and self._source[pos].isalpha()

    def _scan_name(self, pos: int, stops: str) -> int:
        """Position of the first character in ``stops`` (or whitespace)."""
        source = self._source
        while pos < self._source_len and source[pos] not in _WHITESPACE and source[pos] not in stops:
            pos += 1
        return pos

    # =========================================================================
    # DATA mode
    # =========================================================================

    def _scan_data(self) -> Iterator[Token]:
        source = self._source
        pos = self._pos

        if source.startswith("<!--", pos):
            end = source.find("-->", pos + 4)
            if end == -1:
                raise self._error("Unterminated comment", pos)
            self._pos = end + 3
            yield self._token(TokenType.COMMENT, source[pos + 4 : end], pos, self._pos)
            return

        if source.startswith("</", pos) and self._is_name_start(pos + 2):
            yield self._scan_end_tag()
            return

        if source[pos] == "<" and self._is_name_start(pos + 1):
            name_end = self._scan_name(pos + 1, "/>")
            self._tag_name = source[pos + 1 : name_end]
            self._pos = name_end
            self._mode = LexerMode.TAG
            yield self._token(TokenType.TAG_OPEN, self._tag_name, pos, name_end)
            return

        if self._in_template() and source.startswith("{{", pos):
            end = source.find("}}", pos + 2)
            if end == -1:
                raise self._error("Unterminated mustache", pos)
            self._pos = end + 2
            yield self._token(TokenType.MUSTACHE, source[pos + 2 : end], pos, self._pos)
            return

        yield self._scan_text(pos)

    def _scan_text(self, pos: int) -> Token:
        """Text up to the next construct DATA mode recognises."""
        source = self._source
        mustaches = self._in_template()
        end = pos + 1
        while end < self._source_len:
            char = source[end]
            if char == "<" and (
                source.startswith("<!--", end)
                or self._is_name_start(end + 1)
                or (source.startswith("</", end) and self._is_name_start(end + 2))
            ):
                break
            if mustaches and char == "{" and source.startswith("{{", end):
                break
            end += 1
        self._pos = end
        return self._token(TokenType.TEXT, source[pos:end], pos, end)

    def _scan_end_tag(self) -> Token:
        source = self._source
        start = self._pos
        name_end = self._scan_name(start + 2, "/>")
        close = source.find(">", name_end)
        if close == -1:
            raise self._error("Unterminated end tag", start)
        name = source[start + 2 : name_end]
        self._pos = close + 1

        lowered = name.lower()
        if lowered in self._open:
            while self._open:
                if self._open.pop() == lowered:
                    break
        return self._token(TokenType.END_TAG, name, start, self._pos)

    # =========================================================================
    # TAG mode
    # =========================================================================

    def _scan_tag(self) -> Iterator[Token]:
        source = self._source
        pos = self._pos
        while pos < self._source_len and source[pos] in _WHITESPACE:
            pos += 1
        self._pos = pos
        if pos >= self._source_len:
            return

        if source[pos] == ">":
            self._pos = pos + 1
            self._enter_content(self._tag_name.lower())
            yield self._token(TokenType.TAG_CLOSE, ">", pos, pos + 1)
            return

        if source.startswith("/>", pos):
            self._pos = pos + 2
            self._mode = LexerMode.DATA
            yield self._token(TokenType.TAG_SELF_CLOSE, "/>", pos, pos + 2)
            return

        name_end = self._scan_attribute_name(pos)
        yield self._token(TokenType.ATTRIBUTE_NAME, source[pos:name_end], pos, name_end)

        # Optional `= value`, with whitespace allowed around `=`
        look = name_end
        while look < self._source_len and source[look] in _WHITESPACE:
            look += 1
        if look < self._source_len and source[look] == "=":
            look += 1
            while look < self._source_len and source[look] in _WHITESPACE:
                look += 1
            yield self._scan_attribute_value(look)
        else:
            self._pos = name_end

    def _scan_attribute_name(self, pos: int) -> int:
        """End of an attribute name; ``[...]`` dynamic arguments may hold anything."""
        source = self._source
        end = pos
        while end < self._source_len:
            char = source[end]
            if char == "[":
                close = source.find("]", end)
                if close == -1:
                    raise self._error("Unterminated dynamic argument", end)
                end = close + 1
                continue
            if char in _WHITESPACE or char in "=>" or source.startswith("/>", end):
                break
            end += 1
        if end == pos:
            # A stray character such as `/` on its own; consume it as a name
            end = pos + 1
        return end

    def _scan_attribute_value(self, pos: int) -> Token:
        source = self._source
        if pos >= self._source_len:
            raise self._error("Missing attribute value", pos)
        quote = source[pos]
        if quote in "\"'":
            close = source.find(quote, pos + 1)
            if close == -1:
                raise self._error("Unterminated attribute value", pos)
            self._pos = close + 1
            return self._token(TokenType.ATTRIBUTE_VALUE, source[pos + 1 : close], pos, self._pos)
        end = pos
        while end < self._source_len and source[end] not in _WHITESPACE and source[end] != ">":
            end += 1
        self._pos = end
        return self._token(TokenType.ATTRIBUTE_VALUE, source[pos:end], pos, end)

    def _enter_content(self, name: str) -> None:
        """Switch modes after a start tag's ``>``."""
        if name in VOID_ELEMENTS:
            self._mode = LexerMode.DATA
            return
        top_level = not self._open
        self._open.append(name)
        if name in RAW_TEXT_ELEMENTS or (top_level and name != TEMPLATE_ELEMENT):
            self._raw_end = name
            self._mode = LexerMode.RAW_TEXT
        else:
            self._mode = LexerMode.DATA

    # =========================================================================
    # RAW_TEXT mode
    # =========================================================================

    def _scan_raw_text(self) -> Iterator[Token]:
        source = self._source
        pos = self._pos
        end = self._find_raw_end(pos)
        self._mode = LexerMode.DATA
        self._pos = end
        if end > pos:
            yield self._token(TokenType.TEXT, source[pos:end], pos, end)

    def _find_raw_end(self, pos: int) -> int:
        """Offset of the ``</name`` that closes the raw-text element."""
        source = self._source
        lowered = source.lower()
        marker = f"</{self._raw_end}"
        while True:
            found = lowered.find(marker, pos)
            if found == -1:
                raise self._error(f"Unclosed element <{self._raw_end}>", self._pos)
            after = found + len(marker)
            if after >= self._source_len or source[after] in _WHITESPACE or source[after] in "/>":
                return found
            pos = after
