"""Template parser producing typed, mutable nodes.

Consumes the token stream from the Lexer and builds a VDocumentFragment.
Every node gets the ``[start, end)`` range of the text it was read from;
the patch engine splices against those ranges.

Ranges:
- element: ``<`` of its start tag through the end of its end tag
- start tag / end tag: the tag text
- attribute: name through value (quotes included)
- directive key: the full attribute name; its name identifier covers the
  directive name without ``v-`` (or the shorthand character)
- directive value / mustache containers: including quotes / braces

Thread Safety:
Parser instances are single-use. Create one per source string.
Configuration is read from ContextVar (thread-local).

"""

from __future__ import annotations

import ast
import html
from dataclasses import dataclass, field

from graft.config import get_transform_config
from graft.errors import ParseError
from graft.expressions import (
    parse_code,
    parse_directive_value,
    parse_expression,
    references_of,
    variables_of,
)
from graft.lexer import Lexer
from graft.location import LineIndex, SourceLocation
from graft.nodes import (
    DIRECTIVE_SHORTHANDS,
    HTML_NAMESPACE,
    VOID_ELEMENTS,
    VAttribute,
    VComment,
    VDirective,
    VDirectiveKey,
    VDocumentFragment,
    VElement,
    VEndTag,
    VExpressionContainer,
    VIdentifier,
    VLiteral,
    VStartTag,
    VText,
)
from graft.tokens import Token, TokenType
from graft.utils.logger import get_logger
from graft.visitor import set_parents

logger = get_logger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
MATHML_NAMESPACE = "http://www.w3.org/1998/Math/MathML"


@dataclass(slots=True)
class _OpenElement:
    element: VElement
    start: int


class Parser:
    """Parser for component markup.

    Usage:
            >>> fragment = Parser('<template><p v-if="ok">{{ msg }}</p></template>').parse()
            >>> fragment.children[0].children[0].name
            'p'

    Raises ParseError for unterminated constructs, unmatched end tags and
    elements left open at the end of input.

    """

    __slots__ = ("_source", "_source_file", "_index", "_tokens", "_pos")

    def __init__(self, source: str, source_file: str | None = None) -> None:
        self._source = source
        self._source_file = source_file
        self._index = LineIndex(source)
        self._tokens: list[Token] = []
        self._pos = 0

    def parse(self) -> VDocumentFragment:
        """Parse the source into a document fragment with parents assigned."""
        self._tokens = list(Lexer(self._source, self._source_file).tokenize())
        self._pos = 0

        fragment = VDocumentFragment(location=self._location(0, len(self._source)))
        stack: list[_OpenElement] = []

        while True:
            token = self._advance()
            children = stack[-1].element.children if stack else fragment.children
            match token.type:
                case TokenType.EOF:
                    break
                case TokenType.TEXT:
                    children.append(VText(value=token.value, location=self._token_location(token)))
                case TokenType.COMMENT:
                    children.append(VComment(value=token.value, location=self._token_location(token)))
                case TokenType.MUSTACHE:
                    children.append(self._parse_mustache(token))
                case TokenType.TAG_OPEN:
                    parent = stack[-1].element if stack else None
                    element = self._parse_element(token, parent)
                    children.append(element)
                    if element.end_tag is not None:
                        stack.append(_OpenElement(element, token.start))
                case TokenType.END_TAG:
                    self._close_element(token, stack)
                case _:
                    raise self._error(f"Unexpected {token.type.name} token", token)

        if stack:
            open_element = stack[-1]
            raise self._error(
                f"Unclosed element <{open_element.element.raw_name}>",
                None,
                offset=open_element.start,
            )

        set_parents(fragment)
        return fragment

    # =========================================================================
    # Token navigation
    # =========================================================================

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _location(self, start: int, end: int) -> SourceLocation:
        return self._index.location(start, end, self._source_file)

    def _token_location(self, token: Token) -> SourceLocation:
        return self._location(token.start, token.end)

    def _error(self, message: str, token: Token | None, offset: int | None = None) -> ParseError:
        if offset is None and token is not None:
            offset = token.start
        lineno, col = self._index.position_of(offset or 0)
        return ParseError(message, lineno, col, self._source_file)

    # =========================================================================
    # Elements
    # =========================================================================

    def _parse_element(self, open_token: Token, parent: VElement | None) -> VElement:
        attributes: list[VAttribute | VDirective] = []
        while True:
            token = self._advance()
            if token.type == TokenType.ATTRIBUTE_NAME:
                value = self._advance() if self._peek().type == TokenType.ATTRIBUTE_VALUE else None
                attributes.append(self._parse_attribute(token, value))
            elif token.type in (TokenType.TAG_CLOSE, TokenType.TAG_SELF_CLOSE):
                break
            else:
                raise self._error(f"Unterminated start tag <{open_token.value}>", open_token)

        self_closing = token.type == TokenType.TAG_SELF_CLOSE
        start_tag = VStartTag(
            attributes=attributes,
            self_closing=self_closing,
            location=self._location(open_token.start, token.end),
        )
        name = open_token.value.lower()
        element = VElement(
            name=name,
            raw_name=open_token.value,
            start_tag=start_tag,
            end_tag=None if self_closing or name in VOID_ELEMENTS else VEndTag(),
            namespace=_namespace_for(name, parent),
            location=start_tag.location,
        )
        for attribute in attributes:
            if isinstance(attribute, VDirective) and attribute.value is not None:
                element.variables.extend(
                    variables_of(attribute.key.name.name, attribute.value.expression)
                )
        return element

    def _close_element(self, token: Token, stack: list[_OpenElement]) -> None:
        name = token.value.lower()
        if not stack:
            raise self._error(f"Unexpected end tag </{token.value}>", token)
        open_element = stack[-1]
        element = open_element.element
        if element.name != name:
            raise self._error(
                f"Unexpected end tag </{token.value}>, expected </{element.raw_name}>", token
            )
        stack.pop()
        element.end_tag = VEndTag(location=self._token_location(token))
        element.location = self._location(open_element.start, token.end)

    # =========================================================================
    # Attributes and directives
    # =========================================================================

    def _parse_attribute(self, name: Token, value: Token | None) -> VAttribute | VDirective:
        end = value.end if value is not None else name.end
        location = self._location(name.start, end)
        raw = name.value

        if raw.startswith("v-") or (len(raw) > 1 and raw[0] in DIRECTIVE_SHORTHANDS):
            key = self._parse_directive_key(name)
            container = None
            if value is not None:
                container = self._parse_directive_value(key.name.name, value)
            return VDirective(key=key, value=container, location=location)

        key = VIdentifier(name=raw.lower(), raw_name=raw, location=self._token_location(name))
        literal = None
        if value is not None:
            literal = VLiteral(value=html.unescape(value.value), location=self._token_location(value))
        return VAttribute(key=key, value=literal, location=location)

    def _parse_directive_key(self, token: Token) -> VDirectiveKey:
        raw = token.value
        start = token.start
        arg_start: int | None = None
        if raw.startswith("v-"):
            stop = _find_separator(raw, 2)
            name = VIdentifier(
                name=raw[2:stop],
                location=self._location(start + 2, start + stop),
            )
            if raw.startswith(":", stop):
                arg_start = stop + 1
        else:
            # Shorthands take the argument directly: `:href`, `@click`, `#item`
            stop = 1
            name = VIdentifier(
                name=DIRECTIVE_SHORTHANDS[raw[0]],
                raw_name=raw[0],
                location=self._location(start, start + 1),
            )
            if not raw.startswith(".", 1):
                arg_start = 1

        argument: VExpressionContainer | VIdentifier | None = None
        pos = stop
        if arg_start is not None:
            if raw.startswith("[", arg_start):
                arg_end = raw.index("]", arg_start) + 1
                argument = VExpressionContainer(
                    expression=parse_expression(
                        raw[arg_start + 1 : arg_end - 1],
                        self._location(start + arg_start + 1, start + arg_end - 1),
                    ),
                    location=self._location(start + arg_start, start + arg_end),
                )
                argument.references = references_of(argument.expression)
            else:
                arg_end = _find_separator(raw, arg_start, colon=False)
                argument = VIdentifier(
                    name=raw[arg_start:arg_end],
                    location=self._location(start + arg_start, start + arg_end),
                )
            pos = arg_end

        modifiers: list[VIdentifier] = []
        while raw.startswith(".", pos):
            mod_start = pos + 1
            mod_end = _find_separator(raw, mod_start, colon=False)
            modifiers.append(
                VIdentifier(
                    name=raw[mod_start:mod_end],
                    location=self._location(start + mod_start, start + mod_end),
                )
            )
            pos = mod_end

        return VDirectiveKey(
            name=name,
            argument=argument,
            modifiers=modifiers,
            location=self._token_location(token),
        )

    def _parse_directive_value(self, directive: str, token: Token) -> VExpressionContainer:
        quoted = self._source[token.start] in "\"'"
        inner_start = token.start + 1 if quoted else token.start
        text = html.unescape(token.value)
        expression = parse_directive_value(
            directive,
            text,
            self._location(inner_start, inner_start + len(token.value)),
        )
        container = VExpressionContainer(
            expression=expression,
            location=self._token_location(token),
        )
        container.references = references_of(expression)
        return container

    def _parse_mustache(self, token: Token) -> VExpressionContainer:
        inner_start = token.start + 2
        location = self._location(inner_start, inner_start + len(token.value))
        expression = parse_expression(token.value, location) if token.value.strip() else None
        container = VExpressionContainer(
            expression=expression,
            location=self._token_location(token),
        )
        container.references = references_of(expression)
        return container


def _find_separator(raw: str, pos: int, *, colon: bool = True) -> int:
    """End of a directive name segment (next `.`, or `:` when ``colon``)."""
    stops = ".:" if colon else "."
    while pos < len(raw) and raw[pos] not in stops:
        pos += 1
    return pos


def _namespace_for(name: str, parent: VElement | None) -> str:
    if name == "svg":
        return SVG_NAMESPACE
    if name == "math":
        return MATHML_NAMESPACE
    if parent is not None and parent.name != "foreignobject":
        return parent.namespace
    return HTML_NAMESPACE


# =============================================================================
# Components
# =============================================================================


@dataclass(slots=True)
class Component:
    """A parsed component file.

    Attributes:
        fragment: Markup tree of the whole file
        scripts: One parsed module per top-level host element, in order
        script_sources: The host elements' text, exactly as in the file
        script_line_offsets: Document line preceding each script's first line

    """

    fragment: VDocumentFragment
    scripts: list[ast.Module] = field(default_factory=list)
    script_sources: list[str] = field(default_factory=list)
    script_line_offsets: list[int] = field(default_factory=list)


def host_elements(fragment: VDocumentFragment, name: str) -> list[VElement]:
    """Top-level elements holding embedded code, in document order."""
    return [
        child
        for child in fragment.children
        if isinstance(child, VElement) and child.name == name
    ]


def host_text(element: VElement) -> VText | None:
    """The single text child of a host element, if any."""
    if element.children and isinstance(element.children[0], VText):
        return element.children[0]
    return None


def parse_component(code: str, source_file: str | None = None) -> Component:
    """Parse a component file into its markup tree and embedded modules.

    Each embedded script is parsed with blank-line padding so syntax errors
    and node line numbers match the component file.

    Raises:
        ParseError: Malformed markup, template expression or script code

    """
    fragment = Parser(code, source_file).parse()
    component = Component(fragment=fragment)
    host = get_transform_config().host_element
    for element in host_elements(fragment, host):
        text = host_text(element)
        source = text.value if text is not None else ""
        padding = text.location.lineno - 1 if text is not None else 0
        component.scripts.append(parse_code(source, padding, source_file))
        component.script_sources.append(source)
        component.script_line_offsets.append(padding)
    logger.debug("Parsed %s: %d embedded script(s)", source_file or "<component>", len(component.scripts))
    return component
