"""Typed template nodes for graft.

Template nodes are mutable dataclasses: plugins rewrite them in place, then
the differ compares them against a snapshot taken right after parsing.

Design:
- Mutability: plugins assign fields and splice child lists directly
- Identity equality: ``eq=False`` keeps nodes hashable by identity;
  structural comparison lives in the differ
- Bookkeeping fields are declared with ``compare=False`` (location, parent,
  cached reference lists) and never take part in a diff
- Weak parents: ``parent`` is a lookup through ``weakref``, recomputed by
  ``graft.visitor.set_parents``; the tree owns children, never the reverse

Node Hierarchy:
Node (base)
├── VDocumentFragment (root)
├── VElement
│   ├── VStartTag
│   │   ├── VAttribute   key=VIdentifier, value=VLiteral
│   │   └── VDirective   key=VDirectiveKey, value=VExpressionContainer
│   └── VEndTag
├── VDirectiveKey
├── VIdentifier
├── VLiteral
├── VText
├── VComment
├── VExpressionContainer  expression=ast.expr | VForExpression | VOnExpression
├── VForExpression        left=[ast.expr], right=ast.expr
└── VOnExpression         body=[ast.stmt]

Expressions held by containers are Python ``ast`` nodes.

"""

from __future__ import annotations

import ast
import weakref
from dataclasses import dataclass, field
from typing import ClassVar

from graft.location import SourceLocation

HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

# Elements that never have an end tag
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Directive shorthand character -> directive name
DIRECTIVE_SHORTHANDS = {":": "bind", "@": "on", "#": "slot"}

_UNKNOWN = SourceLocation.unknown()


# =============================================================================
# Base Node
# =============================================================================


@dataclass(eq=False, slots=True, weakref_slot=True)
class Node:
    """Base class for all template nodes.

    All nodes track their source location; ``range`` is the half-open offset
    span in the original source at parse time.

    """

    location: SourceLocation = field(default=_UNKNOWN, compare=False, repr=False, kw_only=True)
    _parent: weakref.ref[Node] | None = field(default=None, init=False, compare=False, repr=False)

    @property
    def type(self) -> str:
        """Node kind tag (the class name, e.g. ``"VElement"``)."""
        return type(self).__name__

    @property
    def range(self) -> tuple[int, int]:
        return self.location.range

    @property
    def parent(self) -> Node | None:
        """Structural container, or None for the root and detached nodes."""
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, value: Node | None) -> None:
        self._parent = None if value is None else weakref.ref(value)


# =============================================================================
# Leaf Nodes
# =============================================================================


@dataclass(eq=False, slots=True)
class VIdentifier(Node):
    """Attribute name, directive name, argument or modifier.

    ``raw_name`` is what gets printed; for directive shorthands it is the
    shorthand itself (``":"``, ``"@"``, ``"#"``).

    """

    name: str
    raw_name: str = ""

    def __post_init__(self) -> None:
        if not self.raw_name:
            self.raw_name = self.name


@dataclass(eq=False, slots=True)
class VLiteral(Node):
    """Plain attribute value (without quotes)."""

    value: str


@dataclass(eq=False, slots=True)
class VText(Node):
    """Raw text, printed verbatim."""

    value: str


@dataclass(eq=False, slots=True)
class VComment(Node):
    """HTML comment; ``value`` excludes the ``<!--`` and ``-->`` delimiters."""

    value: str


@dataclass(eq=False, slots=True)
class VEndTag(Node):
    """Closing tag of an element. Renders only through its element."""


# =============================================================================
# Expressions
# =============================================================================


@dataclass(eq=False, slots=True)
class VForExpression(Node):
    """``v-for`` value.

    Template: v-for="(item, index) in items"

    """

    left: list[ast.expr] = field(default_factory=list)
    right: ast.expr | None = None


@dataclass(eq=False, slots=True)
class VOnExpression(Node):
    """``v-on`` handler made of statements.

    Template: @click="count += 1; notify()"

    """

    body: list[ast.stmt] = field(default_factory=list)


@dataclass(eq=False, slots=True)
class VExpressionContainer(Node):
    """Mustache, directive value or dynamic directive argument.

    Template: {{ expr }}, :prop="expr", v-bind:[expr]

    ``references`` caches the names the expression reads; it is derived data
    and excluded from comparison.

    """

    expression: ast.expr | VForExpression | VOnExpression | None = None
    references: list[str] = field(default_factory=list, compare=False, repr=False)


# =============================================================================
# Attributes
# =============================================================================


@dataclass(eq=False, slots=True)
class VDirectiveKey(Node):
    """Directive name with argument and modifiers.

    Template: v-name:argument.modifier1.modifier2

    """

    name: VIdentifier
    argument: VExpressionContainer | VIdentifier | None = None
    modifiers: list[VIdentifier] = field(default_factory=list)


@dataclass(eq=False, slots=True)
class VAttribute(Node):
    """Plain attribute: ``key="value"`` or a bare ``key``."""

    directive: ClassVar[bool] = False

    key: VIdentifier
    value: VLiteral | None = None


@dataclass(eq=False, slots=True)
class VDirective(Node):
    """Directive attribute: ``v-if``, ``:prop``, ``@event``, ``#slot``..."""

    directive: ClassVar[bool] = True

    key: VDirectiveKey
    value: VExpressionContainer | None = None


# =============================================================================
# Elements
# =============================================================================


@dataclass(eq=False, slots=True)
class VStartTag(Node):
    """Opening tag. Not a standalone renderable unit; prints through its element."""

    attributes: list[VAttribute | VDirective] = field(default_factory=list)
    self_closing: bool = False


@dataclass(eq=False, slots=True)
class VElement(Node):
    """Element with start tag, children and (unless void/self-closing) end tag.

    ``name`` is lower-cased; ``raw_name`` keeps the authored spelling.
    ``variables`` caches names introduced by ``v-for``/``v-slot``.

    """

    name: str
    raw_name: str
    start_tag: VStartTag
    children: list[TemplateChild] = field(default_factory=list)
    end_tag: VEndTag | None = None
    namespace: str = HTML_NAMESPACE
    variables: list[str] = field(default_factory=list, compare=False, repr=False)


@dataclass(eq=False, slots=True)
class VDocumentFragment(Node):
    """Root node holding the top-level children of a component file."""

    children: list[TemplateChild] = field(default_factory=list)


# PEP 695 type aliases
type TemplateChild = VElement | VText | VComment | VExpressionContainer

type Expression = ast.expr | VForExpression | VOnExpression

# Everything a traversal may visit: template nodes and embedded Python nodes
type AnyNode = Node | ast.AST
