"""Tree traversal, parent assignment and visitor dispatch for graft trees.

A graft tree mixes template nodes (``graft.nodes.Node``) with the Python
``ast`` nodes held by expression containers. Everything here walks both
through one structural accessor, ``iter_fields``, which yields only authored
content: dataclass fields declared ``compare=False`` and ``ast`` position
attributes are never visited.

Example — collect every element name:

    names: list[str] = []

    def enter(node, parent):
        if isinstance(node, VElement):
            names.append(node.name)

    traverse(fragment, enter=enter)

Example — count directives with a visitor:

    class DirectiveCounter(BaseVisitor[None]):
        def __init__(self) -> None:
            self.count = 0

        def visit_directive(self, node: VDirective) -> None:
            self.count += 1

Thread Safety:
    Traversal functions keep no module state. Visitors may accumulate state;
    create one per thread.

"""

from __future__ import annotations

import ast
from collections.abc import Callable, Iterator
from dataclasses import fields
from functools import cache
from typing import Any

from graft.nodes import (
    AnyNode,
    Node,
    VAttribute,
    VComment,
    VDirective,
    VDirectiveKey,
    VDocumentFragment,
    VElement,
    VEndTag,
    VExpressionContainer,
    VForExpression,
    VIdentifier,
    VLiteral,
    VOnExpression,
    VStartTag,
    VText,
)


def is_node(value: object) -> bool:
    """True for template nodes and Python ``ast`` nodes."""
    return isinstance(value, (Node, ast.AST))


def node_type(node: AnyNode) -> str:
    """Kind tag shared by both layers (``"VElement"``, ``"Name"``...)."""
    return type(node).__name__


@cache
def _structural_fields(cls: type[Node]) -> tuple[str, ...]:
    return tuple(f.name for f in fields(cls) if f.compare)


def iter_fields(node: AnyNode) -> Iterator[tuple[str, Any]]:
    """Yield ``(name, value)`` for every structural field of a node.

    Template nodes report their comparable dataclass fields in declaration
    order (which is document order); ``ast`` nodes report ``_fields``.

    """
    if isinstance(node, Node):
        for name in _structural_fields(type(node)):
            yield name, getattr(node, name)
    else:
        for name in node._fields:
            yield name, getattr(node, name, None)


def iter_child_nodes(node: AnyNode) -> Iterator[AnyNode]:
    """Yield direct child nodes in document order."""
    for _, value in iter_fields(node):
        if is_node(value):
            yield value
        elif isinstance(value, list):
            for item in value:
                if is_node(item):
                    yield item


def traverse(
    root: AnyNode,
    enter: Callable[[AnyNode, AnyNode | None], None] | None = None,
    leave: Callable[[AnyNode], None] | None = None,
) -> None:
    """Visit every node depth-first in document order.

    Args:
        root: Node to start from (visited first, with parent None)
        enter: Called before a node's children as ``enter(node, parent)``
        leave: Called after a node's children as ``leave(node)``

    """

    def walk(node: AnyNode, parent: AnyNode | None) -> None:
        if enter is not None:
            enter(node, parent)
        for child in iter_child_nodes(node):
            walk(child, node)
        if leave is not None:
            leave(node)

    walk(root, None)


def set_parents(root: AnyNode) -> None:
    """Assign ``parent`` on every template node below ``root``.

    Must run after any structural mutation and before diffing. The root's
    own parent is left untouched.

    """

    def enter(node: AnyNode, parent: AnyNode | None) -> None:
        if parent is not None and isinstance(node, Node) and isinstance(parent, Node):
            node.parent = parent

    traverse(root, enter=enter)


def find_all(root: AnyNode, type: str | None = None, **attrs: Any) -> list[AnyNode]:
    """Collect nodes matching a kind tag and attribute values.

    Example:
        >>> scripts = find_all(fragment, type="VElement", name="script")

    """
    found: list[AnyNode] = []

    def enter(node: AnyNode, parent: AnyNode | None) -> None:
        if _matches(node, type, attrs):
            found.append(node)

    traverse(root, enter=enter)
    return found


def find_first(root: AnyNode, type: str | None = None, **attrs: Any) -> AnyNode | None:
    """First node in document order matching a kind tag and attributes."""
    matches = find_all(root, type, **attrs)
    return matches[0] if matches else None


def _matches(node: AnyNode, type: str | None, attrs: dict[str, Any]) -> bool:
    if type is not None and node_type(node) != type:
        return False
    missing = object()
    return all(getattr(node, key, missing) == value for key, value in attrs.items())


class BaseVisitor[T]:
    """Base template visitor with match-based dispatch.

    Subclass and override ``visit_*`` methods for node kinds you care about.
    Unhandled kinds fall through to ``visit_default``. Template children are
    walked automatically after the ``visit_*`` call. Python expressions are
    handed to ``visit_code`` once per expression root; walk them further with
    ``ast.NodeVisitor`` if needed.

    """

    def visit(self, node: AnyNode) -> T:
        """Dispatch to the appropriate ``visit_*`` method, then walk children."""
        result = self._dispatch(node)
        if isinstance(node, Node):
            for child in iter_child_nodes(node):
                self.visit(child)
        return result

    def visit_default(self, node: AnyNode) -> T:
        """Called for node kinds without a specific ``visit_*`` method."""
        return None  # type: ignore[return-value]

    def visit_document_fragment(self, node: VDocumentFragment) -> T:
        return self.visit_default(node)

    def visit_element(self, node: VElement) -> T:
        return self.visit_default(node)

    def visit_start_tag(self, node: VStartTag) -> T:
        return self.visit_default(node)

    def visit_end_tag(self, node: VEndTag) -> T:
        return self.visit_default(node)

    def visit_attribute(self, node: VAttribute) -> T:
        return self.visit_default(node)

    def visit_directive(self, node: VDirective) -> T:
        return self.visit_default(node)

    def visit_directive_key(self, node: VDirectiveKey) -> T:
        return self.visit_default(node)

    def visit_identifier(self, node: VIdentifier) -> T:
        return self.visit_default(node)

    def visit_literal(self, node: VLiteral) -> T:
        return self.visit_default(node)

    def visit_text(self, node: VText) -> T:
        return self.visit_default(node)

    def visit_comment(self, node: VComment) -> T:
        return self.visit_default(node)

    def visit_expression_container(self, node: VExpressionContainer) -> T:
        return self.visit_default(node)

    def visit_for_expression(self, node: VForExpression) -> T:
        return self.visit_default(node)

    def visit_on_expression(self, node: VOnExpression) -> T:
        return self.visit_default(node)

    def visit_code(self, node: ast.AST) -> T:
        return self.visit_default(node)

    def _dispatch(self, node: AnyNode) -> T:
        """Match-based dispatch to visit_* methods."""
        match node:
            case VDocumentFragment():
                return self.visit_document_fragment(node)
            case VElement():
                return self.visit_element(node)
            case VStartTag():
                return self.visit_start_tag(node)
            case VEndTag():
                return self.visit_end_tag(node)
            case VAttribute():
                return self.visit_attribute(node)
            case VDirective():
                return self.visit_directive(node)
            case VDirectiveKey():
                return self.visit_directive_key(node)
            case VIdentifier():
                return self.visit_identifier(node)
            case VLiteral():
                return self.visit_literal(node)
            case VText():
                return self.visit_text(node)
            case VComment():
                return self.visit_comment(node)
            case VExpressionContainer():
                return self.visit_expression_container(node)
            case VForExpression():
                return self.visit_for_expression(node)
            case VOnExpression():
                return self.visit_on_expression(node)
            case ast.AST():
                return self.visit_code(node)
            case _:
                return self.visit_default(node)
