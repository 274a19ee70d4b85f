"""Python code renderer.

Renders ``ast`` nodes through ``ast.unparse``. When the text replaces a span
inside existing code, :meth:`CodeRenderer.render_at` fits it to the spot:

- continuation lines are indented like the line the span starts on
- an operator expression nested in another expression is parenthesised,
  since the original span may have relied on its surroundings for grouping

Thread Safety:
CodeRenderer holds no state. Safe for concurrent use.

"""

from __future__ import annotations

import ast

from graft.errors import RenderError
from graft.nodes import AnyNode

# Expressions that never need grouping where an operand is expected
_ATOMIC = (
    ast.Name,
    ast.Constant,
    ast.Attribute,
    ast.Subscript,
    ast.Call,
    ast.List,
    ast.Tuple,
    ast.Dict,
    ast.Set,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
    ast.JoinedStr,
    ast.Starred,
    ast.Slice,
)


class CodeRenderer:
    """Render Python ``ast`` nodes.

    Usage:
            >>> CodeRenderer().render(ast.parse("x  =  1").body[0])
            'x = 1'

    """

    __slots__ = ()

    def render(self, node: AnyNode) -> str:
        """Render a node and its subtree.

        Raises:
            RenderError: If the node is not a Python ``ast`` node

        """
        if not isinstance(node, ast.AST):
            raise RenderError(f"Cannot render node of type {type(node).__name__} as code")
        return ast.unparse(node)

    def render_at(
        self,
        node: AnyNode,
        *,
        indent: str = "",
        parent: AnyNode | None = None,
        field: str | None = None,
    ) -> str:
        """Render a node to replace a span of existing code.

        Args:
            node: Node to render
            indent: Leading whitespace of the line the span starts on
            parent: The node's structural container, if known
            field: The parent's field holding the node

        """
        text = self.render(node)
        if needs_parentheses(node, parent, field):
            text = f"({text})"
        if indent and "\n" in text:
            first, *rest = text.split("\n")
            text = "\n".join([first, *(f"{indent}{line}" if line else line for line in rest)])
        return text


def needs_parentheses(node: AnyNode, parent: AnyNode | None, field: str | None = None) -> bool:
    """True when a compound expression sits inside another expression."""
    if not isinstance(node, ast.expr) or isinstance(node, _ATOMIC):
        return False
    if not isinstance(parent, ast.expr):
        return False
    # Plain call arguments are already delimited by commas and parentheses
    if isinstance(parent, ast.Call) and field == "args":
        return isinstance(node, (ast.Yield, ast.YieldFrom))
    return True
