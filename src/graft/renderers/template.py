"""Canonical template renderer.

Renders any template node, with its subtree, in one fixed style:

- attribute values in double quotes, ``"`` escaped as ``&quot;``
- mustaches as ``{{ expr }}``
- directive keys in shorthand (``:``, ``@``, ``#``) when the key's name
  identifier was written that way, otherwise ``v-name:arg.mod``
- void elements without end tags, self-closing tags as ``<name />``
- text and comments verbatim
- Python expressions through ``ast.unparse``

Appends to a list and joins once at the end.

Thread Safety:
TemplateRenderer holds no per-render state. Safe for concurrent use.

"""

from __future__ import annotations

import ast

from graft.errors import RenderError
from graft.nodes import (
    DIRECTIVE_SHORTHANDS,
    VOID_ELEMENTS,
    AnyNode,
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


def escape_attribute(value: str) -> str:
    """Escape a value for a double-quoted attribute.

    The parser decodes entities, so ``&`` is escaped first to keep decoded
    text like ``&lt;`` from being read back as an entity.
    """
    return value.replace("&", "&amp;").replace('"', "&quot;")


def _identifier_text(node: VIdentifier) -> str:
    # Keep the authored spelling unless a plugin renamed the identifier
    if node.raw_name and node.raw_name.lower() == node.name.lower():
        return node.raw_name
    return node.name


def _element_name(node: VElement) -> str:
    if node.raw_name and node.raw_name.lower() == node.name.lower():
        return node.raw_name
    return node.name


class TemplateRenderer:
    """Render template nodes to markup.

    Usage:
            >>> from graft.parser import Parser
            >>> fragment = Parser("<template><br></template>").parse()
            >>> TemplateRenderer().render(fragment)
            '<template><br></template>'

    """

    __slots__ = ()

    def render(self, node: AnyNode) -> str:
        """Render a node and its subtree.

        Raises:
            RenderError: For node kinds the renderer does not know

        """
        out: list[str] = []
        self._render(node, out)
        return "".join(out)

    def _render(self, node: AnyNode, out: list[str]) -> None:
        match node:
            case VDocumentFragment():
                for child in node.children:
                    self._render(child, out)
            case VElement():
                self._render_element(node, out)
            case VStartTag():
                element = node.parent
                if not isinstance(element, VElement):
                    raise RenderError("VStartTag can only be rendered through its element")
                self._render_start_tag(_element_name(element), node, out)
            case VEndTag():
                element = node.parent
                if not isinstance(element, VElement):
                    raise RenderError("VEndTag can only be rendered through its element")
                out.append(f"</{_element_name(element)}>")
            case VAttribute():
                out.append(_identifier_text(node.key))
                if node.value is not None:
                    out.append("=")
                    self._render(node.value, out)
            case VDirective():
                self._render(node.key, out)
                if node.value is not None:
                    out.append("=")
                    self._render_quoted(node.value, out)
            case VDirectiveKey():
                self._render_directive_key(node, out)
            case VIdentifier():
                out.append(_identifier_text(node))
            case VLiteral():
                out.append(f'"{escape_attribute(node.value)}"')
            case VText():
                out.append(node.value)
            case VComment():
                out.append(f"<!--{node.value}-->")
            case VExpressionContainer():
                parent = node.parent
                if isinstance(parent, VDirective):
                    self._render_quoted(node, out)
                elif isinstance(parent, VDirectiveKey):
                    out.append(f"[{self._expression_text(node.expression)}]")
                else:
                    out.append(f"{{{{ {self._expression_text(node.expression)} }}}}")
            case VForExpression() | VOnExpression() | ast.AST():
                out.append(self._expression_text(node))
            case _:
                raise RenderError(f"Cannot render node of type {type(node).__name__}")

    def _render_element(self, node: VElement, out: list[str]) -> None:
        name = _element_name(node)
        self._render_start_tag(name, node.start_tag, out)
        if node.start_tag.self_closing:
            return
        for child in node.children:
            self._render(child, out)
        if node.name not in VOID_ELEMENTS:
            out.append(f"</{name}>")

    def _render_start_tag(self, name: str, node: VStartTag, out: list[str]) -> None:
        out.append(f"<{name}")
        for attribute in node.attributes:
            out.append(" ")
            self._render(attribute, out)
        out.append(" />" if node.self_closing else ">")

    def _render_directive_key(self, node: VDirectiveKey, out: list[str]) -> None:
        name = node.name
        if DIRECTIVE_SHORTHANDS.get(name.raw_name) == name.name and node.argument is not None:
            out.append(name.raw_name)
        else:
            out.append(f"v-{name.name}")
            if node.argument is not None:
                out.append(":")
        if node.argument is not None:
            if isinstance(node.argument, VExpressionContainer):
                out.append(f"[{self._expression_text(node.argument.expression)}]")
            else:
                self._render(node.argument, out)
        for modifier in node.modifiers:
            out.append(f".{_identifier_text(modifier)}")

    def _render_quoted(self, node: VExpressionContainer, out: list[str]) -> None:
        out.append(f'"{escape_attribute(self._expression_text(node.expression))}"')

    def _expression_text(self, expression: object) -> str:
        match expression:
            case None:
                return ""
            case VForExpression():
                left = ", ".join(ast.unparse(target) for target in expression.left)
                if len(expression.left) != 1:
                    left = f"({left})"
                right = ast.unparse(expression.right) if expression.right is not None else ""
                return f"{left} in {right}"
            case VOnExpression():
                return "; ".join(ast.unparse(statement) for statement in expression.body)
            case ast.AST():
                return ast.unparse(expression)
            case _:
                raise RenderError(f"Cannot render expression of type {type(expression).__name__}")
