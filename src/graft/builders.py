"""Factories for template nodes.

Plugins that insert markup build fresh nodes here instead of reusing nodes
from elsewhere in the tree; a node may appear only once per tree. Built
nodes carry an unknown location and no parent until
``graft.visitor.set_parents`` runs.

Example:
    >>> from graft import builders as b
    >>> el = b.v_element(
    ...     "span",
    ...     b.v_start_tag([b.v_attribute(b.v_identifier("class"), b.v_literal("x"))]),
    ...     [b.v_text("hi")],
    ... )
    >>> el.end_tag is not None
    True

"""

from __future__ import annotations

import ast

from graft.nodes import (
    HTML_NAMESPACE,
    VOID_ELEMENTS,
    TemplateChild,
    VAttribute,
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

__all__ = [
    "v_attribute",
    "v_directive",
    "v_directive_key",
    "v_document_fragment",
    "v_element",
    "v_end_tag",
    "v_expression_container",
    "v_for_expression",
    "v_identifier",
    "v_literal",
    "v_on_expression",
    "v_start_tag",
    "v_text",
]


def v_attribute(key: VIdentifier, value: VLiteral | None = None) -> VAttribute:
    """Plain attribute; ``value=None`` renders as a bare name."""
    return VAttribute(key=key, value=value)


def v_directive(key: VDirectiveKey, value: VExpressionContainer | None = None) -> VDirective:
    return VDirective(key=key, value=value)


def v_directive_key(
    name: VIdentifier,
    argument: VExpressionContainer | VIdentifier | None = None,
    modifiers: list[VIdentifier] | None = None,
) -> VDirectiveKey:
    """Directive key: ``v-name:argument.modifier1.modifier2``.

    Use ``v_identifier("bind", ":")`` as ``name`` to print the shorthand.
    """
    return VDirectiveKey(name=name, argument=argument, modifiers=list(modifiers or []))


def v_document_fragment(children: list[TemplateChild]) -> VDocumentFragment:
    return VDocumentFragment(children=children)


def v_end_tag() -> VEndTag:
    return VEndTag()


def v_element(
    name: str,
    start_tag: VStartTag,
    children: list[TemplateChild] | None = None,
    namespace: str = HTML_NAMESPACE,
) -> VElement:
    """Element with an end tag unless self-closing or void.

    Args:
        name: Element name (``div``, ``MyComponent``); also used as raw name
        start_tag: The opening tag
        children: Child nodes (ignored by rendering when self-closing)
        namespace: Element namespace

    """
    closes = not (start_tag.self_closing or name.lower() in VOID_ELEMENTS)
    return VElement(
        name=name.lower(),
        raw_name=name,
        start_tag=start_tag,
        children=list(children or []),
        end_tag=v_end_tag() if closes else None,
        namespace=namespace,
    )


def v_expression_container(
    expression: ast.expr | VForExpression | VOnExpression | None,
) -> VExpressionContainer:
    return VExpressionContainer(expression=expression)


def v_for_expression(left: list[ast.expr], right: ast.expr) -> VForExpression:
    """``v-for`` value: ``left`` targets ``in`` the ``right`` iterable."""
    return VForExpression(left=left, right=right)


def v_identifier(name: str, raw_name: str | None = None) -> VIdentifier:
    """Identifier; ``raw_name`` is what prints when it differs from ``name``."""
    return VIdentifier(name=name, raw_name=raw_name or name)


def v_literal(value: str) -> VLiteral:
    return VLiteral(value=value)


def v_start_tag(
    attributes: list[VAttribute | VDirective] | None = None,
    self_closing: bool = False,
) -> VStartTag:
    """Opening tag. Void elements should not be self-closing."""
    return VStartTag(attributes=list(attributes or []), self_closing=self_closing)


def v_text(value: str) -> VText:
    return VText(value=value)


def v_on_expression(body: list[ast.stmt]) -> VOnExpression:
    return VOnExpression(body=body)
