"""graft renderers.

Renderers turn nodes back into canonical source text.

Available Renderers:
- TemplateRenderer: markup nodes (and the Python expressions they hold)
- CodeRenderer: Python ``ast`` nodes from scripts and flat modules

Thread Safety:
Renderers hold no state. Safe for concurrent use from multiple threads.

"""

from __future__ import annotations

import ast

from graft.nodes import AnyNode
from graft.renderers.code import CodeRenderer
from graft.renderers.protocol import Renderer
from graft.renderers.template import TemplateRenderer

__all__ = ["CodeRenderer", "Renderer", "TemplateRenderer", "render"]

_TEMPLATE = TemplateRenderer()
_CODE = CodeRenderer()


def render(node: AnyNode) -> str:
    """Render any node with the renderer for its layer.

    Example:
        >>> render(ast.parse("f( x )").body[0])
        'f(x)'

    """
    if isinstance(node, ast.AST):
        return _CODE.render(node)
    return _TEMPLATE.render(node)
