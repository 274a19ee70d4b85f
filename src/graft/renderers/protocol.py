"""Renderer protocol: stable interface for node renderers.

Any renderer that implements ``render(node) -> str`` conforms to this
protocol. The patch engine calls it once per changed node and always asks
for the node's whole subtree.

Example:
    from graft.renderers.protocol import Renderer

    def replacement(renderer: Renderer, node) -> str:
        return renderer.render(node)

"""

from typing import Protocol

from graft.nodes import AnyNode


class Renderer(Protocol):
    """Protocol for node renderers.

    Implementations must be pure: the same node state always renders to the
    same text, and rendering never mutates the node.

    """

    def render(self, node: AnyNode) -> str:
        """Render a node and its subtree to canonical source text."""
        ...
