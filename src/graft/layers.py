"""Tree layers: how a tree maps back onto its source text.

A layer answers three questions for the reducer and the patch applier:

- which nodes can be located in the source (``is_addressable``)
- where a snapshot node sits in the original text (``node_range``)
- what text replaces a changed node (``render``)

TemplateLayer addresses template nodes; Python expressions inside them are
never addressed on their own, so a change inside one promotes to its
expression container. CodeLayer addresses ``ast`` nodes that carry
positions; operators, contexts and other position-less helpers promote to
the nearest positioned ancestor.

Path access is typed: steps resolve through structural fields and sequence
indices only, and a step that does not resolve raises
DiffInconsistencyError.

"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Protocol

from graft.config import get_transform_config
from graft.errors import DiffInconsistencyError
from graft.location import LineIndex
from graft.nodes import AnyNode, Node
from graft.renderers.code import CodeRenderer
from graft.renderers.protocol import Renderer
from graft.renderers.template import TemplateRenderer
from graft.visitor import is_node, iter_fields

if TYPE_CHECKING:
    from graft.differ import Path
    from graft.reducer import ChangedNode


class Layer(Protocol):
    """What the reducer and patch applier need from one tree."""

    snapshot: AnyNode
    live: AnyNode

    def is_addressable(self, node: object) -> bool: ...

    def node_range(self, node: AnyNode) -> tuple[int, int]: ...

    def root_range(self) -> tuple[int, int]: ...

    def root_change_depth(self) -> int: ...

    def render(self, record: ChangedNode) -> str: ...

    def render_root(self) -> str: ...


def resolve(root: AnyNode, path: Path) -> object:
    """Value at ``path`` below ``root``.

    Raises:
        DiffInconsistencyError: If a step names no structural field or an
            index is out of range

    """
    value: object = root
    for depth, step in enumerate(path):
        if isinstance(step, int):
            if not isinstance(value, list) or not -len(value) <= step < len(value):
                raise DiffInconsistencyError(path[: depth + 1], "index out of range")
            value = value[step]
        elif is_node(value):
            fields = dict(iter_fields(value))  # type: ignore[arg-type]
            if step not in fields:
                raise DiffInconsistencyError(path[: depth + 1], "no such field")
            value = fields[step]
        else:
            raise DiffInconsistencyError(path[: depth + 1], "step into a non-node value")
    return value


def parent_step(path: Path) -> tuple[Path, str | None]:
    """Path of the node containing ``path``'s target, and the field holding it."""
    end = len(path) - 1
    while end >= 0 and isinstance(path[end], int):
        end -= 1
    if end < 0:
        return (), None
    return path[:end], path[end]  # type: ignore[return-value]


class TemplateLayer:
    """Markup layer of a component file."""

    __slots__ = ("snapshot", "live", "_renderer")

    def __init__(self, snapshot: Node, live: Node) -> None:
        self.snapshot = snapshot
        self.live = live
        self._renderer: Renderer = TemplateRenderer()

    def is_addressable(self, node: object) -> bool:
        return isinstance(node, Node)

    def node_range(self, node: AnyNode) -> tuple[int, int]:
        return node.range  # type: ignore[union-attr]

    def root_range(self) -> tuple[int, int]:
        return self.node_range(self.snapshot)

    def root_change_depth(self) -> int:
        return get_transform_config().root_change_depth

    def render(self, record: ChangedNode) -> str:
        return self._renderer.render(record.node)

    def render_root(self) -> str:
        return self._renderer.render(self.live)


class CodeLayer:
    """A Python module: a flat file or one embedded script.

    ``source`` is the module's own text. ``line_offset`` is the number of
    padding lines the module was parsed with, so ``ast`` line numbers map
    back onto ``source``.

    """

    __slots__ = ("snapshot", "live", "_source", "_index", "_renderer")

    def __init__(
        self,
        snapshot: ast.Module,
        live: ast.Module,
        source: str,
        line_offset: int = 0,
    ) -> None:
        self.snapshot = snapshot
        self.live = live
        self._source = source
        self._index = LineIndex(source, line_offset)
        self._renderer = CodeRenderer()

    def is_addressable(self, node: object) -> bool:
        if node is self.snapshot:
            return True
        return (
            isinstance(node, ast.AST)
            and getattr(node, "lineno", None) is not None
            and getattr(node, "end_lineno", None) is not None
        )

    def node_range(self, node: AnyNode) -> tuple[int, int]:
        if node is self.snapshot:
            return self.root_range()
        index = self._index
        start = index.offset_of(node.lineno, node.col_offset, utf8_columns=True)  # type: ignore[union-attr]
        end = index.offset_of(node.end_lineno, node.end_col_offset, utf8_columns=True)  # type: ignore[union-attr]
        decorators = getattr(node, "decorator_list", None)
        if decorators:
            first = decorators[0]
            deco_start = index.offset_of(first.lineno, first.col_offset, utf8_columns=True)
            at = self._source.rfind("@", index.line_start(first.lineno), deco_start)
            start = at if at != -1 else deco_start
        return start, end

    def root_range(self) -> tuple[int, int]:
        return 0, len(self._source)

    def root_change_depth(self) -> int:
        return get_transform_config().code_root_change_depth

    def render(self, record: ChangedNode) -> str:
        if not record.path:
            return self.render_root()
        parent_path, field = parent_step(record.path)
        parent = resolve(self.live, parent_path)
        return self._renderer.render_at(
            record.node,
            indent=self._index.indentation_at(record.start),
            parent=parent,  # type: ignore[arg-type]
            field=field,
        )

    def render_root(self) -> str:
        text = self._renderer.render(self.live)
        if self._source.endswith("\n") and not text.endswith("\n"):
            text += "\n"
        return text
