"""Rename-names plugin for graft.

Renames Python names in script code and in template expressions.

Usage:
    >>> result = transform(code, "App.vue", ["rename-names"], {"rename": {"count": "total"}})

Options:
    rename: Mapping of old name to new name

Only name references (``ast.Name``) are renamed; attribute names,
parameters and import aliases are left alone.

Thread Safety:
This plugin is stateless and thread-safe.

"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from graft.nodes import AnyNode, VExpressionContainer
from graft.plugins import register_plugin
from graft.visitor import traverse

if TYPE_CHECKING:
    from graft.plugins import TransformContext


@register_plugin("rename-names")
class RenameNamesPlugin:
    """Plugin renaming ``ast.Name`` references in every layer."""

    @property
    def name(self) -> str:
        return "rename-names"

    def transform(self, context: TransformContext) -> int:
        renames: dict[str, str] = dict(context.opts.get("rename", {}))
        if not renames:
            return 0

        count = 0
        for module in context.script_trees:
            for node in ast.walk(module):
                if isinstance(node, ast.Name) and node.id in renames:
                    node.id = renames[node.id]
                    count += 1

        if context.template is not None:
            containers: list[VExpressionContainer] = []

            def enter(node: AnyNode, parent: AnyNode | None) -> None:
                nonlocal count
                if isinstance(node, ast.Name) and node.id in renames:
                    node.id = renames[node.id]
                    count += 1
                elif isinstance(node, VExpressionContainer):
                    containers.append(node)

            traverse(context.template, enter=enter)
            for container in containers:
                container.references = [renames.get(name, name) for name in container.references]

        return count
