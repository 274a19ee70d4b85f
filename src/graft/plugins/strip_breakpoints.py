"""Strip-breakpoints plugin for graft.

Removes debugger calls left in script code:

    breakpoint()
    pdb.set_trace()

A block left empty gets a ``pass`` statement.

Thread Safety:
This plugin is stateless and thread-safe.

"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from graft.plugins import register_plugin

if TYPE_CHECKING:
    from graft.plugins import TransformContext

# Statement-list fields that may hold a debugger call
_BODY_FIELDS = ("body", "orelse", "finalbody")


def is_breakpoint(statement: ast.stmt) -> bool:
    """True for ``breakpoint()`` and ``<module>.set_trace()`` statements."""
    if not isinstance(statement, ast.Expr) or not isinstance(statement.value, ast.Call):
        return False
    func = statement.value.func
    if isinstance(func, ast.Name):
        return func.id == "breakpoint"
    return isinstance(func, ast.Attribute) and func.attr == "set_trace"


def _needs_statement(node: ast.AST, field: str) -> bool:
    if field == "body":
        return not isinstance(node, ast.Module)
    # `try` without handlers must keep its `finally` block
    return field == "finalbody" and not getattr(node, "handlers", None)


@register_plugin("strip-breakpoints")
class StripBreakpointsPlugin:
    """Plugin removing debugger calls from every script."""

    @property
    def name(self) -> str:
        return "strip-breakpoints"

    def transform(self, context: TransformContext) -> int:
        count = 0
        for module in context.script_trees:
            for node in list(ast.walk(module)):
                for field in _BODY_FIELDS:
                    statements = getattr(node, field, None)
                    if not isinstance(statements, list) or not statements:
                        continue
                    kept = [s for s in statements if not (isinstance(s, ast.stmt) and is_breakpoint(s))]
                    removed = len(statements) - len(kept)
                    if not removed:
                        continue
                    count += removed
                    if not kept and _needs_statement(node, field):
                        kept = [ast.Pass()]
                    statements[:] = kept
        return count
