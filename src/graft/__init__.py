"""
graft — Surgical source rewriting for Python codemods.

Parses a file into a tree, lets codemod plugins mutate the tree in place,
then writes back only the spans that actually changed. Everything a plugin
did not touch (formatting, whitespace, comments) is preserved byte for byte.

Two kinds of files are supported:

- component files (``.vue`` by default): Vue-style markup whose template
  expressions and ``<script>`` blocks are Python
- everything else: a plain Python module

Quick Start:
    >>> from graft import transform
    >>> result = transform(code, "app.py", ["strip-breakpoints"])
    >>> result.code, result.stats

    >>> # Or build a reusable codemod
    >>> from graft import Codemod
    >>> rename = Codemod(["rename-names"], rename={"count": "total"})
    >>> rename(component_source, "Counter.vue").code

Writing a plugin:
    >>> class Uppercase:
    ...     name = "uppercase"
    ...     def transform(self, context):
    ...         count = 0
    ...         for text in context.utils.find_all(context.template, type="VText"):
    ...             ...
    ...         return count

"""

from collections.abc import Mapping, Sequence
from typing import Any

from graft import builders
from graft.config import (
    TransformConfig,
    get_transform_config,
    reset_transform_config,
    set_transform_config,
    transform_config_context,
)
from graft.differ import Change, ChangeKind, diff, snapshot
from graft.errors import (
    DiffInconsistencyError,
    GraftError,
    ParseError,
    PluginError,
    RenderError,
)
from graft.expressions import parse_code, parse_expression
from graft.layers import CodeLayer, TemplateLayer
from graft.lexer import Lexer
from graft.location import LineIndex, SourceLocation
from graft.nodes import (
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
from graft.parser import Component, Parser, parse_component
from graft.patch import SourceBuffer, apply_change_set
from graft.plugins import (
    BUILTIN_PLUGINS,
    CodemodPlugin,
    TransformContext,
    get_plugin,
    register_plugin,
    resolve_plugins,
)
from graft.reducer import ChangedNode, ChangeSet, reduce_changes
from graft.renderers import CodeRenderer, TemplateRenderer, render
from graft.tokens import Token, TokenType
from graft.transform import TransformResult, transform
from graft.visitor import BaseVisitor, find_all, find_first, set_parents, traverse

__version__ = "0.1.0"


class Codemod:
    """Reusable set of plugins and options.

    Usage:
        >>> codemod = Codemod(["strip-breakpoints"])
        >>> result = codemod("def f():\\n    breakpoint()\\n", "f.py")
        >>> result.stats
        [('strip-breakpoints', 1)]

    Thread Safety:
        Plugins are resolved once. Configuration is applied per call through
        ContextVar, so one Codemod may be used from several threads as long
        as its plugins are stateless.

    """

    __slots__ = ("_plugins", "_opts")

    def __init__(self, plugins: Sequence[CodemodPlugin | str], **opts: Any) -> None:
        """Initialize codemod.

        Args:
            plugins: Plugin instances or registered names, run in order.
                Use ["all"] for every built-in plugin.
            **opts: Options passed to plugins (and recognised config keys)
        """
        self._plugins = resolve_plugins(plugins)
        self._opts: Mapping[str, Any] = opts

    @property
    def plugin_names(self) -> list[str]:
        return [plugin.name for plugin in self._plugins]

    def __call__(self, code: str, filename: str) -> TransformResult:
        """Transform one file's source."""
        return transform(code, filename, self._plugins, self._opts)

    def transform_many(self, files: Mapping[str, str]) -> dict[str, TransformResult]:
        """Transform several files, keyed by filename.

        Each file is an independent pass; a failure raises and stops the
        batch.
        """
        return {filename: self(code, filename) for filename, code in files.items()}


__all__ = [
    # Main API
    "transform",
    "TransformResult",
    "Codemod",
    "render",
    "parse_component",
    "parse_code",
    "parse_expression",
    # Configuration
    "TransformConfig",
    "get_transform_config",
    "set_transform_config",
    "reset_transform_config",
    "transform_config_context",
    # Diff engine
    "snapshot",
    "diff",
    "Change",
    "ChangeKind",
    "reduce_changes",
    "ChangeSet",
    "ChangedNode",
    "SourceBuffer",
    "apply_change_set",
    "TemplateLayer",
    "CodeLayer",
    # Plugins
    "CodemodPlugin",
    "TransformContext",
    "BUILTIN_PLUGINS",
    "register_plugin",
    "get_plugin",
    # Grammar
    "Lexer",
    "Parser",
    "Component",
    "Token",
    "TokenType",
    "SourceLocation",
    "LineIndex",
    # Renderers
    "TemplateRenderer",
    "CodeRenderer",
    # Tree
    "builders",
    "traverse",
    "set_parents",
    "find_all",
    "find_first",
    "BaseVisitor",
    "Node",
    "VAttribute",
    "VComment",
    "VDirective",
    "VDirectiveKey",
    "VDocumentFragment",
    "VElement",
    "VEndTag",
    "VExpressionContainer",
    "VForExpression",
    "VIdentifier",
    "VLiteral",
    "VOnExpression",
    "VStartTag",
    "VText",
    # Errors
    "GraftError",
    "ParseError",
    "PluginError",
    "RenderError",
    "DiffInconsistencyError",
    # Version
    "__version__",
]
