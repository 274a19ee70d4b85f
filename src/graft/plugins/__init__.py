"""Codemod plugin system for graft.

A plugin mutates the trees of one file in place and reports how many
changes it made:

    class UpperCaseTitles:
        name = "upper-case-titles"

        def transform(self, context: TransformContext) -> int:
            count = 0
            for node in context.utils.find_all(context.template, type="VLiteral"):
                ...
            return count

Plugins run in the order given, on the same mutable trees; each one sees
the changes of the plugins before it. The count is informational and ends
up in the transform stats.

Built-in plugins can be referenced by name:

    >>> from graft import transform
    >>> result = transform(code, "app.py", ["strip-breakpoints"])

Thread Safety:
Built-in plugins are stateless; all state lives in the trees passed in.

"""

from __future__ import annotations

import ast
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import ModuleType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from graft.errors import PluginError
from graft.utils.logger import get_logger

if TYPE_CHECKING:
    from graft.nodes import VDocumentFragment

logger = get_logger(__name__)

__all__ = [
    "BUILTIN_PLUGINS",
    "CodemodPlugin",
    "TransformContext",
    "get_plugin",
    "register_plugin",
    "resolve_plugins",
    "run_plugins",
]


@dataclass(frozen=True, slots=True)
class TransformContext:
    """Everything a plugin receives.

    Attributes:
        script_trees: Embedded modules in document order (a single module
            for flat files)
        template: The markup tree, or None for flat files
        filename: Name of the file being transformed
        utils: The ``graft.utils`` module (traversal helpers, builders,
            logger)
        opts: Options passed to ``transform``

    """

    script_trees: list[ast.Module]
    template: VDocumentFragment | None
    filename: str
    utils: ModuleType
    opts: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class CodemodPlugin(Protocol):
    """Protocol for codemod plugins."""

    @property
    def name(self) -> str:
        """Plugin identifier, reported in stats."""
        ...

    def transform(self, context: TransformContext) -> int:
        """Mutate the trees in ``context`` and return the number of changes."""
        ...


# Registry of built-in plugins
BUILTIN_PLUGINS: dict[str, type[CodemodPlugin]] = {}


def register_plugin(
    name: str,
) -> Callable[[type[CodemodPlugin]], type[CodemodPlugin]]:
    """Decorator to register a plugin.

    Usage:
        @register_plugin("strip-breakpoints")
        class StripBreakpointsPlugin:
                ...

    """

    def decorator(cls: type[CodemodPlugin]) -> type[CodemodPlugin]:
        BUILTIN_PLUGINS[name] = cls
        return cls

    return decorator


def get_plugin(name: str) -> CodemodPlugin:
    """Get a plugin instance by name.

    Raises:
        PluginError: If plugin name is not recognized

    """
    if name not in BUILTIN_PLUGINS:
        available = ", ".join(sorted(BUILTIN_PLUGINS.keys()))
        raise PluginError(name, f"unknown plugin. Available: {available}")
    return BUILTIN_PLUGINS[name]()


def resolve_plugins(plugins: Sequence[CodemodPlugin | str]) -> list[CodemodPlugin]:
    """Turn names into plugin instances; ``"all"`` expands to every built-in.

    Raises:
        PluginError: For unknown names and objects that are not plugins

    """
    resolved: list[CodemodPlugin] = []
    for plugin in plugins:
        if plugin == "all":
            resolved.extend(get_plugin(name) for name in BUILTIN_PLUGINS)
        elif isinstance(plugin, str):
            resolved.append(get_plugin(plugin))
        elif isinstance(plugin, CodemodPlugin):
            resolved.append(plugin)
        else:
            raise PluginError(repr(plugin), "not a plugin (needs `name` and `transform`)")
    return resolved


def run_plugins(
    plugins: Sequence[CodemodPlugin],
    context: TransformContext,
) -> list[tuple[str, int]]:
    """Run plugins in order and collect ``(name, count)`` stats.

    Exceptions raised inside a plugin propagate unchanged.

    Raises:
        PluginError: If a plugin returns something other than an int

    """
    stats: list[tuple[str, int]] = []
    for plugin in plugins:
        count = plugin.transform(context)
        if isinstance(count, bool) or not isinstance(count, int):
            raise PluginError(plugin.name, f"transform() returned {type(count).__name__}, expected int")
        logger.debug("Plugin %s reported %d change(s) in %s", plugin.name, count, context.filename)
        stats.append((plugin.name, count))
    return stats


# Import built-in plugins to register them
# These imports trigger the @register_plugin decorators
from graft.plugins.rename_names import RenameNamesPlugin  # noqa: E402
from graft.plugins.strip_breakpoints import StripBreakpointsPlugin  # noqa: E402

__all__ += [
    "RenameNamesPlugin",
    "StripBreakpointsPlugin",
]
