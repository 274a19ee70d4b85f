"""Dual-layer orchestrator: parse, run plugins, write back minimal patches.

Component files (dispatched by suffix):

1. Parse the markup and every top-level host element's script.
2. Snapshot the markup tree and each script module.
3. Run plugins in order on the shared, mutable trees.
4. Re-establish parents in the markup tree.
5. For each host element, in document order with a shared counter: if its
   module changed, patch the script's own text and overwrite the host's
   text child with it, so the markup diff sees the script's final state.
6. Diff, reduce and patch the markup tree against its snapshot.

Flat files run steps 2, 3 and 6 on a single Python module.

A pass with no changes returns the input unchanged. A pass either returns
the whole result or raises; no partial output is produced.

Thread Safety:
Each call builds its own snapshots, layers and buffers. Configuration is
read from ContextVar (thread-local).

"""

from __future__ import annotations

import ast
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import graft.utils as utils
from graft.config import get_transform_config, transform_config_context
from graft.differ import diff, snapshot
from graft.expressions import parse_code
from graft.layers import CodeLayer, TemplateLayer
from graft.nodes import VElement, VEndTag, VText
from graft.parser import Component, host_elements, host_text, parse_component
from graft.patch import apply_change_set
from graft.plugins import CodemodPlugin, TransformContext, resolve_plugins, run_plugins
from graft.reducer import reduce_changes
from graft.utils.logger import get_logger
from graft.visitor import set_parents

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Result of one transform pass.

    Attributes:
        code: The new source text
        stats: ``(plugin name, reported count)`` in invocation order

    """

    code: str
    stats: list[tuple[str, int]] = field(default_factory=list)


def transform(
    code: str,
    filename: str,
    plugins: Sequence[CodemodPlugin | str],
    opts: Mapping[str, Any] | None = None,
) -> TransformResult:
    """Run plugins against source code.

    Args:
        code: Source text
        filename: Decides component vs. flat parsing (by suffix); passed to
            plugins and diagnostics
        plugins: Plugin instances or registered plugin names, run in order
        opts: Options for plugins; recognised configuration keys
            (``component_suffixes``, ``host_element``, ``root_change_depth``,
            ``code_root_change_depth``) also configure this pass

    Returns:
        TransformResult with the new text and per-plugin stats

    Raises:
        ParseError: Malformed input (before any plugin runs)
        PluginError: Unknown plugin name or a plugin breaking its contract
        DiffInconsistencyError: Internal diff/reduce invariant broken

    Example:
        >>> result = transform("x = 1  # keep\\n", "app.py", [])
        >>> result.code
        'x = 1  # keep\\n'

    """
    options: Mapping[str, Any] = dict(opts or {})
    config = get_transform_config().with_options(options)
    resolved = resolve_plugins(plugins)

    with transform_config_context(config):
        if config.is_component(filename):
            return _transform_component(code, filename, resolved, options)
        return _transform_module(code, filename, resolved, options)


def _transform_component(
    code: str,
    filename: str,
    plugins: list[CodemodPlugin],
    opts: Mapping[str, Any],
) -> TransformResult:
    component = parse_component(code, filename)
    fragment = component.fragment
    fragment_before = snapshot(fragment)
    scripts_before = [snapshot(module) for module in component.scripts]

    context = TransformContext(
        script_trees=component.scripts,
        template=fragment,
        filename=filename,
        utils=utils,
        opts=opts,
    )
    stats = run_plugins(plugins, context)

    set_parents(fragment)
    _write_back_scripts(component, scripts_before)

    changes = diff(fragment_before, fragment)
    if not changes:
        return TransformResult(code, stats)
    layer = TemplateLayer(fragment_before, fragment)
    return TransformResult(apply_change_set(code, reduce_changes(changes, layer), layer), stats)


def _write_back_scripts(component: Component, scripts_before: list[ast.Module]) -> None:
    """Overwrite each changed script's host text with its patched source."""
    hosts = host_elements(component.fragment, get_transform_config().host_element)
    if len(hosts) != len(component.scripts):
        logger.warning(
            "%d host element(s) but %d script tree(s); pairing them in order",
            len(hosts),
            len(component.scripts),
        )

    for index, element in enumerate(hosts):
        if index >= len(component.scripts):
            break
        module = component.scripts[index]
        before = scripts_before[index]
        changes = diff(before, module)
        if not changes:
            continue

        source = component.script_sources[index]
        layer = CodeLayer(before, module, source, component.script_line_offsets[index])
        patched = apply_change_set(source, reduce_changes(changes, layer), layer)
        _set_host_text(element, wrap_script(patched))


def wrap_script(text: str) -> str:
    """Surround script text with newlines unless it already has them.

    Example:
        >>> wrap_script("x = 1")
        '\\nx = 1\\n'

    """
    if not text.startswith("\n"):
        text = "\n" + text
    if not text.endswith("\n"):
        text += "\n"
    return text


def _set_host_text(element: VElement, text: str) -> None:
    child = host_text(element)
    if child is not None:
        child.value = text
        return
    child = VText(value=text)
    child.parent = element
    element.children.insert(0, child)
    if element.start_tag.self_closing:
        element.start_tag.self_closing = False
        element.end_tag = VEndTag()
        element.end_tag.parent = element


def _transform_module(
    code: str,
    filename: str,
    plugins: list[CodemodPlugin],
    opts: Mapping[str, Any],
) -> TransformResult:
    module = parse_code(code, source_file=filename)
    before = snapshot(module)

    context = TransformContext(
        script_trees=[module],
        template=None,
        filename=filename,
        utils=utils,
        opts=opts,
    )
    stats = run_plugins(plugins, context)

    live = context.script_trees[0]
    changes = diff(before, live)
    if not changes:
        return TransformResult(code, stats)
    layer = CodeLayer(before, live, code)
    return TransformResult(apply_change_set(code, reduce_changes(changes, layer), layer), stats)
