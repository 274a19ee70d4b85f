"""ContextVar-based transform configuration for graft.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Config is set once per transform pass and read by the parser, the reducer
and the orchestrator.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed and race conditions are impossible.

Usage:
    # Through transform options (recognised keys are picked out)
    transform(code, "App.vue", plugins, {"host_element": "script"})

    # Direct usage
    from graft.config import TransformConfig, transform_config_context

    with transform_config_context(TransformConfig(root_change_depth=2)):
        component = parse_component(code)

"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class TransformConfig:
    """Immutable transform configuration.

    Attributes:
        component_suffixes: Filename suffixes parsed as component files;
            everything else is parsed as a flat Python module
        host_element: Name of the top-level elements holding embedded code
        root_change_depth: Insertions or removals in the template whose
            owning path is at most this deep reprint the whole document
        code_root_change_depth: The same threshold for Python modules; at
            the default of 0 only a change to the module body itself
            reprints the module, anything deeper repaints the nearest
            enclosing statement

    """

    component_suffixes: tuple[str, ...] = (".vue",)
    host_element: str = "script"
    root_change_depth: int = 3
    code_root_change_depth: int = 0

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "TransformConfig":
        """Create TransformConfig from a mapping.

        Only includes keys that are valid TransformConfig fields; unknown
        keys are ignored here and left for plugins.

        Example:
            >>> config = TransformConfig.from_dict({
            ...     "host_element": "py-script",
            ...     "rename": {"old": "new"},
            ... })
            >>> config.host_element
            'py-script'

        """
        return cls().with_options(config_dict)

    def with_options(self, options: Mapping[str, Any]) -> "TransformConfig":
        """Copy of this config with recognised keys from ``options`` applied."""
        valid_fields = {f.name for f in fields(self)}
        filtered = {k: v for k, v in options.items() if k in valid_fields}
        if not filtered:
            return self
        if "component_suffixes" in filtered:
            suffixes = filtered["component_suffixes"]
            filtered["component_suffixes"] = (
                (suffixes,) if isinstance(suffixes, str) else tuple(suffixes)
            )
        return replace(self, **filtered)

    def is_component(self, filename: str) -> bool:
        """True if the file is parsed as a component (by suffix)."""
        return filename.endswith(self.component_suffixes)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: TransformConfig = TransformConfig()

# Thread-local configuration via ContextVar
_transform_config: ContextVar[TransformConfig] = ContextVar(
    "transform_config",
    default=_DEFAULT_CONFIG,
)


def get_transform_config() -> TransformConfig:
    """Get current transform configuration (thread-local)."""
    return _transform_config.get()


def set_transform_config(config: TransformConfig) -> None:
    """Set transform configuration for current context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _transform_config.set(config)


def reset_transform_config() -> None:
    """Reset to default configuration."""
    _transform_config.set(_DEFAULT_CONFIG)


@contextmanager
def transform_config_context(config: TransformConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Properly restores the previous config even if an exception is raised.

    Example:
        >>> with transform_config_context(TransformConfig(host_element="py")):
        ...     get_transform_config().host_element
        'py'

    """
    previous = _transform_config.get()
    _transform_config.set(config)
    try:
        yield
    finally:
        _transform_config.set(previous)


__all__ = [
    "TransformConfig",
    "get_transform_config",
    "set_transform_config",
    "reset_transform_config",
    "transform_config_context",
]
