"""Exception classes for graft.

Provides standardized exceptions for error handling throughout graft.
"""

from __future__ import annotations


class GraftError(Exception):
    """Base exception for all graft errors.

    Subclass this for specific error categories.
    """

    pass


class ParseError(GraftError):
    """Error while parsing a template or a code region.

    Raised before any plugin runs; the transform for that input is aborted.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        # Build formatted message
        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class RenderError(GraftError):
    """Error during canonical rendering.

    Raised when a renderer encounters a node kind it cannot print.
    """

    pass


class PluginError(GraftError):
    """Error in plugin registration or contract.

    Raised for unknown plugin names and for plugins that break the
    ``transform(context) -> int`` contract. Exceptions raised *inside* a
    plugin's transform are not wrapped; they reach the caller unchanged.
    """

    def __init__(self, plugin_name: str, message: str) -> None:
        """Initialize plugin error.

        Args:
            plugin_name: Name of the failing plugin
            message: Description of the error
        """
        self.plugin_name = plugin_name
        super().__init__(f"Plugin '{plugin_name}': {message}")


class DiffInconsistencyError(GraftError):
    """A changed path could not be resolved back to a node.

    Indicates a broken invariant between the differ and the reducer, never a
    problem with user input.
    """

    def __init__(self, path: tuple[str | int, ...], message: str) -> None:
        """Initialize diff inconsistency error.

        Args:
            path: The path (field names and indices) that failed to resolve
            message: Description of the failure
        """
        self.path = path
        rendered = ".".join(str(step) for step in path) or "<root>"
        super().__init__(f"{rendered}: {message}")
