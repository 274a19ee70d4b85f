"""Utility modules for graft.

This package is handed to every plugin as ``context.utils``.

Provides:
- logger: get_logger for logging
- tree helpers: traverse, set_parents, find_all, find_first
- builders: node factories (``utils.builders.v_element(...)``)
"""

from graft import builders
from graft.utils.logger import get_logger
from graft.visitor import find_all, find_first, set_parents, traverse

__all__ = [
    "builders",
    "find_all",
    "find_first",
    "get_logger",
    "set_parents",
    "traverse",
]
