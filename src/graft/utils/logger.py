"""Logger access for graft modules.

Every module logs under the ``graft.`` namespace, so one handler on the
``graft`` logger sees the whole pipeline:

- ``graft.parser`` (DEBUG): embedded scripts found in each component
- ``graft.plugins`` (DEBUG): change count reported by each plugin
- ``graft.differ`` and ``graft.reducer`` (DEBUG): raw changes, root
  reprints and the number of repaint regions
- ``graft.patch`` (DEBUG): spans spliced into the source
- ``graft.transform`` (WARNING): host elements and scripts that no longer
  pair up after plugins ran

graft never installs handlers.

Example:
    >>> import logging
    >>> logging.getLogger("graft").setLevel(logging.DEBUG)
    >>> get_logger(__name__).debug("Reduced %d change(s) to %d region(s)", 4, 1)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` inside the ``graft`` namespace.

    Module names already under ``graft`` are used as they are; anything else
    (a plugin living in another package, say) is nested below ``graft.``.

    Example:
        >>> get_logger("graft.reducer").name
        'graft.reducer'
        >>> get_logger("acme_codemods.rename").name
        'graft.acme_codemods.rename'
    """
    if not (name == "graft" or name.startswith("graft.")):
        name = f"graft.{name}"
    return logging.getLogger(name)
