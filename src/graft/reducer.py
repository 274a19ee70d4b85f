"""Change-set reducer: from raw diff entries to disjoint repaint regions.

For each change, in order:

1. Owning path: drop the changed property, then keep dropping steps until
   the path addresses a node the layer can locate in the snapshot.
2. Promotion, exactly two cases:
   - a VStartTag promotes to its VElement (a start tag never renders on
     its own)
   - the ``name`` or ``argument`` of a VDirectiveKey promotes to the key
     (the key's text carries a prefix the sub-node's range does not)
3. A NEW or DELETE whose owning path is no deeper than the layer's
   root change depth marks the whole root as changed (3 for templates, 0
   for Python modules by default).

Without a root change, one ChangedNode is built per distinct owning path
and records nested inside another record are dropped; rendering the
ancestor already reproduces them.

Example:
    >>> change_set = reduce_changes(diff(before, fragment), TemplateLayer(before, fragment))
    >>> [(r.start, r.end) for r in change_set.records]
    [(10, 25)]

"""

from __future__ import annotations

from dataclasses import dataclass, field

from graft.differ import Change, ChangeKind, Path
from graft.errors import DiffInconsistencyError
from graft.layers import Layer, resolve
from graft.nodes import AnyNode, VDirectiveKey, VStartTag
from graft.utils.logger import get_logger

logger = get_logger(__name__)

# Sub-keys of a directive key that are never repainted on their own
_KEY_PARTS = frozenset({"name", "argument"})


@dataclass(frozen=True, slots=True)
class ChangedNode:
    """One repaint region.

    Attributes:
        path: Owning path from the root
        node: Node at ``path`` in the mutated tree; its rendering is the
            replacement text
        start: Start of the node's range in the snapshot (original text)
        end: End of the node's range in the snapshot

    """

    path: Path
    node: AnyNode
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Reducer output: either a root reprint or disjoint records.

    ``records`` is empty when ``root_changed`` is set.
    """

    root_changed: bool = False
    records: list[ChangedNode] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.root_changed and not self.records


def owning_path(path: Path, layer: Layer) -> Path:
    """Path of the node that must be repainted for a change at ``path``.

    Raises:
        DiffInconsistencyError: If the path cannot be walked in the snapshot

    """
    owner = path[:-1]
    # Walk up to a node the layer can locate
    while owner and not layer.is_addressable(resolve(layer.snapshot, owner)):
        owner = owner[:-1]

    if not owner:
        return owner

    node = resolve(layer.snapshot, owner)
    if isinstance(node, VStartTag):
        return owner[:-1]
    if owner[-1] in _KEY_PARTS and isinstance(resolve(layer.snapshot, owner[:-1]), VDirectiveKey):
        return owner[:-1]
    return owner


def collapse(paths: list[Path]) -> list[Path]:
    """Drop duplicate paths and paths nested under another path.

    Ancestors win regardless of input order.
    """
    kept: list[Path] = []
    for path in sorted(dict.fromkeys(paths), key=len):
        if not any(path[: len(ancestor)] == ancestor for ancestor in kept):
            kept.append(path)
    return kept


def reduce_changes(
    changes: list[Change],
    layer: Layer,
    *,
    root_change_depth: int | None = None,
) -> ChangeSet:
    """Reduce raw diff entries to a ChangeSet.

    Args:
        changes: Output of ``graft.differ.diff`` for this layer's trees
        layer: The layer whose snapshot and live tree were diffed
        root_change_depth: Overrides the layer's configured depth

    Raises:
        DiffInconsistencyError: If an owning path does not resolve in the
            snapshot or in the mutated tree

    """
    if root_change_depth is None:
        root_change_depth = layer.root_change_depth()

    owners: list[Path] = []
    root_changed = False
    for change in changes:
        owner = owning_path(change.path, layer)
        if len(owner) <= root_change_depth and change.kind is not ChangeKind.EDIT:
            root_changed = True
        owners.append(owner)

    if root_changed:
        logger.debug("Structural change near the root; reprinting the whole document")
        return ChangeSet(root_changed=True)

    records: list[ChangedNode] = []
    for path in collapse(owners):
        if not path:
            records.append(ChangedNode(path, layer.live, *layer.root_range()))
            continue
        original = resolve(layer.snapshot, path)
        current = resolve(layer.live, path)
        if not layer.is_addressable(original):
            raise DiffInconsistencyError(path, "snapshot node has no source range")
        start, end = layer.node_range(original)  # type: ignore[arg-type]
        records.append(ChangedNode(path, current, start, end))  # type: ignore[arg-type]

    records.sort(key=lambda record: record.start)
    logger.debug("Reduced %d change(s) to %d region(s)", len(changes), len(records))
    return ChangeSet(records=records)
