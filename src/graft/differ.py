"""Snapshot and structural diff for graft trees.

``snapshot`` deep-clones a tree right after parsing. ``diff`` compares the
snapshot with the tree plugins mutated and reports every difference as a
Change whose path leads from the root to the differing value.

The diff is positional on a known schema, not a tree edit distance:

1. Nodes are compared field by field over their structural fields only
   (``compare=False`` bookkeeping and ``ast`` positions never take part).
2. Sequences are compared index by index; extra items on either side are
   reported as NEW or DELETE entries whose path ends in the item's index.
   An insertion in the middle of a list therefore shows up as a run of
   EDITs followed by one NEW; the reducer collapses that run.
3. Leaves are equal when they have the same type and compare equal.
4. Nodes of different kinds are still compared field by field, plus an
   EDIT at ``(*path, "type")``. No compatibility check is made.

Example:
    >>> before = snapshot(fragment)
    >>> fragment.children[0].name = "section"
    >>> [c.path for c in diff(before, fragment)]
    [('children', 0, 'name')]

"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from graft.nodes import AnyNode, Node
from graft.utils.logger import get_logger
from graft.visitor import is_node, iter_fields, node_type, set_parents

logger = get_logger(__name__)

type PathStep = str | int
type Path = tuple[PathStep, ...]


class ChangeKind(Enum):
    """Kind of a structural difference."""

    EDIT = auto()  # Value replaced at an existing path
    NEW = auto()  # Item or field present only in the mutated tree
    DELETE = auto()  # Item or field present only in the snapshot


@dataclass(frozen=True, slots=True)
class Change:
    """A single difference between a snapshot and a mutated tree.

    Attributes:
        path: Field names and sequence indices from the root to the value
        kind: EDIT, NEW or DELETE
        old_value: Value in the snapshot (None for NEW)
        new_value: Value in the mutated tree (None for DELETE)

    """

    path: Path
    kind: ChangeKind
    old_value: Any = None
    new_value: Any = None


def snapshot[N: AnyNode](root: N) -> N:
    """Deep-clone a tree, sharing no mutable node with the original.

    Parents are re-established inside the clone; the clone's root has no
    parent.
    """
    clone = copy.deepcopy(root)
    set_parents(clone)
    if isinstance(clone, Node):
        clone.parent = None
    return clone


def diff(old: AnyNode, new: AnyNode) -> list[Change]:
    """Structural diff of a snapshot against the mutated tree.

    Returns:
        Changes in document order; empty when the trees are equal

    """
    changes: list[Change] = []
    _diff_values(old, new, (), changes)
    logger.debug("Diff found %d change(s)", len(changes))
    return changes


def _diff_values(old: Any, new: Any, path: Path, changes: list[Change]) -> None:
    if old is new:
        return
    if is_node(old) and is_node(new):
        _diff_nodes(old, new, path, changes)
    elif isinstance(old, list) and isinstance(new, list):
        _diff_sequences(old, new, path, changes)
    elif type(old) is not type(new) or old != new:
        changes.append(Change(path, ChangeKind.EDIT, old, new))


def _diff_nodes(old: AnyNode, new: AnyNode, path: Path, changes: list[Change]) -> None:
    old_type = node_type(old)
    new_type = node_type(new)
    if old_type != new_type:
        changes.append(Change((*path, "type"), ChangeKind.EDIT, old_type, new_type))

    new_fields = dict(iter_fields(new))
    old_names: set[str] = set()
    for name, old_value in iter_fields(old):
        old_names.add(name)
        if name in new_fields:
            _diff_values(old_value, new_fields[name], (*path, name), changes)
        else:
            changes.append(Change((*path, name), ChangeKind.DELETE, old_value, None))
    for name, new_value in new_fields.items():
        if name not in old_names:
            changes.append(Change((*path, name), ChangeKind.NEW, None, new_value))


def _diff_sequences(old: list[Any], new: list[Any], path: Path, changes: list[Change]) -> None:
    common = min(len(old), len(new))
    for i in range(common):
        _diff_values(old[i], new[i], (*path, i), changes)
    for i in range(common, len(old)):
        changes.append(Change((*path, i), ChangeKind.DELETE, old[i], None))
    for i in range(common, len(new)):
        changes.append(Change((*path, i), ChangeKind.NEW, None, new[i]))
