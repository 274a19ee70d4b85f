"""Tests for snapshots and the structural diff."""

import ast
import dataclasses

import pytest

from graft import builders as b
from graft.differ import Change, ChangeKind, diff, snapshot
from graft.nodes import Node, VComment
from graft.parser import Parser
from graft.visitor import traverse

SOURCE = '<template><p class="a">{{ x }}</p><span>y</span></template>'


def _parse():  # type: ignore[no-untyped-def]
    return Parser(SOURCE).parse()


def _paths(changes: list[Change]) -> list[tuple]:
    return [change.path for change in changes]


# =============================================================================
# Snapshot
# =============================================================================


class TestSnapshot:
    def test_shares_no_nodes(self) -> None:
        fragment = _parse()
        clone = snapshot(fragment)
        originals: set[int] = set()
        traverse(fragment, enter=lambda node, parent: originals.add(id(node)))
        clones: list[int] = []
        traverse(clone, enter=lambda node, parent: clones.append(id(node)))
        assert not originals.intersection(clones)

    def test_parents_point_inside_the_clone(self) -> None:
        clone = snapshot(_parse())
        template = clone.children[0]
        assert clone.parent is None
        assert template.parent is clone
        assert template.children[0].parent is template  # type: ignore[union-attr]

    def test_mutation_does_not_leak(self) -> None:
        fragment = _parse()
        clone = snapshot(fragment)
        fragment.children[0].children[0].name = "div"  # type: ignore[union-attr]
        assert clone.children[0].children[0].name == "p"  # type: ignore[union-attr]

    def test_snapshot_of_subtree_has_no_parent(self) -> None:
        fragment = _parse()
        clone = snapshot(fragment.children[0])
        assert clone.parent is None

    def test_locations_are_kept(self) -> None:
        fragment = _parse()
        clone = snapshot(fragment)
        assert clone.children[0].range == fragment.children[0].range

    def test_python_modules(self) -> None:
        module = ast.parse("x = 1")
        clone = snapshot(module)
        assert clone is not module
        assert ast.dump(clone) == ast.dump(module)


# =============================================================================
# Diff
# =============================================================================


class TestDiff:
    def test_identical_trees(self) -> None:
        fragment = _parse()
        assert diff(snapshot(fragment), fragment) == []

    def test_leaf_edit(self) -> None:
        fragment = _parse()
        before = snapshot(fragment)
        fragment.children[0].children[0].name = "div"  # type: ignore[union-attr]
        assert diff(before, fragment) == [
            Change(("children", 0, "children", 0, "name"), ChangeKind.EDIT, "p", "div")
        ]

    def test_expression_edit(self) -> None:
        fragment = _parse()
        before = snapshot(fragment)
        container = fragment.children[0].children[0].children[0]  # type: ignore[union-attr]
        container.expression.id = "y"  # type: ignore[union-attr]
        assert _paths(diff(before, fragment)) == [
            ("children", 0, "children", 0, "children", 0, "expression", "id")
        ]

    def test_append_is_new(self) -> None:
        fragment = _parse()
        before = snapshot(fragment)
        fragment.children.append(b.v_text("\n"))
        changes = diff(before, fragment)
        assert len(changes) == 1
        assert changes[0].path == ("children", 1)
        assert changes[0].kind is ChangeKind.NEW
        assert changes[0].old_value is None

    def test_remove_is_delete(self) -> None:
        fragment = _parse()
        before = snapshot(fragment)
        template = fragment.children[0]
        del template.children[1]  # type: ignore[union-attr]
        changes = diff(before, fragment)
        assert [(c.path, c.kind) for c in changes] == [
            (("children", 0, "children", 1), ChangeKind.DELETE)
        ]

    def test_middle_insertion_cascades(self) -> None:
        fragment = Parser("<template><p>a</p><p>b</p></template>").parse()
        before = snapshot(fragment)
        template = fragment.children[0]
        new = b.v_element("p", b.v_start_tag(), [b.v_text("x")])
        template.children.insert(1, new)  # type: ignore[union-attr]
        changes = diff(before, fragment)
        assert [(c.path, c.kind) for c in changes] == [
            (("children", 0, "children", 1, "children", 0, "value"), ChangeKind.EDIT),
            (("children", 0, "children", 2), ChangeKind.NEW),
        ]

    def test_kind_change_is_an_edit(self) -> None:
        fragment = Parser("<template>a</template>").parse()
        before = snapshot(fragment)
        template = fragment.children[0]
        template.children[0] = VComment(value="a")  # type: ignore[union-attr]
        assert diff(before, fragment) == [
            Change(("children", 0, "children", 0, "type"), ChangeKind.EDIT, "VText", "VComment")
        ]

    def test_fields_on_one_side(self) -> None:
        changes = diff(ast.parse("f()"), ast.parse("pass"))
        assert [(c.path, c.kind) for c in changes] == [
            (("body", 0, "type"), ChangeKind.EDIT),
            (("body", 0, "value"), ChangeKind.DELETE),
        ]

    def test_leaf_types_are_strict(self) -> None:
        changes = diff(ast.parse("x = 1"), ast.parse("x = True"))
        assert _paths(changes) == [("body", 0, "value", "value")]
        assert _paths(diff(ast.parse("x = 1"), ast.parse("x = 1.0"))) == [("body", 0, "value", "value")]

    def test_positions_are_ignored(self) -> None:
        assert diff(ast.parse("x=1"), ast.parse("x = 1")) == []

    def test_bookkeeping_fields_are_ignored(self) -> None:
        fragment = _parse()
        before = snapshot(fragment)
        container = fragment.children[0].children[0].children[0]  # type: ignore[union-attr]
        container.references = ["other"]  # type: ignore[union-attr]
        fragment.children[0].variables.append("v")  # type: ignore[union-attr]
        assert diff(before, fragment) == []

    def test_change_is_frozen(self) -> None:
        change = Change(("a",), ChangeKind.EDIT, 1, 2)
        with pytest.raises(dataclasses.FrozenInstanceError):
            change.kind = ChangeKind.NEW  # type: ignore[misc]


def test_snapshot_clones_every_template_node() -> None:
    fragment = _parse()
    clone = snapshot(fragment)
    count = 0

    def enter(node, parent) -> None:  # type: ignore[no-untyped-def]
        nonlocal count
        if isinstance(node, Node):
            count += 1

    traverse(clone, enter=enter)
    assert count == 15
