"""Tests for template node types and builders."""

import ast
import gc

from graft import builders as b
from graft.location import SourceLocation
from graft.nodes import VElement, VEndTag, VIdentifier, VText

# =============================================================================
# Nodes
# =============================================================================


class TestNodes:
    def test_type_tag(self) -> None:
        el = b.v_element("div", b.v_start_tag())
        assert el.type == "VElement"
        assert el.start_tag.type == "VStartTag"

    def test_identifier_raw_name_defaults_to_name(self) -> None:
        assert VIdentifier(name="x").raw_name == "x"

    def test_identity_equality(self) -> None:
        first, second = VText(value="a"), VText(value="a")
        assert first != second
        assert len({first, second}) == 2

    def test_parent_is_a_weak_lookup(self) -> None:
        child = VText(value="a")
        el = b.v_element("div", b.v_start_tag(), [child])
        child.parent = el
        assert child.parent is el
        del el
        gc.collect()
        assert child.parent is None

    def test_parent_can_be_cleared(self) -> None:
        child = VText(value="a")
        el = b.v_element("div", b.v_start_tag(), [child])
        child.parent = el
        child.parent = None
        assert child.parent is None

    def test_synthetic_nodes_have_unknown_location(self) -> None:
        assert b.v_text("x").location == SourceLocation.unknown()
        assert b.v_text("x").range == (0, 0)


# =============================================================================
# Builders
# =============================================================================


class TestBuilders:
    def test_element_gets_end_tag(self) -> None:
        el = b.v_element("Span", b.v_start_tag())
        assert isinstance(el, VElement)
        assert el.name == "span"
        assert el.raw_name == "Span"
        assert isinstance(el.end_tag, VEndTag)

    def test_void_element_has_no_end_tag(self) -> None:
        assert b.v_element("br", b.v_start_tag()).end_tag is None

    def test_self_closing_element_has_no_end_tag(self) -> None:
        assert b.v_element("comp", b.v_start_tag(self_closing=True)).end_tag is None

    def test_children_are_copied(self) -> None:
        children = [b.v_text("a")]
        el = b.v_element("p", b.v_start_tag(), children)
        children.append(b.v_text("b"))
        assert len(el.children) == 1

    def test_shorthand_identifier(self) -> None:
        name = b.v_identifier("bind", ":")
        assert (name.name, name.raw_name) == ("bind", ":")

    def test_directive(self) -> None:
        key = b.v_directive_key(
            b.v_identifier("on", "@"),
            b.v_identifier("click"),
            [b.v_identifier("stop")],
        )
        directive = b.v_directive(key, b.v_expression_container(ast.Name(id="go", ctx=ast.Load())))
        assert directive.key.argument.name == "click"  # type: ignore[union-attr]
        assert [m.name for m in directive.key.modifiers] == ["stop"]

    def test_for_and_on_expressions(self) -> None:
        loop = b.v_for_expression([ast.Name(id="x", ctx=ast.Store())], ast.Name(id="xs", ctx=ast.Load()))
        assert loop.right.id == "xs"  # type: ignore[union-attr]
        handler = b.v_on_expression([ast.Pass()])
        assert isinstance(handler.body[0], ast.Pass)

    def test_fragment_and_attribute(self) -> None:
        attr = b.v_attribute(b.v_identifier("class"), b.v_literal("x"))
        fragment = b.v_document_fragment([b.v_element("p", b.v_start_tag([attr]))])
        assert fragment.children[0].start_tag.attributes[0] is attr  # type: ignore[union-attr]
