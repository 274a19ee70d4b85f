"""End-to-end tests for the dual-layer transform."""

import ast
import logging

import pytest

from graft import Codemod, TransformResult, transform
from graft.errors import ParseError
from graft.nodes import VElement
from graft.plugins import TransformContext
from graft.transform import wrap_script

# =============================================================================
# Identity
# =============================================================================


class TestIdentity:
    def test_no_plugins(self, component_source: str) -> None:
        assert transform(component_source, "App.vue", []).code == component_source

    def test_plugin_without_changes(self, component_source: str, make_plugin) -> None:  # type: ignore[no-untyped-def]
        result = transform(component_source, "App.vue", [make_plugin(lambda context: 0)])
        assert result.code == component_source
        assert result.stats == [("edit", 0)]

    def test_flat_file_keeps_formatting(self) -> None:
        source = "x  =  1  # keep\n\n\ndef f( a ):\n    return a\n"
        assert transform(source, "mod.py", ["all"]).code == source

    def test_result_type(self) -> None:
        result = transform("x = 1\n", "a.py", [])
        assert isinstance(result, TransformResult)
        assert result.stats == []


# =============================================================================
# Template layer
# =============================================================================


def _p(context: TransformContext) -> VElement:
    return context.utils.find_first(context.template, type="VElement", name="p")


class TestTemplateLayer:
    def test_localized_edit(self, component_source: str, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            _p(context).children[0].expression.id = "total"

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert result.code == component_source.replace("{{ count }}", "{{ total }}")

    def test_ancestor_collapsing(self, component_source: str, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            p = _p(context)
            p.children[0].expression.id = "total"
            p.name = "h1"

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert result.code == component_source.replace("<p>{{ count }}</p>", "<h1>{{ total }}</h1>")

    def test_inserted_attribute_repaints_only_its_element(
        self, component_source: str, make_plugin
    ) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            b = context.utils.builders
            span = context.utils.find_first(context.template, type="VElement", name="span")
            span.start_tag.attributes.append(b.v_attribute(b.v_identifier("hidden")))

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert result.code == component_source.replace(
            "<span  title='keep'>x</span>", '<span title="keep" hidden>x</span>'
        )

    def test_root_fallback(self, component_source: str, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            context.template.children.insert(0, context.utils.builders.v_text("<!-- generated -->\n"))

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert result.code == (
            "<!-- generated -->\n"
            "<template>\n"
            '  <div class="box" :title="count">\n'
            "    <p>{{ count }}</p>\n"
            '    <span title="keep">x</span>\n'
            "  </div>\n"
            "</template>\n"
            "\n"
            "<script>\n"
            "count  =  1  # initial\n"
            "print(count)\n"
            "</script>\n"
        )

    def test_entities_survive_root_fallback(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        source = '<template>\n  <a title="a &amp;lt; b">x</a>\n</template>\n'

        def edit(context: TransformContext) -> None:
            context.template.children.insert(0, context.utils.builders.v_text("<!-- generated -->\n"))

        result = transform(source, "App.vue", [make_plugin(edit)])
        assert result.code == "<!-- generated -->\n" + source

    def test_removed_host_element_warns(
        self, component_source: str, make_plugin, caplog: pytest.LogCaptureFixture
    ) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            fragment = context.template
            fragment.children[:] = [child for child in fragment.children if getattr(child, "name", "") != "script"]

        with caplog.at_level(logging.WARNING, logger="graft"):
            result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert "pairing them in order" in caplog.text
        assert "<script>" not in result.code


# =============================================================================
# Composite documents
# =============================================================================


RECORDS = (
    "<template>\n"
    "  <ul>\n"
    "    <li   v-for=\"r in records\">{{ r['id'] }}</li>\n"
    "  </ul>\n"
    "</template>\n"
    "\n"
    "<script>\n"
    "records = [\n"
    "    {'id': 1},\n"
    "    {'id': 2},\n"
    "    {'id': 3},\n"
    "]\n"
    "</script>\n"
)


class TestCompositeDocuments:
    def test_outer_edit_leaves_script_text(self, component_source: str, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            _p(context).name = "h2"

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert "count  =  1  # initial\nprint(count)\n" in result.code
        assert result.code == component_source.replace("<p>{{ count }}</p>", "<h2>{{ count }}</h2>")

    def test_script_edit_touches_only_the_host_text(
        self, component_source: str, make_plugin
    ) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            context.script_trees[0].body[1].value.func.id = "log"

        result = transform(component_source, "App.vue", [make_plugin(edit)])
        assert result.code == component_source.replace("print(count)", "log(count)")

    def test_deleting_a_middle_sibling_reprints_the_script_only(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            del context.script_trees[0].body[0].value.elts[1]

        result = transform(RECORDS, "Records.vue", [make_plugin(edit)])
        assert result.code == (
            "<template>\n"
            "  <ul>\n"
            "    <li   v-for=\"r in records\">{{ r['id'] }}</li>\n"
            "  </ul>\n"
            "</template>\n"
            "\n"
            "<script>\n"
            "records = [{'id': 1}, {'id': 3}]\n"
            "</script>\n"
        )

    def test_several_scripts_are_paired_in_order(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        source = "<script>\na = 1\n</script>\n<script>\nb  =  2\n</script>\n"

        def edit(context: TransformContext) -> None:
            context.script_trees[1].body[0].value.value = 3

        result = transform(source, "Two.vue", [make_plugin(edit)])
        assert result.code == "<script>\na = 1\n</script>\n<script>\nb  =  3\n</script>\n"

    def test_filling_an_empty_host(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        source = "<template>\n  <p>hi</p>\n</template>\n<script />\n"

        def edit(context: TransformContext) -> None:
            context.script_trees[0].body.append(ast.parse("x = 1").body[0])

        result = transform(source, "App.vue", [make_plugin(edit)])
        assert result.code == "<template>\n  <p>hi</p>\n</template>\n<script>\nx = 1\n</script>\n"


class TestWrapScript:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("x = 1", "\nx = 1\n"),
            ("\nx = 1\n", "\nx = 1\n"),
            ("", "\n"),
        ],
    )
    def test_newlines(self, text: str, expected: str) -> None:
        assert wrap_script(text) == expected


# =============================================================================
# Flat files
# =============================================================================


class TestFlatFiles:
    def test_statement_removal_keeps_the_rest_of_the_file(self) -> None:
        source = (
            "# header\n"
            "import os  # why\n"
            "\n"
            "\n"
            "def f():\n"
            "    x = 1  # keep\n"
            "    breakpoint()\n"
            "    return x\n"
        )
        result = transform(source, "m.py", ["strip-breakpoints"])
        assert result.code == "# header\nimport os  # why\n\n\ndef f():\n    x = 1\n    return x\n"

    def test_code_depth_option_reprints_the_module(self) -> None:
        source = "import os  # why\n\n\ndef f():\n    breakpoint()\n    return 1\n"
        result = transform(source, "m.py", ["strip-breakpoints"], {"code_root_change_depth": 3})
        assert result.code == "import os\n\ndef f():\n    return 1\n"

    def test_nested_operator_gets_parentheses(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            binop = context.script_trees[0].body[0].value
            binop.right = ast.BinOp(ast.Name(id="c", ctx=ast.Load()), ast.Add(), ast.Constant(1))

        result = transform("x = a * c  # scale\n", "calc.py", [make_plugin(edit)])
        assert result.code == "x = a * (c + 1)  # scale\n"

    def test_top_level_insertion_reprints_module(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            context.script_trees[0].body.append(ast.parse("y = 2").body[0])

        result = transform("x  =  1\n", "a.py", [make_plugin(edit)])
        assert result.code == "x = 1\ny = 2\n"

    def test_unicode_columns(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        def edit(context: TransformContext) -> None:
            context.script_trees[0].body[0].value.args[1].value = 2

        result = transform("f('héllo', 1)  # é\n", "u.py", [make_plugin(edit)])
        assert result.code == "f('héllo', 2)  # é\n"


# =============================================================================
# Idempotence and failures
# =============================================================================


class TestIdempotence:
    def test_second_pass_is_a_no_op(self) -> None:
        source = "def f():\n    x = 1\n    breakpoint()\n    return x\n"
        first = transform(source, "a.py", ["strip-breakpoints"])
        second = transform(first.code, "a.py", ["strip-breakpoints"])
        assert second.code == first.code
        assert second.stats == [("strip-breakpoints", 0)]

    def test_rename_twice(self, component_source: str) -> None:
        codemod = Codemod(["rename-names"], rename={"count": "total"})
        first = codemod(component_source, "App.vue")
        second = codemod(first.code, "App.vue")
        assert second.code == first.code
        assert second.stats == [("rename-names", 0)]


class TestFailures:
    def test_template_parse_error_runs_no_plugin(self, make_plugin) -> None:  # type: ignore[no-untyped-def]
        plugin = make_plugin(lambda context: 0)
        with pytest.raises(ParseError):
            transform("<template><p></template>", "App.vue", [plugin])
        assert plugin.calls == 0

    def test_script_parse_error(self) -> None:
        with pytest.raises(ParseError) as info:
            transform("<script>\ndef (:\n</script>\n", "App.vue", [])
        assert info.value.lineno == 2
        assert info.value.source_file == "App.vue"

    def test_flat_parse_error(self) -> None:
        with pytest.raises(ParseError):
            transform("def (:\n", "a.py", [])
