"""Tests for the source buffer and patch applier."""

import pytest

from graft import builders as b
from graft.differ import diff, snapshot
from graft.layers import TemplateLayer
from graft.parser import Parser
from graft.patch import SourceBuffer, apply_change_set
from graft.reducer import ChangeSet, reduce_changes
from graft.visitor import find_first, set_parents


class TestSourceBuffer:
    def test_chained_overwrites(self) -> None:
        buffer = SourceBuffer("a = 1\nb = 2\n")
        assert buffer.overwrite(4, 5, "10").overwrite(10, 11, "20").build() == "a = 10\nb = 20\n"

    def test_offsets_refer_to_original(self) -> None:
        buffer = SourceBuffer("abcdef")
        buffer.overwrite(4, 6, "XY")
        buffer.overwrite(0, 1, "long prefix ")
        assert buffer.build() == "long prefix bcdXY"

    def test_insertion(self) -> None:
        assert SourceBuffer("ac").overwrite(1, 1, "b").build() == "abc"

    def test_deletion(self) -> None:
        assert SourceBuffer("abc").overwrite(1, 2, "").build() == "ac"

    def test_no_replacements(self) -> None:
        buffer = SourceBuffer("text")
        assert buffer.build() == "text"

    @pytest.mark.parametrize(("start", "end"), [(-1, 2), (3, 2), (0, 99)])
    def test_invalid_range(self, start: int, end: int) -> None:
        with pytest.raises(ValueError, match="Invalid range"):
            SourceBuffer("text").overwrite(start, end, "x")


class TestApplyChangeSet:
    SOURCE = "<template>\n  <p  id='a'>{{ x }}</p>\n</template>\n"

    def test_records_are_spliced(self) -> None:
        fragment = Parser(self.SOURCE).parse()
        before = snapshot(fragment)
        container = find_first(fragment, type="VExpressionContainer")
        container.expression.id = "total"  # type: ignore[union-attr]
        layer = TemplateLayer(before, fragment)
        result = apply_change_set(self.SOURCE, reduce_changes(diff(before, fragment), layer), layer)
        assert result == "<template>\n  <p  id='a'>{{ total }}</p>\n</template>\n"

    def test_root_change_reprints(self) -> None:
        fragment = Parser(self.SOURCE).parse()
        before = snapshot(fragment)
        fragment.children.append(b.v_text("<!-- end -->\n"))
        set_parents(fragment)
        layer = TemplateLayer(before, fragment)
        result = apply_change_set(self.SOURCE, reduce_changes(diff(before, fragment), layer), layer)
        assert result == '<template>\n  <p id="a">{{ x }}</p>\n</template>\n<!-- end -->\n'

    def test_empty_change_set(self) -> None:
        fragment = Parser(self.SOURCE).parse()
        layer = TemplateLayer(snapshot(fragment), fragment)
        assert apply_change_set(self.SOURCE, ChangeSet(), layer) == self.SOURCE
