"""Patch applier: range replacements over an immutable source buffer.

Replacements are keyed to offsets in the *original* text, so each one is
independent of the length changes the others introduce. Parts are collected
in a list and joined once when the result is built.

The reducer guarantees replacements are disjoint; the buffer does not
re-check overlap.

Thread Safety:
SourceBuffer instances are local to one transform pass.

"""

from __future__ import annotations

from graft.layers import Layer
from graft.reducer import ChangeSet
from graft.utils.logger import get_logger

logger = get_logger(__name__)


class SourceBuffer:
    """Original text plus pending replacements.

    Usage:
            >>> buffer = SourceBuffer("a = 1\\nb = 2\\n")
            >>> buffer.overwrite(4, 5, "10").overwrite(10, 11, "20").build()
            'a = 10\\nb = 20\\n'

    """

    __slots__ = ("_original", "_replacements")

    def __init__(self, original: str) -> None:
        self._original = original
        self._replacements: list[tuple[int, int, str]] = []

    def overwrite(self, start: int, end: int, text: str) -> SourceBuffer:
        """Replace ``original[start:end]`` with ``text``.

        Returns:
            self for method chaining

        Raises:
            ValueError: If the range is outside the original text

        """
        if not 0 <= start <= end <= len(self._original):
            raise ValueError(f"Invalid range [{start}, {end}) for text of length {len(self._original)}")
        self._replacements.append((start, end, text))
        return self

    def build(self) -> str:
        """Apply all replacements and return the final text."""
        if not self._replacements:
            return self._original
        parts: list[str] = []
        pos = 0
        for start, end, text in sorted(self._replacements, key=lambda r: (r[0], r[1])):
            parts.append(self._original[pos:start])
            parts.append(text)
            pos = end
        parts.append(self._original[pos:])
        return "".join(parts)


def apply_change_set(source: str, change_set: ChangeSet, layer: Layer) -> str:
    """Render a reduced change set into the source.

    Emits either the single root replacement or one replacement per record.
    """
    buffer = SourceBuffer(source)
    if change_set.root_changed:
        start, end = layer.root_range()
        buffer.overwrite(start, end, layer.render_root())
    else:
        for record in change_set.records:
            buffer.overwrite(record.start, record.end, layer.render(record))
    logger.debug("Patched %d span(s)", 1 if change_set.root_changed else len(change_set.records))
    return buffer.build()
