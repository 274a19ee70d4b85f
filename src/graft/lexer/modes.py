"""Lexer operating modes and constants."""

from __future__ import annotations

from enum import Enum, auto


class LexerMode(Enum):
    """Lexer operating modes.

    - DATA: Between tags, scanning text, comments and mustaches
    - TAG: Inside a start tag, scanning attributes
    - RAW_TEXT: Inside an element whose content is not markup

    """

    DATA = auto()
    TAG = auto()
    RAW_TEXT = auto()


# Elements whose content is raw text wherever they appear
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "textarea"})

# The only top-level element whose content is parsed as template markup
TEMPLATE_ELEMENT = "template"
