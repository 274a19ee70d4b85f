"""State-machine lexer for component templates.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, LexerMode
├── core.py              # Lexer class (mode dispatch + scanners)
└── modes.py             # LexerMode enum, raw-text element names

Usage:
    >>> from graft.lexer import Lexer
    >>> for token in Lexer("<p>{{ x }}</p>").tokenize():
    ...     print(token)
Token(TAG_OPEN, 'p', 1:1)
Token(TAG_CLOSE, '>', 1:3)
Token(TEXT, '{{ x }}', 1:4)
Token(END_TAG, 'p', 1:11)
Token(EOF, '', 1:15)

Mustaches are only recognised inside the top-level ``<template>`` element;
other top-level elements (``<script>``, ``<style>``, custom blocks) hold raw
text.

"""

from graft.lexer.core import Lexer
from graft.lexer.modes import LexerMode

__all__ = ["Lexer", "LexerMode"]
