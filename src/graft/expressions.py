"""Python expression and code parsing for templates and scripts.

Template expressions (mustaches, directive values) are Python expressions.
They are parsed with surrounding parentheses and newlines so multi-line
values and trailing comments parse the same way they would inside a call.

Directive-specific forms:

- ``v-for``: ``target in iterable`` (``of`` is accepted for ``in``)
- ``v-on``: a bare callable reference or lambda stays an expression; any
  other value is a handler made of statements (``count += 1; notify()``)
- ``v-slot``: an expression naming the slot's variables

Script code is parsed with ``ast.parse``; callers pad it with blank lines so
reported line numbers match the enclosing document.

"""

from __future__ import annotations

import ast
import re

from graft.errors import ParseError
from graft.location import SourceLocation
from graft.nodes import Expression, VForExpression, VOnExpression

_FOR_PATTERN = re.compile(r"^\s*(.+?)\s+(?:in|of)\s+(.+?)\s*$", re.DOTALL)

# Handler values that reference a callable instead of running statements
_HANDLER_REFERENCES = (ast.Name, ast.Attribute, ast.Subscript, ast.Lambda)


def _error(message: str, location: SourceLocation | None) -> ParseError:
    if location is None:
        return ParseError(message)
    return ParseError(message, location.lineno, location.col_offset, location.source_file)


def parse_expression(text: str, location: SourceLocation | None = None) -> ast.expr:
    """Parse one Python expression.

    Args:
        text: Expression source (no surrounding delimiters)
        location: Where the text sits in the document, for diagnostics

    Raises:
        ParseError: If the text is not a single valid expression

    """
    try:
        tree = ast.parse(f"(\n{text}\n)", mode="eval")
    except SyntaxError as e:
        raise _error(f"Invalid expression {text.strip()!r}: {e.msg}", location) from e
    return tree.body


def parse_for(text: str, location: SourceLocation | None = None) -> VForExpression:
    """Parse a ``v-for`` value into targets and iterable.

    Example:
        >>> node = parse_for("(item, index) in items")
        >>> [ast.unparse(t) for t in node.left]
        ['item', 'index']

    """
    match = _FOR_PATTERN.match(text)
    if match is None:
        raise _error(f"Invalid v-for expression {text.strip()!r}", location)
    left = parse_expression(match.group(1), location)
    right = parse_expression(match.group(2), location)
    targets = list(left.elts) if isinstance(left, ast.Tuple) else [left]
    return VForExpression(left=targets, right=right, location=location or SourceLocation.unknown())


def parse_handler(text: str, location: SourceLocation | None = None) -> Expression:
    """Parse a ``v-on`` value.

    Returns the expression itself for callable references and lambdas, and
    a VOnExpression holding the statements otherwise.
    """
    try:
        expression: ast.expr | None = ast.parse(f"(\n{text}\n)", mode="eval").body
    except SyntaxError:
        expression = None
    if isinstance(expression, _HANDLER_REFERENCES):
        return expression

    try:
        module = ast.parse(text.strip(), mode="exec")
    except SyntaxError as e:
        raise _error(f"Invalid event handler {text.strip()!r}: {e.msg}", location) from e
    return VOnExpression(body=module.body, location=location or SourceLocation.unknown())


def parse_directive_value(
    directive: str, text: str, location: SourceLocation | None = None
) -> Expression | None:
    """Parse a directive's value according to the directive name.

    Blank values parse to None (``v-if=""`` holds no expression).
    """
    if not text.strip():
        return None
    if directive == "for":
        return parse_for(text, location)
    if directive == "on":
        return parse_handler(text, location)
    return parse_expression(text, location)


def parse_code(code: str, padding: int = 0, source_file: str | None = None) -> ast.Module:
    """Parse Python source into a module.

    Args:
        code: Python source
        padding: Blank lines prepended so line numbers match a host document
        source_file: Path used in diagnostics

    Raises:
        ParseError: On syntax errors, carrying document line numbers

    """
    try:
        return ast.parse("\n" * padding + code, filename=source_file or "<unknown>")
    except SyntaxError as e:
        raise ParseError(e.msg, e.lineno, e.offset, source_file) from e


def collect_names(node: ast.AST | VForExpression | VOnExpression | None, *, loads_only: bool = False) -> list[str]:
    """Names used in an expression, in first-seen order without duplicates."""
    if node is None:
        return []
    roots: list[ast.AST]
    if isinstance(node, VForExpression):
        roots = [*node.left, *([node.right] if node.right is not None else [])]
    elif isinstance(node, VOnExpression):
        roots = list(node.body)
    else:
        roots = [node]

    names: dict[str, None] = {}
    for root in roots:
        for child in ast.walk(root):
            if isinstance(child, ast.Name) and not (loads_only and not isinstance(child.ctx, ast.Load)):
                names[child.id] = None
    return list(names)


def references_of(expression: Expression | None) -> list[str]:
    """Names an expression reads from its scope.

    For ``v-for`` only the iterable counts; the targets are the loop's own
    variables.
    """
    if isinstance(expression, VForExpression):
        return collect_names(expression.right, loads_only=True)
    return collect_names(expression, loads_only=True)


def variables_of(directive: str, expression: Expression | None) -> list[str]:
    """Names a ``v-for`` or ``v-slot`` directive introduces."""
    if directive == "for" and isinstance(expression, VForExpression):
        names: dict[str, None] = {}
        for target in expression.left:
            for name in collect_names(target):
                names[name] = None
        return list(names)
    if directive == "slot":
        return collect_names(expression)
    return []
