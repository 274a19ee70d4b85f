"""Shared fixtures for graft tests."""

from collections.abc import Callable

import pytest

from graft.plugins import TransformContext

COMPONENT = (
    "<template>\n"
    "  <div   class='box' :title=\"count\">\n"
    "    <p>{{ count }}</p>\n"
    "    <span  title='keep'>x</span>\n"
    "  </div>\n"
    "</template>\n"
    "\n"
    "<script>\n"
    "count  =  1  # initial\n"
    "print(count)\n"
    "</script>\n"
)


class FunctionPlugin:
    """Plugin wrapping a plain function; reports the function's return value."""

    def __init__(self, name: str, fn: Callable[[TransformContext], int | None]) -> None:
        self._name = name
        self._fn = fn
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def transform(self, context: TransformContext) -> int:
        self.calls += 1
        count = self._fn(context)
        return 1 if count is None else count


@pytest.fixture
def component_source() -> str:
    return COMPONENT


@pytest.fixture
def make_plugin() -> Callable[..., FunctionPlugin]:
    """Build a plugin from a function: ``make_plugin(fn, name="edit")``."""

    def factory(fn: Callable[[TransformContext], int | None], name: str = "edit") -> FunctionPlugin:
        return FunctionPlugin(name, fn)

    return factory

