"""Tests for ContextVar-based transform configuration."""

import threading

import pytest

from graft import transform
from graft.config import (
    TransformConfig,
    get_transform_config,
    reset_transform_config,
    set_transform_config,
    transform_config_context,
)


class TestTransformConfig:
    def test_defaults(self) -> None:
        config = TransformConfig()
        assert config.component_suffixes == (".vue",)
        assert config.host_element == "script"
        assert config.root_change_depth == 3
        assert config.code_root_change_depth == 0

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = TransformConfig.from_dict({"host_element": "py-script", "rename": {"a": "b"}})
        assert config.host_element == "py-script"

    def test_suffix_string_becomes_tuple(self) -> None:
        config = TransformConfig().with_options({"component_suffixes": ".html"})
        assert config.component_suffixes == (".html",)

    def test_suffix_list_becomes_tuple(self) -> None:
        config = TransformConfig().with_options({"component_suffixes": [".vue", ".html"]})
        assert config.component_suffixes == (".vue", ".html")

    def test_with_no_known_options_returns_self(self) -> None:
        config = TransformConfig()
        assert config.with_options({"rename": {}}) is config

    def test_is_component(self) -> None:
        config = TransformConfig()
        assert config.is_component("App.vue")
        assert not config.is_component("app.py")


class TestContext:
    def test_default(self) -> None:
        assert get_transform_config() == TransformConfig()

    def test_set_and_reset(self) -> None:
        set_transform_config(TransformConfig(host_element="py"))
        try:
            assert get_transform_config().host_element == "py"
        finally:
            reset_transform_config()
        assert get_transform_config().host_element == "script"

    def test_context_manager_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with transform_config_context(TransformConfig(root_change_depth=0)):
                assert get_transform_config().root_change_depth == 0
                raise RuntimeError
        assert get_transform_config().root_change_depth == 3

    def test_threads_are_isolated(self) -> None:
        set_transform_config(TransformConfig(host_element="py"))
        seen: list[str] = []
        try:
            thread = threading.Thread(target=lambda: seen.append(get_transform_config().host_element))
            thread.start()
            thread.join()
        finally:
            reset_transform_config()
        assert seen == ["script"]


class TestTransformOptions:
    def test_options_configure_the_pass(self) -> None:
        source = "<template><p>{{ count }}</p></template>\n"
        result = transform(
            source,
            "page.html",
            ["rename-names"],
            {"component_suffixes": ".html", "rename": {"count": "total"}},
        )
        assert result.code == "<template><p>{{ total }}</p></template>\n"

    def test_config_restored_after_transform(self) -> None:
        transform("x = 1\n", "a.py", [], {"root_change_depth": 0})
        assert get_transform_config().root_change_depth == 3

    def test_host_element_option(self) -> None:
        source = "<py>\nvalue = 1\n</py>\n"
        result = transform(source, "App.vue", ["rename-names"], {"host_element": "py", "rename": {"value": "v"}})
        assert result.code == "<py>\nv = 1\n</py>\n"
