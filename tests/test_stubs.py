"""
tests/test_stubs.py
Unit tests for laragen.stubs (StubLoader, render_stub).

Tests cover:
- Placeholder substitution with and without inner spaces
- Collapse of empty block placeholders followed by CRLF, LF or nothing
- Unresolved placeholders are left in place
- Lookup order: custom stub directories before the bundled ones
- ConfigurationError for missing stubs
"""

from __future__ import annotations

import logging
import pathlib

import pytest

from laragen.errors import ConfigurationError
from laragen.stubs import (
    DEFAULT_STUB_DIR,
    StubLoader,
    collapse_placeholder,
    find_placeholders,
    render_stub,
)


# ===========================================================================
# render_stub
# ===========================================================================


class TestRenderStub:

    def test_both_token_spellings(self) -> None:
        assert render_stub("{{ a }}-{{b}}", {"a": "1", "b": "2"}) == "1-2"

    def test_collapse_lf(self) -> None:
        stub = "class X\n{\n{{ traits }}\n    body\n}"
        assert render_stub(stub, {"traits": ""}, ["traits"]) == "class X\n{\n    body\n}"

    def test_collapse_crlf(self) -> None:
        stub = "class X\r\n{\r\n{{ traits }}\r\n    body\r\n}"
        assert render_stub(stub, {"traits": ""}, ["traits"]) == "class X\r\n{\r\n    body\r\n}"

    def test_collapse_bare_token(self) -> None:
        assert render_stub("a{{ block }}b", {"block": ""}, ["block"]) == "ab"

    def test_missing_collapsible_value_collapses(self) -> None:
        assert render_stub("x\n{{ block }}\ny", {}, ["block"]) == "x\ny"

    def test_non_empty_collapsible_is_substituted(self) -> None:
        stub = "x\n{{ block }}\ny"
        assert render_stub(stub, {"block": "    use A;"}, ["block"]) == "x\n    use A;\ny"

    def test_non_collapsible_empty_value_keeps_line(self) -> None:
        assert render_stub("x\n{{ block }}\ny", {"block": ""}) == "x\n\ny"

    def test_unresolved_placeholder_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="laragen.stubs"):
            text = render_stub("{{ a }} {{ missing }}", {"a": "1"}, stub_name="demo")
        assert text == "1 {{ missing }}"
        assert "missing" in caplog.text

    def test_collapse_placeholder_helper(self) -> None:
        assert collapse_placeholder("a\n{{x}}\r\nb\n{{ x }}\nc", "x") == "a\nb\nc"

    def test_find_placeholders(self) -> None:
        assert find_placeholders("{{ b }} {{a}} {{ b }}") == ["b", "a"]


# ===========================================================================
# StubLoader
# ===========================================================================


class TestStubLoader:

    def test_bundled_stubs_present(self) -> None:
        names = sorted(p.stem for p in DEFAULT_STUB_DIR.glob("*.stub"))
        for required in ("model", "migration", "request", "resource", "repository",
                         "repository_interface", "factory", "policy", "controller",
                         "controller.api", "cache"):
            assert required in names

    def test_load_bundled(self) -> None:
        loader = StubLoader()
        assert "{{ fillableArray }}" in loader.load("model")
        assert "namespace" in find_placeholders(loader.load("model"))

    def test_custom_directory_wins(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "model.stub").write_text("custom {{ class }}", encoding="utf-8")
        loader = StubLoader([tmp_path])
        assert loader.locate("model") == tmp_path / "model.stub"
        assert loader.render("model", {"class": "Post"}) == "custom Post"
        assert loader.locate("migration").parent == DEFAULT_STUB_DIR

    def test_missing_stub_raises(self, tmp_path: pathlib.Path) -> None:
        loader = StubLoader([tmp_path], use_default_stubs=False)
        with pytest.raises(ConfigurationError) as excinfo:
            loader.load("model")
        assert excinfo.value.stub == "model"
        assert "model.stub" in str(excinfo.value)

    def test_missing_directory_only_warns(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="laragen.stubs"):
            loader = StubLoader([tmp_path / "nope"])
        assert "does not exist" in caplog.text
        assert loader.load("model")

    def test_contents_are_cached(self, tmp_path: pathlib.Path) -> None:
        stub = tmp_path / "model.stub"
        stub.write_text("one", encoding="utf-8")
        loader = StubLoader([tmp_path], use_default_stubs=False)
        assert loader.load("model") == "one"
        stub.write_text("two", encoding="utf-8")
        assert loader.load("model") == "one"
