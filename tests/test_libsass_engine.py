"""Tests for the libsass adapter (infra/libsass_engine.py).

Error mapping is tested without libsass; compilation tests are skipped
when libsass is not installed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from hamlsass.exceptions import EngineError, EngineSyntaxError, MissingDependencyError
from hamlsass.infra.libsass_engine import LibSassEngine, import_sass, map_compile_error


class _CompileError(Exception):
    pass


class TestMapCompileError:
    def test_position_is_extracted(self) -> None:
        raw = b'Error: Invalid CSS after "a {": expected "}", was ""\n        on line 3:4 of src/main.scss\n>> a {\n'
        error = map_compile_error(_CompileError(raw), "stdin")
        assert isinstance(error, EngineSyntaxError)
        assert error.reason == 'Invalid CSS after "a {": expected "}", was ""'
        assert error.line == 3
        assert error.source == "src/main.scss"

    def test_without_position(self) -> None:
        error = map_compile_error(_CompileError("Error: something odd"), "stdin")
        assert error.reason == "something odd"
        assert error.line is None
        assert error.source == "stdin"

    def test_empty_message(self) -> None:
        assert map_compile_error(_CompileError(), "x").reason == "compilation failed"


class TestOptions:
    def test_unknown_style(self) -> None:
        with pytest.raises(EngineError) as exc_info:
            LibSassEngine._build_kwargs({"style": "pretty"})
        assert "Unknown output style: pretty" in str(exc_info.value)
        assert exc_info.value.hint is not None

    def test_mapping(self) -> None:
        kwargs = LibSassEngine._build_kwargs(
            {"style": "compact", "load_paths": [".", Path("lib")], "line_numbers": True, "cache": False},
        )
        assert kwargs == {
            "output_style": "compact",
            "include_paths": [".", "lib"],
            "source_comments": True,
        }

    @pytest.mark.parametrize(
        ("options", "indented"),
        [
            ({}, False),
            ({"filename": "a.sass"}, True),
            ({"filename": "a.scss"}, False),
            ({"filename": "a.scss", "syntax": "sass"}, True),
            ({"syntax": "scss"}, False),
        ],
    )
    def test_syntax_selection(self, options: dict, indented: bool) -> None:
        assert LibSassEngine._is_indented(options) is indented


def test_missing_libsass(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "sass", None)
    with pytest.raises(MissingDependencyError) as exc_info:
        import_sass()
    assert exc_info.value.dependency == "libsass"
    assert isinstance(exc_info.value.__cause__, ModuleNotFoundError)


class TestCompilation:
    @pytest.fixture(autouse=True)
    def _libsass(self) -> None:
        pytest.importorskip("sass")

    def test_nested_style(self) -> None:
        css = LibSassEngine().compile_string("a { b { color: red; } }", {})
        assert "a b {" in css
        assert "color: red" in css

    def test_compressed_style(self) -> None:
        css = LibSassEngine().compile_string("a { color: red; }", {"style": "compressed"})
        assert css.strip() == "a{color:red}"

    def test_indented_syntax(self) -> None:
        css = LibSassEngine().compile_string("a\n  color: red\n", {"syntax": "sass", "style": "compressed"})
        assert css.strip() == "a{color:red}"

    def test_syntax_error_line(self) -> None:
        with pytest.raises(EngineSyntaxError) as exc_info:
            LibSassEngine().compile_string("a {\n  color: red;\n  b {\n", {"filename": "x.scss"})
        assert exc_info.value.line is not None

    def test_compile_file_with_import(self, tmp_path: Path) -> None:
        (tmp_path / "_vars.scss").write_text("$c: blue;\n", encoding="utf-8")
        main = tmp_path / "main.scss"
        main.write_text('@import "vars";\na { color: $c; }\n', encoding="utf-8")
        css = LibSassEngine().compile_file(str(main), {"style": "compressed"})
        assert css.strip() == "a{color:blue}"

    def test_compile_string_resolves_imports_next_to_filename(self, tmp_path: Path) -> None:
        (tmp_path / "_vars.scss").write_text("$c: green;\n", encoding="utf-8")
        css = LibSassEngine().compile_string(
            '@import "vars";\na { color: $c; }\n',
            {"filename": str(tmp_path / "main.scss"), "style": "compressed"},
        )
        assert css.strip() == "a{color:green}"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(EngineError, match="not found"):
            LibSassEngine().compile_file(str(tmp_path / "nope.scss"), {})

    def test_forced_syntax_for_unusual_suffix(self, tmp_path: Path) -> None:
        source = tmp_path / "style.txt"
        source.write_text("a\n  color: red\n", encoding="utf-8")
        css = LibSassEngine().compile_file(str(source), {"syntax": "sass", "style": "compressed"})
        assert css.strip() == "a{color:red}"


def test_css_to_sass_round_trip() -> None:
    pytest.importorskip("sass")
    from hamlsass.infra.css_converter import CssToSassConverter

    engine = LibSassEngine()
    compressed = {"style": "compressed"}
    css = engine.compile_string("nav { ul { margin: 0; } a { color: red; } }", compressed)
    sass_source = CssToSassConverter().render(css, {})
    again = engine.compile_string(sass_source, dict(compressed, syntax="sass"))
    assert again == css
