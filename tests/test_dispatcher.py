"""Tests for the shared option parsing and error boundary (cli/dispatcher.py).

A minimal recording tool stands in for the real executables so the
dispatcher's behaviour is tested in isolation.
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from hamlsass.cli import exit_codes
from hamlsass.cli.dispatcher import (
    CallbackAction,
    Dispatcher,
    InvocationOptions,
    OptionLayer,
    Tool,
    add_flag,
    configure_common,
    configure_single_file,
    report_error,
    resolve_single_file,
    set_engine_option,
    set_option,
    store_option,
)
from hamlsass.cli.streams import EndpointKind
from hamlsass.exceptions import EngineError, UsageError


class RecordingTool(Tool):
    name = "record"
    description = "Records what it was given."

    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.seen: InvocationOptions | None = None

    def option_layers(self) -> tuple[OptionLayer, ...]:
        return (configure_single_file, configure_common, self._configure)

    @staticmethod
    def _configure(parser: argparse.ArgumentParser) -> None:
        add_flag(parser, "--flag", callback=set_option("debug"), help="flag")
        add_flag(
            parser, "--style",
            callback=set_engine_option("style"),
            metavar="NAME",
            help="style",
        )
        add_flag(
            parser, "--interval",
            callback=store_option("poll_interval"),
            metavar="SECONDS",
            type=float,
            help="interval",
        )

    def process(self, options: InvocationOptions) -> None:
        self.seen = options
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParse:
    def test_main_parses_through_parse(self) -> None:
        tool = RecordingTool()
        dispatcher = Dispatcher(tool)
        with patch.object(dispatcher, "parse", wraps=dispatcher.parse) as parse:
            assert dispatcher.main(["-s"]) == exit_codes.SUCCESS
        parse.assert_called_once()
        assert parse.call_args.args[1] is tool.seen

    def test_parse_fills_given_options(self) -> None:
        options = InvocationOptions()
        assert Dispatcher(RecordingTool()).parse(["--trace"], options) is options
        assert options.trace is True

    def test_defaults(self) -> None:
        options = Dispatcher(RecordingTool()).parse([])
        assert options.paths == []
        assert options.trace is False
        assert options.check_syntax is False
        assert options.engine_options == {}

    def test_flags_and_values(self) -> None:
        options = Dispatcher(RecordingTool()).parse(
            ["--flag", "--style", "compact", "--interval", "0.5", "in", "out"],
        )
        assert options.debug is True
        assert options.engine_options == {"style": "compact"}
        assert options.poll_interval == 0.5
        assert options.paths == ["in", "out"]

    def test_options_may_follow_positionals(self) -> None:
        options = Dispatcher(RecordingTool()).parse(["in", "--trace", "out"])
        assert options.trace is True
        assert options.paths == ["in", "out"]

    def test_stdin_flag(self) -> None:
        options = Dispatcher(RecordingTool()).parse(["-s"])
        assert options.input is not None
        assert options.input.kind is EndpointKind.STANDARD_STREAM

    def test_check_flag_installs_buffer(self) -> None:
        options = Dispatcher(RecordingTool()).parse(["-c"])
        assert options.check_syntax is True
        assert options.output is not None
        assert options.output.kind is EndpointKind.BUFFER

    def test_unknown_flag_is_usage_error(self) -> None:
        with pytest.raises(UsageError, match="record: unrecognized arguments: --bogus"):
            Dispatcher(RecordingTool()).parse(["--bogus"])

    def test_missing_value_is_usage_error(self) -> None:
        with pytest.raises(UsageError, match="expected one argument"):
            Dispatcher(RecordingTool()).parse(["--style"])

    @pytest.mark.skipif(os.name == "nt", reason="flag exists on Windows")
    def test_unix_newlines_only_on_windows(self) -> None:
        with pytest.raises(UsageError):
            Dispatcher(RecordingTool()).parse(["--unix-newlines"])

    def test_callback_action_passes_none_for_switches(self) -> None:
        seen: list[object] = []
        parser = argparse.ArgumentParser()
        parser.add_argument("--x", action=CallbackAction, callback=lambda _o, v: seen.append(v))
        parser.parse_args(["--x"])
        assert seen == [None]


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestMain:
    def test_success(self) -> None:
        tool = RecordingTool()
        assert Dispatcher(tool).main(["a"]) == exit_codes.SUCCESS
        assert tool.seen is not None and tool.seen.paths == ["a"]

    def test_unknown_flag_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert Dispatcher(RecordingTool()).main(["--bogus"]) == exit_codes.GENERAL_ERROR
        assert "unrecognized arguments: --bogus" in capsys.readouterr().err

    def test_reported_error_with_hint(self, capsys: pytest.CaptureFixture[str]) -> None:
        tool = RecordingTool(EngineError("it broke", hint="Use --trace for backtrace."))
        assert Dispatcher(tool).main([]) == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "it broke\n  Use --trace for backtrace." in err

    def test_unexpected_error_is_reported(self, capsys: pytest.CaptureFixture[str]) -> None:
        tool = RecordingTool(ValueError("odd"))
        assert Dispatcher(tool).main([]) == exit_codes.GENERAL_ERROR
        assert "odd" in capsys.readouterr().err

    def test_trace_reraises_original(self) -> None:
        error = ValueError("odd")
        with pytest.raises(ValueError) as exc_info:
            Dispatcher(RecordingTool(error)).main(["--trace"])
        assert exc_info.value is error

    def test_keyboard_interrupt_is_a_reported_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        tool = RecordingTool(KeyboardInterrupt())
        assert Dispatcher(tool).main([]) == exit_codes.GENERAL_ERROR == 1
        assert "Aborted by user." in capsys.readouterr().err

    def test_keyboard_interrupt_under_trace(self) -> None:
        with pytest.raises(KeyboardInterrupt):
            Dispatcher(RecordingTool(KeyboardInterrupt())).main(["--trace"])

    def test_system_exit_propagates(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            Dispatcher(RecordingTool(SystemExit(3))).main([])
        assert exc_info.value.code == 3

    def test_file_endpoints_closed_after_failure(self, tmp_path: Path) -> None:
        source = tmp_path / "in.scss"
        source.write_text("a {}", encoding="utf-8")

        class Failing(RecordingTool):
            def process(self, options: InvocationOptions) -> None:
                resolve_single_file(options)
                super().process(options)

        tool = Failing(EngineError("boom"))
        assert Dispatcher(tool).main([str(source)]) == exit_codes.GENERAL_ERROR
        assert tool.seen is not None and tool.seen.input is not None
        assert tool.seen.input.stream.closed

    def test_run_exits_with_code(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            Dispatcher(RecordingTool(EngineError("boom"))).run([])
        assert exc_info.value.code == exit_codes.GENERAL_ERROR


class TestSingleFile:
    def test_filename_reaches_engine_options(self, tmp_path: Path) -> None:
        source = tmp_path / "in.scss"
        source.write_text("", encoding="utf-8")
        options = InvocationOptions(paths=[str(source)])
        resolve_single_file(options)
        assert options.engine_options["filename"] == str(source)
        options.close_endpoints()

    def test_rails_flag_exits_zero(self, tmp_path: Path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            Dispatcher(RecordingTool()).main(["--rails", str(tmp_path)])
        assert exc_info.value.code == 0
        assert "doesn't exist" in capsys.readouterr().out


def test_report_error_without_hint(capsys: pytest.CaptureFixture[str]) -> None:
    report_error(UsageError("bad"))
    assert capsys.readouterr().err == "bad\n"
