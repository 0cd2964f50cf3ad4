"""Tests for ``--rails RAILS_DIR`` (cli/rails.py).

questionary is mocked; no test ever waits for terminal input.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hamlsass.cli.rails import RAILS_INIT, confirm_overwrite, install_rails_plugin
from hamlsass.exceptions import MissingDependencyError


def _rails_app(root: Path) -> Path:
    (root / "vendor" / "plugins").mkdir(parents=True)
    return root


class TestInstall:
    def test_missing_plugins_directory(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert install_rails_plugin(str(tmp_path)) is False
        plugins = tmp_path / "vendor" / "plugins"
        assert capsys.readouterr().out == f"Directory {plugins} doesn't exist\n"

    def test_fresh_install(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        root = _rails_app(tmp_path)
        assert install_rails_plugin(str(root)) is True
        init = root / "vendor" / "plugins" / "haml" / "init.rb"
        assert init.read_text(encoding="utf-8") == RAILS_INIT
        assert capsys.readouterr().out == f"Haml plugin added to {root}\n"

    def test_declined_overwrite_keeps_directory(self, tmp_path: Path) -> None:
        root = _rails_app(tmp_path)
        existing = root / "vendor" / "plugins" / "haml"
        existing.mkdir()
        (existing / "keep.txt").write_text("x", encoding="utf-8")
        with patch("hamlsass.cli.rails.confirm_overwrite", return_value=False):
            assert install_rails_plugin(str(root)) is False
        assert (existing / "keep.txt").exists()

    def test_confirmed_overwrite_replaces_directory(self, tmp_path: Path) -> None:
        root = _rails_app(tmp_path)
        existing = root / "vendor" / "plugins" / "haml"
        existing.mkdir()
        (existing / "old.txt").write_text("x", encoding="utf-8")
        with patch("hamlsass.cli.rails.confirm_overwrite", return_value=True):
            assert install_rails_plugin(str(root)) is True
        assert not (existing / "old.txt").exists()
        assert (existing / "init.rb").exists()

    def test_cannot_create(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        root = _rails_app(tmp_path)
        target = root / "vendor" / "plugins" / "haml"
        with patch.object(Path, "mkdir", side_effect=PermissionError):
            assert install_rails_plugin(str(root)) is False
        assert capsys.readouterr().out == f"Cannot create {target}\n"


class TestConfirmOverwrite:
    @pytest.mark.parametrize(("answer", "expected"), [(True, True), (False, False), (None, False)])
    def test_answers(self, answer: bool | None, expected: bool) -> None:
        fake = MagicMock()
        fake.confirm.return_value.ask.return_value = answer
        with patch.dict(sys.modules, {"questionary": fake}):
            assert confirm_overwrite(Path("vendor/plugins/haml")) is expected
        assert fake.confirm.call_args.kwargs["default"] is False

    def test_missing_questionary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "questionary", None)
        with pytest.raises(MissingDependencyError, match="questionary"):
            confirm_overwrite(Path("x"))
