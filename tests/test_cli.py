"""Tests for prowl._cli — argument parsing and dispatch."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from prowl._cli import _build_parser, main
from prowl._errors import WatchError


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_defaults(self) -> None:
        args = _build_parser().parse_args(["notes.md"])
        assert args.files == ["notes.md"]
        assert args.browser is None
        assert args.port is None
        assert args.host is None

    def test_browser_flag(self) -> None:
        assert _build_parser().parse_args(["-b", "notes.md"]).browser is True
        assert _build_parser().parse_args(["--browser", "notes.md"]).browser is True

    def test_port(self) -> None:
        assert _build_parser().parse_args(["-p", "9000", "notes.md"]).port == 9000
        assert _build_parser().parse_args(["--port", "9000", "notes.md"]).port == 9000

    def test_host(self) -> None:
        assert _build_parser().parse_args(["--host", "0.0.0.0", "x.md"]).host == "0.0.0.0"

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out


class TestMainUsage:
    """Usage errors print usage and exit 0."""

    def test_no_file(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "usage: prowl" in capsys.readouterr().err

    def test_two_files(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["a.md", "b.md"])
        assert exc_info.value.code == 0

    def test_bad_port(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["-p", "eighty", "notes.md"])
        assert exc_info.value.code == 0

    def test_unknown_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--frobnicate", "notes.md"])
        assert exc_info.value.code == 0


class TestMainDispatch:
    """main() hands off to serve() and reports startup failures."""

    def test_forwards_arguments(self) -> None:
        with patch("prowl.app.serve") as serve:
            main(["-b", "-p", "9000", "--host", "0.0.0.0", "notes.md"])
        serve.assert_called_once_with(
            "notes.md", host="0.0.0.0", port=9000, open_browser=True,
        )

    def test_unset_flags_forwarded_as_none(self) -> None:
        with patch("prowl.app.serve") as serve:
            main(["notes.md"])
        serve.assert_called_once_with("notes.md", host=None, port=None, open_browser=None)

    def test_missing_document_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.md")])
        assert exc_info.value.code == 1
        assert "Error: Error reading from" in capsys.readouterr().err

    def test_bad_config_value_exits_1(
        self, document: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (document.parent / "prowl.toml").write_text('port = "9000"\n')
        with pytest.raises(SystemExit) as exc_info:
            main([str(document)])
        assert exc_info.value.code == 1
        assert "Error: prowl.toml: port must be int, got str" in capsys.readouterr().err

    def test_startup_error_exits_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("prowl.app.serve", side_effect=WatchError("Cannot watch /x")):
            with pytest.raises(SystemExit) as exc_info:
                main(["notes.md"])
        assert exc_info.value.code == 1
        assert "Error: Cannot watch /x" in capsys.readouterr().err

    def test_keyboard_interrupt_is_clean(self) -> None:
        with patch("prowl.app.serve", side_effect=KeyboardInterrupt):
            main(["notes.md"])
