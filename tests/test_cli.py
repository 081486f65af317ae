"""Tests for the command line entry point."""

import sys

import blessed
import pytest
from unittest.mock import patch

from pagerule import __main__ as cli
from pagerule.constants import RuleConstants
from pagerule.settings import RuleSettings
from pagerule.version import BuildInfo, get_version_string


def test_version_flag(capsys):
    with patch.object(sys, "argv", ["pagerule", "--version"]), \
            patch.object(cli, "get_version_string", return_value="abc1234 2024-01-01"):
        cli.main()
    assert capsys.readouterr().out.strip() == "abc1234 2024-01-01"


def test_version_string_format():
    info = BuildInfo(commit="0123456789abcdef", date="2024-05-01T10:00:00+00:00", dirty=True)
    with patch("pagerule.version.get_build_info", return_value=info):
        assert get_version_string() == "0123456-dirty 2024-05-01T10:00:00+00:00"


def test_version_string_unknown():
    with patch("pagerule.version.get_build_info", return_value=BuildInfo(None, None, False)):
        assert get_version_string() == "unknown unknown"


def test_dump_file_draws_rules(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("intro\n\f\nrest", encoding="utf-8")
    real_terminal = blessed.Terminal
    unstyled = lambda *args, **kwargs: real_terminal(force_styling=None)
    with patch("pagerule.settings.load_settings", return_value=RuleSettings()), \
            patch("blessed.Terminal", side_effect=unstyled):
        assert cli.dump_file(str(path), width=10) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["intro", RuleConstants.RULE_GLYPH * 10, "rest"]


def test_dump_missing_file(tmp_path, capsys):
    assert cli.dump_file(str(tmp_path / "missing.txt")) == 1
    assert "Error loading file" in capsys.readouterr().err


def test_dump_with_invalid_delimiter(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("x", encoding="utf-8")
    with patch("pagerule.settings.load_settings", return_value=RuleSettings(delimiter="(")):
        assert cli.dump_file(str(path), width=10) == 1
    assert "Invalid page delimiter" in capsys.readouterr().err


def test_dump_requires_filename(capsys):
    with patch.object(sys, "argv", ["pagerule", "--dump"]):
        with pytest.raises(SystemExit) as excinfo:
            cli.main()
    assert excinfo.value.code == 2
