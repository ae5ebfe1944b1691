# ABOUTME: Tests for the CLI entry point
# ABOUTME: setup() is patched so no real config is touched; one subprocess test checks --version
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from dcsetup import __version__
from dcsetup.cli import EXIT_FAILURE, EXIT_SUCCESS, build_parser, main


@pytest.fixture
def fake_home(tmp_path, monkeypatch, dcsetup_logger):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


class TestParser:
    """Tests for argument parsing."""

    def test_debug_flag(self):
        assert build_parser().parse_args(["--debug"]).debug is True
        assert build_parser().parse_args([]).debug is False

    def test_unknown_flag_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--nope"])


class TestMain:
    """Tests for main function."""

    def test_success_exit_code(self, fake_home):
        with patch("dcsetup.cli.setup", return_value=True) as mock_setup:
            with patch("dcsetup.cli.time.sleep") as mock_sleep:
                assert main([]) == EXIT_SUCCESS

        assert mock_setup.call_args.kwargs["context"].debug_mode is False
        mock_sleep.assert_not_called()

    def test_debug_flag_reaches_context(self, fake_home):
        with patch("dcsetup.cli.setup", return_value=True) as mock_setup:
            main(["--debug"])

        assert mock_setup.call_args.kwargs["context"].debug_mode is True

    def test_failure_waits_then_returns_failure(self, fake_home):
        with patch("dcsetup.cli.setup", return_value=False):
            with patch("dcsetup.cli.time.sleep") as mock_sleep:
                assert main([]) == EXIT_FAILURE

        mock_sleep.assert_called_once_with(1.0)

    def test_unexpected_error_is_reported_without_traceback(self, fake_home, capsys):
        error = RuntimeError(f"boom in {fake_home}/secret")
        with patch("dcsetup.cli.setup", side_effect=error):
            with patch("dcsetup.cli.time.sleep"):
                assert main([]) == EXIT_FAILURE

        err = capsys.readouterr().err
        assert "Fatal error: RuntimeError: boom in [PATH]" in err
        assert "Traceback" not in err
        assert str(fake_home) not in err

    def test_writes_diagnostic_log(self, fake_home):
        with patch("dcsetup.cli.setup", return_value=False):
            with patch("dcsetup.cli.time.sleep"):
                main([])

        assert (fake_home / ".claude-server-commander" / "setup.log").exists()


def test_module_version_output():
    """python -m dcsetup --version prints the version and exits 0."""
    env = os.environ.copy()
    src = str(Path(__file__).resolve().parents[1] / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src, env.get("PYTHONPATH")]))

    result = subprocess.run(
        [sys.executable, "-m", "dcsetup", "--version"],
        capture_output=True,
        text=True,
        timeout=30,
        env=env,
    )

    assert result.returncode == 0
    assert __version__ in result.stdout
