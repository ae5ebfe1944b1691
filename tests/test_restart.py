# ABOUTME: Tests for the best-effort Claude restart
# ABOUTME: Uses the FakeRunner fixture, no real process is touched
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from dcsetup.config import COMMAND_TIMEOUT_SECONDS, SETTLE_DELAY_SECONDS
from dcsetup.errors import RestartSubStepError
from dcsetup.models import CommandRunner, ExecutionContext
from dcsetup.restart import SubprocessRunner, restart
from dcsetup.steps import StepTracker


def _context(platform):
    return ExecutionContext(platform=platform, shell="bash", run_method="direct")


def _statuses(tracker):
    return {step.name: step.status for step in tracker.steps if not step.name.startswith("exec_")}


class TestRestart:
    """Tests for restart function."""

    def test_linux_kill_then_detached_launch(self, fake_runner, sleeps):
        tracker = StepTracker()

        outcome = restart(_context("linux"), fake_runner, tracker, sleep=sleeps.append)

        assert fake_runner.calls == [
            (["pkill", "-f", "claude"], COMMAND_TIMEOUT_SECONDS, False),
            (["claude"], COMMAND_TIMEOUT_SECONDS, True),
        ]
        assert sleeps == [SETTLE_DELAY_SECONDS]
        assert outcome.attempted and outcome.killed and outcome.relaunched
        assert not outcome.failed and not outcome.skipped
        assert _statuses(tracker) == {
            "restart_claude": "completed",
            "kill_claude_process": "completed",
            "start_claude_process": "completed",
        }

    def test_macos_commands(self, fake_runner, sleeps):
        restart(_context("macos"), fake_runner, sleep=sleeps.append)

        assert [args for args, _, _ in fake_runner.calls] == [
            ["killall", "Claude"],
            ["open", "-a", "Claude"],
        ]

    def test_windows_relaunch_is_skipped(self, fake_runner, sleeps):
        tracker = StepTracker()

        outcome = restart(_context("windows"), fake_runner, tracker, sleep=sleeps.append)

        assert fake_runner.programs == ["taskkill"]
        assert outcome.killed is True
        assert outcome.skipped is True
        assert outcome.relaunched is False
        assert outcome.failed is False
        assert _statuses(tracker)["start_claude_process"] == "skipped"
        assert _statuses(tracker)["restart_claude"] == "completed"

    def test_missing_process_is_not_a_failure(self, fake_runner, sleeps):
        fake_runner.fail.add("pkill")
        tracker = StepTracker()

        outcome = restart(_context("linux"), fake_runner, tracker, sleep=sleeps.append)

        assert outcome.killed is False
        assert outcome.relaunched is True
        assert outcome.failed is False
        assert _statuses(tracker)["kill_claude_process"] == "no_process_found"
        assert sleeps == [SETTLE_DELAY_SECONDS]

    def test_launch_failure_is_absorbed(self, fake_runner, sleeps, caplog):
        fake_runner.fail.update({"killall", "open"})
        tracker = StepTracker()

        outcome = restart(_context("macos"), fake_runner, tracker, sleep=sleeps.append)

        assert outcome.failed is True
        assert outcome.relaunched is False
        assert outcome.errors and outcome.errors[0].startswith("RestartSubStepError")
        assert _statuses(tracker)["start_claude_process"] == "failed"
        assert _statuses(tracker)["restart_claude"] == "failed"
        assert "Please restart it manually" in caplog.text

    def test_unexpected_runner_error_is_absorbed(self, sleeps):
        runner = MagicMock()
        runner.run.side_effect = RuntimeError("runner exploded")

        outcome = restart(_context("linux"), runner, sleep=sleeps.append)

        assert outcome.failed is True
        assert outcome.errors == ["RuntimeError: runner exploded"]

    def test_unsupported_platform_is_skipped(self, fake_runner, sleeps):
        tracker = StepTracker()

        outcome = restart(_context("other"), fake_runner, tracker, sleep=sleeps.append)

        assert fake_runner.calls == []
        assert sleeps == []
        assert outcome.skipped is True
        assert outcome.attempted is False
        assert _statuses(tracker) == {"restart_claude": "skipped"}

    def test_exec_steps_are_tracked(self, fake_runner, sleeps):
        tracker = StepTracker()

        restart(_context("linux"), fake_runner, tracker, sleep=sleeps.append)

        exec_steps = [s for s in tracker.steps if s.name.startswith("exec_")]
        assert [s.name for s in exec_steps] == ["exec_pkill -f claude...", "exec_claude..."]
        assert all(s.status == "completed" for s in exec_steps)


class TestSubprocessRunner:
    """Tests for SubprocessRunner."""

    def test_satisfies_protocol(self):
        assert isinstance(SubprocessRunner(), CommandRunner)

    def test_success_returns_output(self):
        completed = subprocess.CompletedProcess(["x"], 0, stdout="ok\n", stderr="")
        with patch("dcsetup.restart.subprocess.run", return_value=completed) as mock_run:
            result = SubprocessRunner().run(["killall", "Claude"], 10)

        assert result.stdout == "ok\n"
        mock_run.assert_called_once_with(
            ["killall", "Claude"], capture_output=True, text=True, timeout=10
        )

    def test_non_zero_exit_raises(self):
        completed = subprocess.CompletedProcess(["x"], 1, stdout="", stderr="no process found")
        with patch("dcsetup.restart.subprocess.run", return_value=completed):
            with pytest.raises(RestartSubStepError, match="code 1.*no process found"):
                SubprocessRunner().run(["killall", "Claude"], 10)

    def test_timeout_raises(self):
        error = subprocess.TimeoutExpired(["claude"], 10)
        with patch("dcsetup.restart.subprocess.run", side_effect=error):
            with pytest.raises(RestartSubStepError, match="timed out after 10s"):
                SubprocessRunner().run(["claude"], 10)

    def test_missing_program_raises(self):
        with patch("dcsetup.restart.subprocess.run", side_effect=FileNotFoundError("pkill")):
            with pytest.raises(RestartSubStepError, match="Failed to run pkill"):
                SubprocessRunner().run(["pkill", "-f", "claude"], 10)

    def test_detach_does_not_wait(self):
        with patch("dcsetup.restart.subprocess.Popen") as mock_popen:
            result = SubprocessRunner().run(["claude"], 10, detach=True)

        assert result.stdout == ""
        assert mock_popen.call_args.kwargs["start_new_session"] is True

    def test_detach_spawn_failure_raises(self):
        with patch("dcsetup.restart.subprocess.Popen", side_effect=FileNotFoundError("claude")):
            with pytest.raises(RestartSubStepError, match="Failed to start claude"):
                SubprocessRunner().run(["claude"], 10, detach=True)
