# Best-effort restart of Claude Desktop after its config changed
import logging
import subprocess
import time
from collections.abc import Callable, Sequence

from dcsetup.config import COMMAND_TIMEOUT_SECONDS, DOWNLOAD_URL, SETTLE_DELAY_SECONDS
from dcsetup.errors import RestartSubStepError
from dcsetup.models import CommandResult, CommandRunner, ExecutionContext, OSFamily, RestartOutcome
from dcsetup.steps import StepTracker
from dcsetup.utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

# ABOUTME: Commands that terminate the host application, per platform
KILL_COMMANDS: dict[OSFamily, list[str]] = {
    "windows": ["taskkill", "/F", "/IM", "Claude.exe"],
    "macos": ["killall", "Claude"],
    "linux": ["pkill", "-f", "claude"],
}

# ABOUTME: Relaunch commands; Windows has none and asks for a manual restart
LAUNCH_COMMANDS: dict[OSFamily, list[str]] = {
    "macos": ["open", "-a", "Claude"],
    "linux": ["claude"],
}

# ABOUTME: Platforms where the launched process is the app itself and never exits on its own
DETACHED_LAUNCH: frozenset[str] = frozenset({"linux"})


class SubprocessRunner:
    """CommandRunner backed by subprocess.

    ABOUTME: Argument lists only, no shell
    ABOUTME: Non-zero exit, timeout and spawn errors become RestartSubStepError
    """

    def run(
        self,
        args: Sequence[str],
        timeout: float,
        detach: bool = False,
    ) -> CommandResult:
        if detach:
            try:
                subprocess.Popen(
                    list(args),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as e:
                raise RestartSubStepError(f"Failed to start {args[0]}: {e}") from e
            return CommandResult()

        try:
            result = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RestartSubStepError(
                f"Command timed out after {timeout:g}s: {' '.join(args)}"
            ) from e
        except OSError as e:
            raise RestartSubStepError(f"Failed to run {args[0]}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            message = f"Command exited with code {result.returncode}: {' '.join(args)}"
            raise RestartSubStepError(f"{message} ({detail})" if detail else message)

        return CommandResult(stdout=result.stdout, stderr=result.stderr)


def _exec(
    runner: CommandRunner,
    tracker: StepTracker,
    args: Sequence[str],
    detach: bool = False,
) -> CommandResult:
    command = " ".join(args)
    step = tracker.begin(f"exec_{command[:20]}...")
    try:
        result = runner.run(args, COMMAND_TIMEOUT_SECONDS, detach=detach)
    except RestartSubStepError as e:
        tracker.update(step, "failed", e)
        raise
    tracker.update(step, "completed")
    return result


def restart(
    context: ExecutionContext,
    runner: CommandRunner | None = None,
    tracker: StepTracker | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RestartOutcome:
    """Kill and relaunch Claude Desktop, best effort.

    ABOUTME: Never raises; every failure is folded into the returned outcome
    ABOUTME: A failed kill means Claude wasn't running and counts as success
    ABOUTME: Waits SETTLE_DELAY_SECONDS between kill and relaunch

    Args:
        context: Detected execution context (only platform is used)
        runner: Command executor, SubprocessRunner by default
        tracker: Step log to record sub-steps in
        sleep: Delay function, replaceable in tests

    Returns:
        RestartOutcome describing what happened
    """
    runner = runner if runner is not None else SubprocessRunner()
    tracker = tracker if tracker is not None else StepTracker()
    outcome = RestartOutcome()
    platform = context.platform

    restart_step = tracker.begin("restart_claude")
    if platform not in KILL_COMMANDS:
        logger.info(f"Automatic restart is not supported on this platform ({platform}).")
        logger.info("Please restart Claude manually.")
        tracker.update(restart_step, "skipped")
        outcome.skipped = True
        return outcome

    outcome.attempted = True
    try:
        logger.info(f"Attempting to restart Claude on {platform}")

        kill_step = tracker.begin("kill_claude_process")
        try:
            _exec(runner, tracker, KILL_COMMANDS[platform])
        except RestartSubStepError as e:
            tracker.update(kill_step, "no_process_found", e)
            logger.info("Claude process not found or already terminated")
        else:
            tracker.update(kill_step, "completed")
            outcome.killed = True
            logger.info("Successfully killed Claude process")

        sleep(SETTLE_DELAY_SECONDS)

        start_step = tracker.begin("start_claude_process")
        launch = LAUNCH_COMMANDS.get(platform)
        if launch is None:
            logger.info("Windows: Claude restart skipped - requires manual restart")
            tracker.update(start_step, "skipped")
            outcome.skipped = True
        else:
            try:
                _exec(runner, tracker, launch, detach=platform in DETACHED_LAUNCH)
            except RestartSubStepError as e:
                tracker.update(start_step, "failed", e)
                raise
            tracker.update(start_step, "completed")
            outcome.relaunched = True
            logger.info("Claude has been restarted.")

        tracker.update(restart_step, "completed")
    except Exception as e:
        # Restart must never fail the setup run
        message = sanitize_error(e)
        outcome.failed = True
        outcome.errors.append(message)
        tracker.update(restart_step, "failed", e)
        logger.error(f"Failed to restart Claude: {message}. Please restart it manually.")
        logger.error(f"If Claude Desktop is not installed use this link to download {DOWNLOAD_URL}")

    return outcome
