# Setup orchestration for dcsetup
import logging
import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dcsetup.config import (
    DEBUG_PORT,
    LEGACY_SERVER_NAMES,
    SERVER_NAME,
    configure_filesystem_access,
    get_backup_dir,
)
from dcsetup.detect import detect
from dcsetup.errors import ConfigDirError, ConfigReadError, ConfigWriteError, SetupError
from dcsetup.host_config import (
    ensure_directory,
    get_host_config_path,
    load_or_default,
    merge,
    persist,
)
from dcsetup.launch import build_server_spec, get_install_root
from dcsetup.models import (
    CommandRunner,
    ExecutionContext,
    RestartOutcome,
    ServerLaunchSpec,
    SetupStep,
)
from dcsetup.restart import restart
from dcsetup.steps import StepTracker
from dcsetup.utils import create_backup, sanitize_error

logger = logging.getLogger(__name__)


@dataclass
class SetupReport:
    """Report from one setup run.

    ABOUTME: success is True once the host config was written, whatever the restart did
    ABOUTME: error holds the sanitized message of the fatal error, if any
    """
    success: bool
    context: ExecutionContext
    config_path: Path
    server_spec: ServerLaunchSpec | None = None
    created: bool = False
    restart: RestartOutcome | None = None
    error: str | None = None
    steps: list[SetupStep] = field(default_factory=list)


def _configure_filesystem_access(
    context: ExecutionContext, home: Path | None, tracker: StepTracker
) -> None:
    step = tracker.begin("configure_filesystem_access")
    try:
        configure_filesystem_access(context.platform, home)
    except SetupError as e:
        tracker.update(step, "failed", e)
        logger.warning(f"Error saving tool configuration: {sanitize_error(e)}")
        return
    tracker.update(step, "completed")


def _backup_host_config(path: Path, home: Path | None, tracker: StepTracker) -> None:
    step = tracker.begin("backup_config")
    try:
        backup_path = create_backup(path, get_backup_dir(home))
    except OSError as e:
        tracker.update(step, "failed", e)
        logger.warning(f"Could not back up existing config: {sanitize_error(e)}")
        return
    tracker.update(step, "completed")
    logger.debug(f"Existing config backed up to {backup_path}")


def _print_instructions(context: ExecutionContext, config_path: Path) -> None:
    logger.info("Successfully added MCP server to Claude configuration!")
    logger.info(f"Configuration location: {config_path}")
    logger.info("To use the server:")
    logger.info("1. Restart Claude if it's currently running")
    logger.info(f'2. The server will be available as "{SERVER_NAME}" in Claude\'s MCP server list')
    if context.debug_mode:
        logger.info(f"3. Connect your debugger to port {DEBUG_PORT}")


def run_setup(
    context: ExecutionContext | None = None,
    *,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: Path | None = None,
    install_root: Path | None = None,
    runner: CommandRunner | None = None,
    sleep: Callable[[float], None] = time.sleep,
    tracker: StepTracker | None = None,
) -> SetupReport:
    """Register desktop-commander in the Claude Desktop config and restart Claude.

    ABOUTME: Phases run in order: detect, tool config, config dir, load, build spec,
    ABOUTME: backup, merge+persist, restart
    ABOUTME: Config dir, load and persist failures abort the run; tool config,
    ABOUTME: backup and restart failures are logged and the run continues
    ABOUTME: The host config is written at most once, atomically

    Args:
        context: Execution context, detected from the process when omitted
        home: Home directory (defaults to Path.home())
        environ: Environment (defaults to os.environ)
        config_path: Host config path, platform default when omitted
        install_root: Local server location, see launch.get_install_root()
        runner: Command executor for the restart
        sleep: Delay function for the restart settle delay
        tracker: Step log, a fresh one when omitted

    Returns:
        SetupReport with the overall result
    """
    environ = os.environ if environ is None else environ
    tracker = tracker if tracker is not None else StepTracker()
    main_step = tracker.begin("main_setup")

    if context is None:
        context = detect(environ=environ)
    if context.debug_mode:
        logger.info("Debug mode enabled. Will configure with Node.js inspector options.")
    logger.debug(
        f"Environment: platform={context.platform} shell={context.shell} "
        f"run_method={context.run_method} ci={context.is_ci}"
    )

    if config_path is None:
        config_path = get_host_config_path(context.platform, environ, home)
    report = SetupReport(success=False, context=context, config_path=config_path)

    try:
        _configure_filesystem_access(context, home, tracker)

        dir_step = tracker.begin("check_config_directory")
        try:
            ensure_directory(config_path)
        except ConfigDirError as e:
            tracker.update(dir_step, "failed", e)
            raise
        tracker.update(dir_step, "completed")

        file_step = tracker.begin("check_config_file")
        try:
            config, created = load_or_default(config_path, context.platform)
        except ConfigReadError as e:
            tracker.update(file_step, "failed", e)
            raise
        tracker.update(file_step, "created" if created else "exists")
        report.created = created

        prep_step = tracker.begin("prepare_server_config")
        if install_root is None:
            install_root = get_install_root(environ)
        spec = build_server_spec(context, install_root, environ)
        tracker.update(prep_step, "completed")
        report.server_spec = spec

        if not created:
            _backup_host_config(config_path, home, tracker)

        update_step = tracker.begin("update_config")
        try:
            persist(config_path, merge(config, SERVER_NAME, spec, LEGACY_SERVER_NAMES))
        except ConfigWriteError as e:
            tracker.update(update_step, "failed", e)
            if created:
                tracker.update(file_step, "create_failed", e)
            raise
        tracker.update(update_step, "completed")
        logger.info("Configuration updated successfully")
        _print_instructions(context, config_path)

        report.success = True
        report.restart = restart(context, runner=runner, tracker=tracker, sleep=sleep)

        tracker.update(main_step, "completed")
        logger.info("Setup completed successfully")
    except SetupError as e:
        report.error = sanitize_error(e)
        tracker.update(main_step, "failed", e)
        logger.error(f"Error updating Claude configuration: {report.error}")
    finally:
        for line in tracker.summary():
            logger.debug(line)

    report.steps = tracker.steps
    return report


def setup(**kwargs) -> bool:
    """Run setup and return True on success."""
    return run_setup(**kwargs).success
