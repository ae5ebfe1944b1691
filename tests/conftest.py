# ABOUTME: Shared fixtures: a recording fake CommandRunner and a fixed Linux context
# ABOUTME: dcsetup_logger removes handlers a test attached to the package logger
import logging
from collections.abc import Sequence

import pytest

from dcsetup.errors import RestartSubStepError
from dcsetup.models import CommandResult, ExecutionContext
from dcsetup.utils.logfile import LOGGER_NAME


class FakeRunner:
    """CommandRunner that records calls and fails for selected programs."""

    def __init__(self, fail: Sequence[str] = ()) -> None:
        self.fail = set(fail)
        self.calls: list[tuple[list[str], float, bool]] = []

    def run(self, args: Sequence[str], timeout: float, detach: bool = False) -> CommandResult:
        self.calls.append((list(args), timeout, detach))
        if args[0] in self.fail:
            raise RestartSubStepError(f"Command exited with code 1: {' '.join(args)}")
        return CommandResult(stdout="", stderr="")

    @property
    def programs(self) -> list[str]:
        return [args[0] for args, _, _ in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def linux_context() -> ExecutionContext:
    return ExecutionContext(platform="linux", shell="bash", run_method="direct")


@pytest.fixture
def sleeps() -> list[float]:
    """Pass sleeps.append as the sleep function to record delays."""
    return []


@pytest.fixture
def dcsetup_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved:
            logger.removeHandler(handler)
            handler.close()
