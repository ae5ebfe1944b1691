# dcsetup - Desktop Commander setup for Claude Desktop
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and errors
from dcsetup.errors import (
    ConfigDirError,
    ConfigReadError,
    ConfigWriteError,
    RestartSubStepError,
    SetupError,
)
from dcsetup.models import (
    CommandResult,
    CommandRunner,
    ExecutionContext,
    RestartOutcome,
    ServerLaunchSpec,
    SetupStep,
)

# ABOUTME: Export the setup entry points
from dcsetup.detect import detect
from dcsetup.orchestrator import SetupReport, run_setup, setup

__all__ = [
    "__version__",
    "CommandResult",
    "CommandRunner",
    "ExecutionContext",
    "RestartOutcome",
    "ServerLaunchSpec",
    "SetupStep",
    "SetupError",
    "ConfigReadError",
    "ConfigDirError",
    "ConfigWriteError",
    "RestartSubStepError",
    "SetupReport",
    "detect",
    "run_setup",
    "setup",
]
