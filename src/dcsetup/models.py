# Core data models for dcsetup
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, Sequence, runtime_checkable

OSFamily = Literal["windows", "macos", "linux", "other"]

RunMethod = Literal["npx", "global", "npm_script", "direct"]

StepStatus = Literal[
    "started",
    "completed",
    "failed",
    "skipped",
    "no_process_found",
    "created",
    "exists",
    "create_failed",
]

# ABOUTME: Host config is kept as the decoded JSON object so unknown keys pass through
HostConfig = dict[str, Any]


@dataclass(frozen=True)
class ExecutionContext:
    """Classification of the environment this setup run was started from.

    ABOUTME: Derived once per run by detect.detect(), immutable afterwards
    ABOUTME: Passed explicitly through the orchestrator, never stored globally
    """
    platform: OSFamily
    shell: str
    run_method: RunMethod
    is_ci: bool = False
    debug_mode: bool = False


@dataclass(frozen=True)
class ServerLaunchSpec:
    """How the host application should start the managed MCP server.

    ABOUTME: Frozen so a built spec can't be edited between build and merge
    ABOUTME: Serialized without env when env is empty
    """
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "command": self.command,
            "args": list(self.args),
        }
        if self.env:
            result["env"] = dict(self.env)
        return result


@dataclass
class SetupStep:
    """One entry in the setup step log."""
    name: str
    status: StepStatus
    started_at: float
    completed_at: float | None = None
    elapsed_ms: int = 0
    error: str | None = None


@dataclass
class RestartOutcome:
    """Result of a best-effort host application restart.

    ABOUTME: killed is True when the kill command succeeded
    ABOUTME: failed only reflects the relaunch, a missing process is not a failure
    """
    attempted: bool = False
    killed: bool = False
    relaunched: bool = False
    skipped: bool = False
    failed: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of an external command."""
    stdout: str = ""
    stderr: str = ""


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for the external command executor.

    ABOUTME: Used by the restart coordinator and nowhere else
    ABOUTME: Implementations raise RestartSubStepError on non-zero exit or timeout
    """

    def run(
        self,
        args: Sequence[str],
        timeout: float,
        detach: bool = False,
    ) -> CommandResult:
        """Run a command and wait at most timeout seconds for it.

        ABOUTME: detach=True starts the command without waiting for it to exit
        """
        ...
