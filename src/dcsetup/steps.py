# Setup step tracking (diagnostics only)
import logging
import time
from collections.abc import Callable, Iterator

from dcsetup.models import SetupStep, StepStatus
from dcsetup.utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)


class StepTracker:
    """Ordered, append-only log of setup steps.

    ABOUTME: begin() returns the step's index, update() mutates that entry in place
    ABOUTME: Never raises; nothing in the orchestrator reads it back for control flow
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._start = clock()
        self._steps: list[SetupStep] = []

    @property
    def steps(self) -> list[SetupStep]:
        return list(self._steps)

    def begin(self, name: str, status: StepStatus = "started") -> int:
        now = self._clock()
        self._steps.append(
            SetupStep(
                name=name,
                status=status,
                started_at=now,
                elapsed_ms=int((now - self._start) * 1000),
            )
        )
        logger.debug(f"step {name}: {status}")
        return len(self._steps) - 1

    def update(
        self,
        handle: int,
        status: StepStatus,
        error: BaseException | str | None = None,
    ) -> None:
        if not 0 <= handle < len(self._steps):
            return

        step = self._steps[handle]
        now = self._clock()
        step.status = status
        step.completed_at = now
        step.elapsed_ms = int((now - self._start) * 1000)
        if error is not None:
            step.error = sanitize_error(error)
        logger.debug(f"step {step.name}: {status}")

    def summary(self) -> Iterator[str]:
        """Yield one line per step, e.g. 'update_config: completed (+12ms)'."""
        for step in self._steps:
            line = f"{step.name}: {step.status} (+{step.elapsed_ms}ms)"
            if step.error:
                line += f" - {step.error}"
            yield line
