"""
Engine executor — sub-executor contracts and the ordered step runner.

Long-running deletions (services, jobs, tasks, environments, pipelines)
are handed to small executor objects so that the workflows never need
to know how a given resource is removed. Three shapes exist:

    Executor     execute()
    AskExecutor  ask() → execute()
    Command      validate() → ask() → execute()

Workflows themselves are an ordered list of named steps. The runner
executes them one after another and stops at the first failure; steps
that already ran are NOT undone.

Flow:
    steps → run in order → first exception stops the chain → report
"""

from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class Executor(ABC):
    """Performs a side effect."""

    @abstractmethod
    def execute(self) -> None:
        """Run to completion or raise."""


class AskExecutor(Executor):
    """Gathers input interactively, then performs a side effect."""

    @abstractmethod
    def ask(self) -> None:
        """Prompt for and validate anything ``execute`` needs."""


class Command(AskExecutor):
    """A full command: flag validation, prompting, execution."""

    @abstractmethod
    def validate(self) -> None:
        """Check flag values before prompting."""


def run_command(cmd: Command) -> None:
    """Drive a command through validate → ask → execute."""
    cmd.validate()
    cmd.ask()
    cmd.execute()


@dataclass
class Step:
    """A named unit of work in an ordered workflow."""

    name: str
    run: Callable[[], None]


@dataclass
class StepReport:
    """Result of running an ordered list of steps."""

    operation_id: str = ""
    workflow: str = ""
    completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        if self.completed:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "workflow": self.workflow,
            "status": self.status,
            "completed": list(self.completed),
            "failed_step": self.failed_step,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


def run_steps(
    steps: Sequence[Step],
    workflow: str = "",
    report: StepReport | None = None,
) -> StepReport:
    """Run steps in order, stopping at the first exception.

    The exception is re-raised unchanged after the report records which
    step failed. Pass ``report`` to keep access to the partial result
    when the call raises.

    Args:
        steps: Steps to run, in order.
        workflow: Name used in log lines and the report.
        report: Optional report to fill in place.

    Returns:
        The filled-in StepReport (all steps completed).
    """
    if report is None:
        report = StepReport()
    report.workflow = workflow
    if not report.operation_id:
        report.operation_id = generate_operation_id()

    start = time.monotonic()
    try:
        for step in steps:
            logger.debug("%s: starting step '%s'", workflow, step.name)
            try:
                step.run()
            except Exception as e:
                report.failed_step = step.name
                report.error = str(e)
                logger.info("✗ %s:%s → %s", workflow, step.name, e)
                raise
            report.completed.append(step.name)
            logger.info("✓ %s:%s", workflow, step.name)
    finally:
        report.duration_ms = int((time.monotonic() - start) * 1000)

    return report


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


# ── Progress labels ─────────────────────────────────────────────


def succeeded(label: str) -> str:
    """Final progress label for a step that worked."""
    return f"✓ {label}"


def failed(label: str) -> str:
    """Final progress label for a step that didn't."""
    return f"✗ {label}"
