"""Step outcomes and the sequential pipeline driver."""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from sglang_edge.errors import InstallerError
from sglang_edge.host import CommandRunner, HostEnvironment
from sglang_edge.log import Logger

Confirm = Callable[[str], bool]


class Outcome(enum.Enum):
    PASS = "pass"
    WARN = "warn"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepResult:
    outcome: Outcome
    message: str = ""
    details: Optional[str] = None

    @classmethod
    def passed(cls, message: str = "", details: Optional[str] = None) -> "StepResult":
        return cls(Outcome.PASS, message, details)

    @classmethod
    def warn(cls, message: str, details: Optional[str] = None) -> "StepResult":
        return cls(Outcome.WARN, message, details)

    @classmethod
    def fatal(cls, message: str, details: Optional[str] = None) -> "StepResult":
        return cls(Outcome.FATAL, message, details)


@dataclass
class InstallContext:
    """Everything a step may touch"""

    config: Dict[str, Any]
    host: HostEnvironment
    runner: CommandRunner
    logger: Logger
    confirm: Confirm
    download: Callable[[str, Path], Path]


@dataclass(frozen=True)
class Step:
    name: str
    run: Callable[[InstallContext], StepResult]
    kind: str = "action"


@dataclass
class PipelineResult:
    completed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    failed_step: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def run_pipeline(ctx: InstallContext, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order, stopping at the first fatal outcome.

    Installer errors raised inside a step (failed commands, failed downloads,
    unwritable files) and any other OSError count as a fatal outcome for that
    step. Nothing already applied is undone.
    """
    result = PipelineResult()

    for step in steps:
        try:
            outcome = step.run(ctx)
        except (InstallerError, OSError) as e:
            outcome = StepResult.fatal(str(e))

        if outcome.outcome is Outcome.FATAL:
            ctx.logger.error(outcome.message)
            if outcome.details:
                ctx.logger.info(outcome.details)
            result.failed_step = step.name
            return result

        if outcome.outcome is Outcome.WARN:
            if outcome.message:
                ctx.logger.warn(outcome.message)
            if outcome.details:
                ctx.logger.info(outcome.details)
            result.warnings.append(step.name)
        elif outcome.message:
            ctx.logger.success(outcome.message)

        result.completed.append(step.name)

    return result
