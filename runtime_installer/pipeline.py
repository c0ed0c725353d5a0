from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .errors import InstallerError
from .host import Host
from .lib.command import CommandError
from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class StepStatus(str, enum.Enum):
    SUCCESS = "success"
    SKIPPED_WARNING = "skipped_warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    message: str = ""
    hints: Tuple[str, ...] = ()

    @classmethod
    def success(cls, message: str = "") -> "StepResult":
        return cls(StepStatus.SUCCESS, message)

    @classmethod
    def warning(cls, message: str) -> "StepResult":
        return cls(StepStatus.SKIPPED_WARNING, message)

    @classmethod
    def fatal(cls, message: str, hints: Sequence[str] = ()) -> "StepResult":
        return cls(StepStatus.FATAL, message, tuple(hints))


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    outcomes: List[Tuple[str, StepResult]] = field(default_factory=list)
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)

    @property
    def fatal(self) -> Optional[Tuple[str, StepResult]]:
        for step_id, outcome in self.outcomes:
            if outcome.status is StepStatus.FATAL:
                return step_id, outcome
        return None

    @property
    def ok(self) -> bool:
        return self.fatal is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def _check_step_id(steps: Sequence[Step], step_id: Optional[str], flag: str) -> None:
    if step_id is not None and step_id not in {s.step_id for s in steps}:
        known = ", ".join(s.step_id for s in steps)
        raise ValueError(f"{flag}: unknown step {step_id!r} (known: {known})")


def _run_step(step: Step, host: Host, state: Dict[str, Any]) -> StepResult:
    try:
        return step.run(host, state)
    except InstallerError as e:
        return StepResult.fatal(str(e), e.hints)
    except CommandError as e:
        return StepResult.fatal(str(e))


def _log_outcome(step_id: str, outcome: StepResult) -> None:
    if outcome.status is StepStatus.FATAL:
        logger.error("Step %s failed: %s", step_id, outcome.message)
        for hint in outcome.hints:
            logger.error("  %s", hint)
    elif outcome.status is StepStatus.SKIPPED_WARNING:
        logger.warning("Step %s finished with warnings: %s", step_id, outcome.message)
    else:
        logger.info("Step %s done%s", step_id, f": {outcome.message}" if outcome.message else "")


def run_pipeline(
    *,
    host: Host,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
) -> PipelineResult:
    """Run steps in order, stopping at the first fatal outcome."""

    _check_step_id(steps, start_at, "start_at")
    _check_step_id(steps, stop_after, "stop_after")

    result = PipelineResult(state=state)
    exe = state.setdefault("execution", {})
    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        exe["current_step"] = step.step_id

        if resume and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            result.skipped_steps.append(step.step_id)
        else:
            logger.info("Running step %s", step.step_id)
            outcome = _run_step(step, host, state)
            result.outcomes.append((step.step_id, outcome))
            result.ran_steps.append(step.step_id)
            _log_outcome(step.step_id, outcome)

            if outcome.status is StepStatus.FATAL:
                exe.setdefault("errors", []).append(
                    {"step": step.step_id, "error": outcome.message, "hints": list(outcome.hints)}
                )
                return result

            if outcome.status is StepStatus.SKIPPED_WARNING:
                exe.setdefault("warnings", []).append({"step": step.step_id, "warning": outcome.message})
            mark_step_completed(state, step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    exe["current_step"] = None
    return result
