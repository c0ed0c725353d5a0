"""
Tests for the step pipeline and its tagged results.
"""

import pytest

from runtime_installer.errors import InstallerError
from runtime_installer.lib.command import CmdResult, CommandError
from runtime_installer.pipeline import StepResult, StepStatus, run_pipeline
from runtime_installer.state_store import ensure_defaults


class RecordingStep:
    def __init__(self, step_id, outcome=None, raises=None, log=None):
        self.step_id = step_id
        self.outcome = outcome or StepResult.success()
        self.raises = raises
        self.log = log if log is not None else []

    def run(self, host, state):
        self.log.append(self.step_id)
        if self.raises is not None:
            raise self.raises
        return self.outcome


@pytest.fixture
def state():
    return ensure_defaults({})


class TestRunPipeline:
    def test_runs_all_steps_in_order(self, host, state):
        log = []
        steps = [RecordingStep("a", log=log), RecordingStep("b", log=log), RecordingStep("c", log=log)]
        result = run_pipeline(host=host, state=state, steps=steps)
        assert log == ["a", "b", "c"]
        assert result.ok
        assert result.exit_code == 0
        assert state["execution"]["completed_steps"] == ["a", "b", "c"]
        assert state["execution"]["current_step"] is None

    def test_fatal_stops_the_run(self, host, state):
        log = []
        steps = [
            RecordingStep("a", log=log),
            RecordingStep("b", outcome=StepResult.fatal("nope", ["try again"]), log=log),
            RecordingStep("c", log=log),
        ]
        result = run_pipeline(host=host, state=state, steps=steps)
        assert log == ["a", "b"]
        assert not result.ok
        assert result.exit_code == 1
        assert result.fatal[0] == "b"
        assert state["execution"]["errors"] == [{"step": "b", "error": "nope", "hints": ["try again"]}]
        assert "b" not in state["execution"]["completed_steps"]

    def test_installer_error_becomes_fatal(self, host, state):
        steps = [RecordingStep("a", raises=InstallerError("broken", hints=["hint 1"]))]
        result = run_pipeline(host=host, state=state, steps=steps)
        step_id, outcome = result.fatal
        assert outcome.status is StepStatus.FATAL
        assert outcome.message == "broken"
        assert outcome.hints == ("hint 1",)

    def test_command_error_becomes_fatal(self, host, state):
        err = CommandError(CmdResult(argv=["apt-get", "update"], returncode=100, stdout="", stderr="E: x"))
        result = run_pipeline(host=host, state=state, steps=[RecordingStep("a", raises=err)])
        assert not result.ok
        assert "apt-get update" in result.fatal[1].message

    def test_bugs_propagate(self, host, state):
        with pytest.raises(ZeroDivisionError):
            run_pipeline(host=host, state=state, steps=[RecordingStep("a", raises=ZeroDivisionError())])

    def test_warning_continues_and_is_recorded(self, host, state):
        log = []
        steps = [RecordingStep("a", outcome=StepResult.warning("skipped x"), log=log), RecordingStep("b", log=log)]
        result = run_pipeline(host=host, state=state, steps=steps)
        assert result.ok
        assert log == ["a", "b"]
        assert state["execution"]["warnings"] == [{"step": "a", "warning": "skipped x"}]

    def test_resume_skips_completed(self, host, state):
        state["execution"]["completed_steps"] = ["a"]
        log = []
        result = run_pipeline(
            host=host, state=state, steps=[RecordingStep("a", log=log), RecordingStep("b", log=log)], resume=True
        )
        assert log == ["b"]
        assert result.skipped_steps == ["a"]

    def test_without_resume_completed_steps_rerun(self, host, state):
        state["execution"]["completed_steps"] = ["a"]
        log = []
        run_pipeline(host=host, state=state, steps=[RecordingStep("a", log=log)])
        assert log == ["a"]

    def test_start_at_and_stop_after(self, host, state):
        log = []
        steps = [RecordingStep(s, log=log) for s in ("a", "b", "c", "d")]
        result = run_pipeline(host=host, state=state, steps=steps, start_at="b", stop_after="c")
        assert log == ["b", "c"]
        assert result.ran_steps == ["b", "c"]

    def test_unknown_step_id_rejected_before_running(self, host, state):
        log = []
        with pytest.raises(ValueError):
            run_pipeline(host=host, state=state, steps=[RecordingStep("a", log=log)], start_at="zz")
        assert log == []
