"""
Tests for console formatting and state persistence helpers.
"""

import logging

from runtime_installer.logging_utils import ConsoleFormatter
from runtime_installer.state_store import (
    ensure_defaults,
    is_step_completed,
    load_state,
    mark_step_completed,
    reset_progress,
    save_state,
)


def _record(level, msg):
    return logging.LogRecord("x", level, __file__, 1, msg, None, None)


class TestConsoleFormatter:
    def test_plain_tags(self):
        fmt = ConsoleFormatter(color=False)
        assert fmt.format(_record(logging.INFO, "Updating package list...")) == "[INFO] Updating package list..."
        assert fmt.format(_record(logging.WARNING, "skip")) == "[WARNING] skip"
        assert fmt.format(_record(logging.ERROR, "boom")) == "[ERROR] boom"

    def test_colored_tags(self):
        fmt = ConsoleFormatter(color=True)
        out = fmt.format(_record(logging.ERROR, "boom"))
        assert out == "\033[0;31m[ERROR]\033[0m boom"


class TestStateStore:
    def test_json_round_trip(self, tmp_path):
        p = tmp_path / "nested" / "state.json"
        state = ensure_defaults({})
        mark_step_completed(state, "00_preflight")
        save_state(p, state)
        loaded = load_state(p)
        assert is_step_completed(loaded, "00_preflight")

    def test_yaml_state(self, tmp_path):
        p = tmp_path / "state.yaml"
        save_state(p, ensure_defaults({"config": {"variant": "pyenv"}}))
        assert load_state(p)["config"]["variant"] == "pyenv"

    def test_missing_file_is_empty(self, tmp_path):
        assert load_state(tmp_path / "none.json") == {}

    def test_reset_keeps_config(self):
        state = ensure_defaults({"config": {"variant": "ppa"}})
        mark_step_completed(state, "a")
        state["execution"]["decisions"]["python_version"] = "3.12"
        reset_progress(state)
        assert state["execution"]["completed_steps"] == []
        assert state["execution"]["decisions"] == {}
        assert state["config"] == {"variant": "ppa"}
