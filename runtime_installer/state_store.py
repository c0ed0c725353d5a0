from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = "1"


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    data: Any
    if _detect_format(p) in {"yaml", "yml"}:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str | Path, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("config", {})

    exe = state.setdefault("execution", {})
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])
    exe.setdefault("decisions", {})

    return state


def reset_progress(state: Dict[str, Any], *, keep_decisions: bool = False) -> None:
    """Forget completed steps and per-run findings; keep config.

    With ``keep_decisions`` the values earlier steps resolved (version, shims)
    survive, so a run that starts part-way through can still read them.
    """
    exe = state.setdefault("execution", {})
    for key in ("completed_steps", "errors", "warnings"):
        exe[key] = []
    if not keep_decisions:
        exe["decisions"] = {}
    exe.pop("verification", None)
    exe.pop("summary", None)


def decisions(state: Dict[str, Any]) -> Dict[str, Any]:
    return state.setdefault("execution", {}).setdefault("decisions", {})


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed
