from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

from .config import DEFAULT_VARIANT, load_config
from .host import Host
from .lib.env import PATHS
from .lib.manifests import available_variants
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, Step, run_pipeline
from .state_store import ensure_defaults, load_state, reset_progress, save_state
from .steps import (
    BootstrapPipStep,
    ConfigurePyenvProfileStep,
    DockerGroupStep,
    EnableChannelStep,
    InstallDependenciesStep,
    InstallPyenvStep,
    InstallRuntimeStep,
    InstallShimsStep,
    PreflightStep,
    PyenvInstallStep,
    ResolveConflictsStep,
    ResolvePyenvVersionStep,
    ResolveVersionStep,
    UpdateProfileStep,
    VerifyStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = PATHS.state_default


def build_steps(variant: str = DEFAULT_VARIANT) -> List[Step]:
    if variant == "ppa":
        return [
            PreflightStep(),
            InstallDependenciesStep(),
            EnableChannelStep(),
            ResolveConflictsStep(),
            ResolveVersionStep(),
            InstallRuntimeStep(),
            BootstrapPipStep(),
            InstallShimsStep(),
            UpdateProfileStep(),
            VerifyStep(),
        ]
    if variant == "pyenv":
        return [
            PreflightStep(),
            InstallDependenciesStep(),
            InstallPyenvStep(),
            ConfigurePyenvProfileStep(),
            ResolvePyenvVersionStep(),
            PyenvInstallStep(),
            InstallShimsStep(),
            UpdateProfileStep(),
            VerifyStep(),
        ]
    if variant == "docker":
        return [
            PreflightStep(),
            InstallDependenciesStep(),
            InstallRuntimeStep(),
            DockerGroupStep(),
            VerifyStep(),
        ]
    raise ValueError(f"Unknown variant {variant!r}")


def run(
    *,
    variant: str = DEFAULT_VARIANT,
    config_path: Optional[str] = None,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
    host: Optional[Host] = None,
) -> PipelineResult:
    """Run one installer variant, persisting state for inspection and resume."""

    host = host or Host.from_environment(dry_run=dry_run)
    actual_log_path = configure_logging(
        log_path=str(host.expand(log_path)),
        level=logging.DEBUG if verbose else logging.INFO,
    )

    state_file = host.expand(state_path)
    state = ensure_defaults(load_state(state_file))
    if not resume:
        reset_progress(state, keep_decisions=start_at is not None)
    state["config"] = load_config(variant, config_path)

    paths: Dict[str, Any] = state.setdefault("execution", {}).setdefault("paths", {})
    paths["log_path_requested"] = log_path
    paths["log_path_actual"] = actual_log_path

    steps = build_steps(variant)
    logger.info("Installing: %s", state["config"].get("description") or variant)

    try:
        result = run_pipeline(
            host=host,
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            resume=resume,
        )
        state.setdefault("execution", {})["summary"] = {
            "ok": result.ok,
            "ran_steps": result.ran_steps,
            "skipped_steps": result.skipped_steps,
        }
        if result.ok:
            logger.info("Installation complete!")
        else:
            logger.error("Installation aborted. Partial changes are left in place; fix the error and rerun.")
        return result
    except Exception as e:
        logger.exception("Installer failed")
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_file, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="runtime-installer",
        description="Install a newer Python (or Docker) next to the system one on Ubuntu/WSL.",
    )
    p.add_argument("--variant", default=DEFAULT_VARIANT, choices=available_variants(), help="What to install and how")
    p.add_argument("--config", default=None, help="YAML file merged over the variant's defaults")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_resolve_version)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--resume", action="store_true", help="Skip steps completed by a previous run")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output")

    args = p.parse_args(argv)

    step_ids = [s.step_id for s in build_steps(args.variant)]
    for flag, value in (("--start-at", args.start_at), ("--stop-after", args.stop_after)):
        if value is not None and value not in step_ids:
            p.error(f"{flag}: unknown step {value!r} for variant {args.variant} (known: {', '.join(step_ids)})")

    result = run(
        variant=args.variant,
        config_path=args.config,
        state_path=args.state,
        log_path=args.log,
        start_at=args.start_at,
        stop_after=args.stop_after,
        resume=bool(args.resume),
        dry_run=bool(args.dry_run),
        verbose=bool(args.verbose),
    )
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
