from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..errors import ShimError
from ..host import Host
from ..lib.shims import install_symlink_shim, install_wrapper_shim
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class InstallShimsStep:
    step_id = "70_install_shims"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        version = str(decisions(state).get("python_version") or "")
        local_bin = host.expand(cfg.local_bin)
        targets = cfg.shim_targets(version=version, local_bin=str(local_bin), home=str(host.home))

        if cfg.shim_mode not in ("symlink", "wrapper"):
            raise ShimError(
                f"Unknown shim mode: {cfg.shim_mode}",
                hints=["Set shims.mode to 'symlink' or 'wrapper' in the config file."],
            )

        logger.info("Creating command shims in %s (%s)...", local_bin, cfg.shim_mode)
        if not host.dry_run:
            local_bin.mkdir(parents=True, exist_ok=True)

        for name, target in targets.items():
            if cfg.shim_mode == "wrapper":
                install_wrapper_shim(local_bin, name, target, dry_run=host.dry_run)
            else:
                install_symlink_shim(local_bin, name, target, dry_run=host.dry_run)

        decisions(state)["shims"] = {
            "mode": cfg.shim_mode,
            "dir": str(local_bin),
            "targets": targets,
        }
        return StepResult.success(", ".join(sorted(targets)))
