from __future__ import annotations

import logging
import re
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..host import Host
from ..lib.pkg import (
    DpkgEntry,
    apt_autoclean,
    apt_autoremove,
    apt_fix_broken,
    apt_remove,
    apt_update,
    dpkg_installed_packages,
)
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


def find_conflicts(entries: List[DpkgEntry], name_pattern: str, version_pattern: str) -> List[DpkgEntry]:
    name_re = re.compile(name_pattern)
    version_re = re.compile(version_pattern)
    return [e for e in entries if name_re.search(e.name) and version_re.search(e.version)]


class ResolveConflictsStep:
    step_id = "30_resolve_conflicts"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        if not cfg.conflict_name_pattern:
            return StepResult.success("no conflict rules configured")

        logger.info("Checking for conflicting Python installations...")
        conflicts = find_conflicts(
            dpkg_installed_packages(host), cfg.conflict_name_pattern, cfg.conflict_version_pattern
        )
        decisions(state)["conflicts"] = [f"{e.name}={e.version}" for e in conflicts]
        if not conflicts:
            return StepResult.success()

        logger.warning(
            "Found conflicting release candidate installation (%s). Cleaning up...",
            ", ".join(f"{e.name} {e.version}" for e in conflicts),
        )

        packages = cfg.conflict_packages or sorted({e.name for e in conflicts})
        cleanup = [
            ("fix broken packages", lambda: apt_fix_broken(host, check=False)),
            ("remove conflicting packages", lambda: apt_remove(host, packages, check=False)),
            ("purge conflicting packages", lambda: apt_remove(host, packages, purge=True, check=False)),
            ("autoremove", lambda: apt_autoremove(host, check=False)),
            ("autoclean", lambda: apt_autoclean(host, check=False)),
        ]
        failed: List[str] = []
        for label, action in cleanup:
            r = action()
            if not r.ok:
                logger.warning("Cleanup step '%s' failed (%s), continuing...", label, r.returncode)
                failed.append(label)

        apt_update(host)

        if failed:
            return StepResult.warning(f"cleanup partially failed: {', '.join(failed)}")
        return StepResult.success(f"removed {', '.join(packages)}")
