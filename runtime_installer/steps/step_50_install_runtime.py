from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..errors import RuntimeInstallError
from ..host import Host
from ..lib.escalation import EscalationExhausted, Strategy, escalate
from ..lib.pkg import apt_fix_broken, apt_install, dpkg_configure_pending
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


def install_strategies(host: Host, packages: List[str]) -> List[Strategy]:
    """Plain install, then forced reinstall, then dpkg repair and a last install."""

    def repair_then_install() -> None:
        dpkg_configure_pending(host)
        apt_fix_broken(host)
        apt_install(host, packages)

    return [
        Strategy("install", lambda: apt_install(host, packages)),
        Strategy("reinstall", lambda: apt_install(host, packages, reinstall=True)),
        Strategy("repair and install", repair_then_install),
    ]


class InstallRuntimeStep:
    step_id = "50_install_runtime"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        d = decisions(state)
        version = str(d.get("python_version") or "")
        packages = cfg.runtime_packages(version)
        if not packages:
            raise RuntimeInstallError("No runtime packages configured (runtime_packages)")
        if any("{version}" in p for p in (cfg.raw.get("runtime_packages") or [])) and not version:
            raise RuntimeInstallError("No resolved version; run the version resolution step first")

        logger.info("Installing %s...", " ".join(packages))
        r = apt_fix_broken(host, check=False)
        if not r.ok:
            logger.warning("apt-get install -f failed (%s), continuing...", r.returncode)

        try:
            strategy = escalate(install_strategies(host, packages))
        except EscalationExhausted as e:
            raise RuntimeInstallError(
                f"All installation attempts failed for {' '.join(packages)}.",
                hints=[
                    "Please check the error messages above and try:",
                    "  1. sudo apt-get update",
                    f"  2. apt-cache policy {packages[0]}",
                    "  3. Check internet connection and repository access",
                ],
            ) from e

        d["install_strategy"] = strategy
        d["runtime_packages"] = packages
        if strategy != "install":
            return StepResult.warning(f"installed via fallback strategy '{strategy}'")
        return StepResult.success()
