from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..errors import DependencyError
from ..host import Host
from ..lib.command import CommandError
from ..lib.pkg import Availability, apt_install, apt_update, package_availability
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class InstallDependenciesStep:
    step_id = "10_install_dependencies"

    def _install_optional(self, host: Host, packages: List[str]) -> tuple[List[str], List[str]]:
        installed: List[str] = []
        skipped: List[str] = []
        for pkg in packages:
            availability = package_availability(host, pkg)
            if availability is Availability.ABSENT:
                logger.warning("Package %s not available, skipping...", pkg)
                skipped.append(pkg)
                continue
            if availability is Availability.UNKNOWN:
                logger.warning("Could not determine whether %s is available, skipping...", pkg)
                skipped.append(pkg)
                continue

            logger.info("Installing %s...", pkg)
            try:
                apt_install(host, [pkg])
            except CommandError as e:
                logger.warning("Failed to install %s, continuing... (%s)", pkg, e.result.returncode)
                skipped.append(pkg)
                continue
            installed.append(pkg)
        return installed, skipped

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})

        logger.info("Updating package list...")
        try:
            apt_update(host)
        except CommandError as e:
            raise DependencyError(
                "Failed to update package list.",
                hints=["Check your internet connection and repository access"],
            ) from e

        core = cfg.core_packages
        logger.info("Installing core dependencies: %s", " ".join(core) or "(none)")
        try:
            apt_install(host, core)
        except CommandError as e:
            raise DependencyError(
                f"Failed to install core dependencies: {' '.join(core)}",
                hints=[
                    "Fix the apt error above and rerun",
                    "sudo apt-get install -f -y  # repairs interrupted installs",
                ],
            ) from e

        optional = cfg.optional_packages
        if optional:
            logger.info("Installing optional dependencies (may skip some on WSL)...")
        installed, skipped = self._install_optional(host, optional)

        d = decisions(state)
        d["core_packages"] = core
        d["optional_installed"] = installed
        d["optional_skipped"] = skipped

        if skipped:
            return StepResult.warning(f"optional packages skipped: {', '.join(skipped)}")
        return StepResult.success()
