from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..config import InstallerConfig
from ..errors import VersionResolutionError
from ..host import Host
from ..lib.pkg import Availability, package_availability
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


def installable(host: Host, packages: List[str]) -> bool:
    for pkg in packages:
        if package_availability(host, pkg) is not Availability.PRESENT:
            logger.info("  %s: not installable", pkg)
            return False
    return True


def select_version(host: Host, cfg: InstallerConfig) -> tuple[Optional[str], List[str]]:
    """First preferred version whose whole runtime package set is installable.

    Returns (selected, available). ``available`` lists every candidate that
    passed, for the log; the scan does not stop at the first hit.
    """

    available: List[str] = []
    for version in cfg.candidate_versions:
        if installable(host, cfg.runtime_packages(version)):
            available.append(version)
    return (available[0] if available else None), available


class ResolveVersionStep:
    step_id = "40_resolve_version"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})

        logger.info("Checking available Python versions (%s)...", ", ".join(cfg.candidate_versions))
        selected, available = select_version(host, cfg)
        d = decisions(state)
        d["available_versions"] = available

        if selected is None:
            first = cfg.candidate_versions[-1] if cfg.candidate_versions else "3.11"
            raise VersionResolutionError(
                f"No Python {' / '.join(cfg.candidate_versions)} versions available in repositories.",
                hints=[
                    "Please check:",
                    "  1. Internet connection",
                    f"  2. apt-cache policy python{first}",
                    f"  3. sudo apt-get update && apt-cache search python{first}",
                    "Alternatives: runtime-installer --variant pyenv, a container image with newer Python,",
                    "or a manual build from https://www.python.org/downloads/",
                ],
            )

        d["python_version"] = selected
        logger.info("Found available Python versions: %s", " ".join(available))
        logger.info("Will install Python %s", selected)
        return StepResult.success(f"python{selected}")
