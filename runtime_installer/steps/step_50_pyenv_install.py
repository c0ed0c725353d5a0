from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..errors import RuntimeInstallError
from ..host import Host
from ..lib import pyenv
from ..lib.command import CommandError
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class PyenvInstallStep:
    step_id = "50_pyenv_install"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        version = (decisions(state)).get("python_version")
        if not version:
            raise RuntimeInstallError("No resolved version; run the version resolution step first")

        root = pyenv.pyenv_root(host, cfg.pyenv_root)
        logger.info("Installing Python %s (this may take several minutes)...", version)
        try:
            pyenv.install(host, root, version)
            logger.info("Setting Python %s as global default...", version)
            pyenv.set_global(host, root, version)
        except CommandError as e:
            raise RuntimeInstallError(
                f"pyenv failed to install Python {version}.",
                hints=[
                    "Build logs are in /tmp/python-build.*.log",
                    "Missing build dependencies are the usual cause; rerun the dependency step",
                ],
            ) from e

        decisions(state)["install_strategy"] = "pyenv"
        return StepResult.success(version)
