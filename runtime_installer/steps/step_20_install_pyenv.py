from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict

from ..config import InstallerConfig
from ..errors import RuntimeInstallError
from ..host import Host
from ..lib import pyenv
from ..lib.command import CommandError
from ..lib.net import download
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class InstallPyenvStep:
    step_id = "20_install_pyenv"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        root = pyenv.pyenv_root(host, cfg.pyenv_root)

        if root.exists():
            logger.warning("pyenv is already installed at %s", root)
            logger.info("Updating pyenv...")
            r = host.run(["git", "-C", str(root), "pull"], check=False)
            decisions(state)["pyenv"] = {"root": str(root), "action": "updated" if r.ok else "existing"}
            if not r.ok:
                return StepResult.warning(f"git pull in {root} failed ({r.returncode}); using it as-is")
            return StepResult.success("updated")

        logger.info("Installing pyenv...")
        with tempfile.TemporaryDirectory(prefix="runtime-installer-") as tmp:
            script = Path(tmp) / "pyenv-installer.sh"
            download(host, cfg.pyenv_installer_url, script)
            try:
                host.run(["bash", str(script)])
            except CommandError as e:
                raise RuntimeInstallError(
                    "pyenv installer failed.",
                    hints=["See https://github.com/pyenv/pyenv#installation for a manual install"],
                ) from e

        decisions(state)["pyenv"] = {"root": str(root), "action": "installed"}
        return StepResult.success("installed")
