from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..errors import RuntimeInstallError
from ..host import Host
from ..lib.command import CommandError
from ..lib.net import download
from ..lib.pkg import apt_has_package, apt_install
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class BootstrapPipStep:
    step_id = "60_bootstrap_pip"

    def _install_companions(self, host: Host, packages: List[str]) -> List[str]:
        skipped: List[str] = []
        for pkg in packages:
            if not apt_has_package(host, pkg):
                logger.warning("Package %s not available, skipping...", pkg)
                skipped.append(pkg)
                continue
            apt_install(host, [pkg])
        return skipped

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        version = decisions(state).get("python_version")
        if not version:
            raise RuntimeInstallError("No resolved version; run the version resolution step first")

        logger.info("Installing pip for Python %s...", version)
        skipped = self._install_companions(host, cfg.pip_companion_packages(version))

        interpreter = f"python{version}"
        with tempfile.TemporaryDirectory(prefix="runtime-installer-") as tmp:
            script = Path(tmp) / "get-pip.py"
            try:
                download(host, cfg.pip_bootstrap_url, script)
                host.run([interpreter, str(script), "--user"])
            except CommandError as e:
                raise RuntimeInstallError(
                    f"get-pip.py failed for {interpreter}.",
                    hints=[f"Try: {interpreter} -m ensurepip --user"],
                ) from e
            finally:
                script.unlink(missing_ok=True)

        decisions(state)["pip_bootstrapped"] = True
        if skipped:
            return StepResult.warning(f"companion packages skipped: {', '.join(skipped)}")
        return StepResult.success()
