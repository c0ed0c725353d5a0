from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..errors import VersionResolutionError
from ..host import Host
from ..lib import pyenv
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class ResolvePyenvVersionStep:
    step_id = "40_resolve_pyenv_version"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        root = pyenv.pyenv_root(host, cfg.pyenv_root)

        logger.info("Updating pyenv and Python build definitions...")
        updated = pyenv.update(host, root)

        versions = pyenv.list_installable(host, root)
        latest = {minor: pyenv.latest_stable(versions, minor) for minor in cfg.candidate_versions}
        for minor, version in latest.items():
            logger.info("  %s -> %s", minor, version or "not available")

        selected = next((v for v in latest.values() if v), None)
        d = decisions(state)
        d["available_versions"] = [v for v in latest.values() if v]
        if selected is None:
            raise VersionResolutionError(
                "Could not find a suitable Python version in pyenv.",
                hints=["List available versions with: pyenv install --list", "Then install one manually."],
            )

        d["python_version"] = selected
        logger.info("Will install Python %s", selected)
        if not updated:
            return StepResult.warning(f"pyenv update failed; selected {selected} from existing definitions")
        return StepResult.success(selected)
