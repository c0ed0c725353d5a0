from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..host import Host
from ..lib import pyenv
from ..lib.profile import append_block, profile_mentions, shell_path_ref
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class ConfigurePyenvProfileStep:
    step_id = "25_configure_pyenv_profile"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        root = pyenv.pyenv_root(host, cfg.pyenv_root)
        profile = host.expand(cfg.profile)

        if profile_mentions(profile, "PYENV_ROOT"):
            logger.info("%s already configures pyenv", profile)
            action = "skipped_in_profile"
        else:
            logger.info("Adding pyenv to %s...", profile)
            append_block(
                profile,
                "Pyenv configuration",
                [
                    f'export PYENV_ROOT="{shell_path_ref(root, host.home)}"',
                    'export PATH="$PYENV_ROOT/bin:$PATH"',
                    'eval "$(pyenv init -)"',
                ],
                dry_run=host.dry_run,
            )
            action = "appended"

        pyenv.activate(host, root)
        decisions(state)["pyenv_profile"] = {"file": str(profile), "action": action}
        return StepResult.success(action)
