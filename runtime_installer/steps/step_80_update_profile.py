from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..host import Host
from ..lib.profile import append_block, path_export_line, profile_has_line
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class UpdateProfileStep:
    step_id = "80_update_profile"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        local_bin = host.expand(cfg.local_bin)
        profile = host.expand(cfg.profile)
        line = path_export_line(local_bin, host.home)

        # PATH and the profile are checked separately: PATH may come from
        # somewhere other than this profile.
        if host.has_path_entry(local_bin):
            logger.info("%s already on PATH; leaving %s alone", local_bin, profile)
            action = "skipped_on_path"
        elif profile_has_line(profile, line):
            logger.info("%s already exports %s", profile, local_bin)
            action = "skipped_in_profile"
        else:
            logger.info("Adding %s to PATH in %s...", local_bin, profile)
            append_block(profile, "Add local bin to PATH", [line], dry_run=host.dry_run)
            action = "appended"

        host.prepend_path(local_bin)
        decisions(state)["profile"] = {"file": str(profile), "action": action}
        return StepResult.success(action)
