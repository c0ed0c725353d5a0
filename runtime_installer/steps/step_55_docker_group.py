from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..host import Host
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class DockerGroupStep:
    step_id = "55_docker_group"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        user = host.user

        r = host.run(["id", "-nG", user], check=False)
        current = set(r.stdout.split()) if r.ok else set()

        added: List[str] = []
        failed: List[str] = []
        for group in cfg.docker_groups:
            if group in current:
                logger.info("%s is already in group %s", user, group)
                continue
            res = host.run(["usermod", "-aG", group, user], sudo=True, check=False)
            if res.ok:
                added.append(group)
            else:
                logger.warning("Failed to add %s to group %s (%s)", user, group, res.returncode)
                failed.append(group)

        decisions(state)["groups_added"] = added
        if failed:
            return StepResult.warning(f"could not add {user} to: {', '.join(failed)}; use sudo docker")
        if added:
            logger.warning("Added %s to %s; log out and back in for it to take effect", user, ", ".join(added))
        return StepResult.success()
