from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import PrivilegeError
from ..host import Host
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


class PreflightStep:
    """Refuse to run as root: shims and profile edits belong to a regular user."""

    step_id = "00_preflight"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        if host.euid == 0:
            raise PrivilegeError(
                "This installer should not be run as root.",
                hints=["Please run as a regular user; it calls sudo for the steps that need it."],
            )

        decisions(state)["user"] = host.user
        logger.info("Running as %s (euid=%s, home=%s)", host.user, host.euid, host.home)
        return StepResult.success()
