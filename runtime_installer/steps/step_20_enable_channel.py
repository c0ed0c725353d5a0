from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..config import InstallerConfig
from ..errors import ChannelError
from ..host import Host
from ..lib.command import CommandError
from ..lib.pkg import (
    Availability,
    add_apt_repository,
    apt_search,
    apt_update,
    package_availability,
    release_codename,
)
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)

AVAILABLE = "available"
UNAVAILABLE = "unavailable"
UNKNOWN = "unknown"


@dataclass
class ChannelProbe:
    status: str
    candidates: List[str] = field(default_factory=list)
    method: str = ""


def probe_channel(host: Host, pattern: str, names: List[str]) -> ChannelProbe:
    """Work out whether the package index now offers any of ``names``.

    Tries a regex name search, then a plain search, then ``apt-cache show``
    per name. Only the direct checks can conclude "unavailable"; if they are
    inconclusive the result is "unknown" rather than a guess.
    """

    wanted = set(names)

    primary = apt_search(host, [pattern], names_only=True)
    found = sorted(wanted.intersection(primary.names))
    if found:
        return ChannelProbe(AVAILABLE, found, "regex search")

    secondary = apt_search(host, names)
    found = sorted(wanted.intersection(secondary.names))
    if found:
        return ChannelProbe(AVAILABLE, found, "plain search")
    if not (primary.ok and secondary.ok) or primary.unparsed or secondary.unparsed:
        logger.warning("apt-cache search output was not usable; checking packages directly")

    direct = {name: package_availability(host, name) for name in names}
    found = [name for name in names if direct[name] is Availability.PRESENT]
    if found:
        return ChannelProbe(AVAILABLE, found, "direct check")
    if direct and all(a is Availability.ABSENT for a in direct.values()):
        return ChannelProbe(UNAVAILABLE, [], "direct check")
    return ChannelProbe(UNKNOWN, [], "direct check")


class EnableChannelStep:
    step_id = "20_enable_channel"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})
        channel = cfg.channel_source
        if not channel:
            raise ChannelError("No package channel configured (channel.source)")

        logger.info("Adding %s...", channel)
        try:
            add_apt_repository(host, channel)
        except CommandError as e:
            raise ChannelError(
                f"Failed to add {channel}.",
                hints=["Check repository access and that software-properties-common is installed"],
            ) from e

        logger.info("Updating package list after adding %s...", channel)
        try:
            apt_update(host)
        except CommandError as e:
            raise ChannelError(
                "Failed to update package list.",
                hints=["Check your internet connection and repository access."],
            ) from e

        names = [f"python{v}" for v in cfg.candidate_versions]
        logger.info("Verifying %s publishes %s...", channel, ", ".join(names))
        probe = probe_channel(host, cfg.channel_probe_pattern, names)
        decisions(state)["channel"] = {
            "source": channel,
            "status": probe.status,
            "candidates": probe.candidates,
            "method": probe.method,
        }

        if probe.status == AVAILABLE:
            logger.info("Found %s via %s", ", ".join(probe.candidates), probe.method)
            return StepResult.success()

        if probe.status == UNKNOWN:
            return StepResult.warning(
                f"could not confirm that {channel} publishes {', '.join(names)}; "
                "version resolution will decide"
            )

        codename = release_codename(host) or "unknown release"
        raise ChannelError(
            f"No {' / '.join(names)} packages found after adding {channel}.",
            hints=[
                f"The channel may not support your Ubuntu version ({codename}).",
                "Recommended solutions:",
                "  1. Upgrade to Ubuntu 22.04 or later (recommended)",
                "  2. Use pyenv to build Python from source: runtime-installer --variant pyenv",
                "  3. Use Docker/containers with newer Python",
                "  4. Build from source: https://www.python.org/downloads/",
            ],
        )
