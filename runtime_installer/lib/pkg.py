from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..host import Host
from .command import CmdResult

logger = logging.getLogger(__name__)

_ABSENT_MARKERS = (
    "Unable to locate package",
    "No packages found",
    "purely virtual",
)

# "python3.12 - Interactive high-level object-oriented language (version 3.12)"
_SEARCH_ROW = re.compile(r"^(?P<name>[a-z0-9][a-z0-9+.\-]*)\s+-\s")


class Availability(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SearchResult:
    """Parsed ``apt-cache search`` output.

    ``ok`` is False when the command itself failed; ``unparsed`` counts
    non-empty lines that did not look like ``name - description``.
    """

    ok: bool
    names: List[str]
    unparsed: int = 0


@dataclass(frozen=True)
class DpkgEntry:
    status: str
    name: str
    version: str


def apt_update(host: Host) -> None:
    host.run(["apt-get", "update"], sudo=True)


def apt_install(host: Host, packages: Sequence[str], *, reinstall: bool = False) -> None:
    if not packages:
        return
    argv = ["apt-get", "install", "-y"]
    if reinstall:
        argv.append("--reinstall")
    host.run([*argv, *packages], sudo=True)


def apt_fix_broken(host: Host, *, check: bool = True) -> CmdResult:
    return host.run(["apt-get", "install", "-f", "-y"], sudo=True, check=check)


def dpkg_configure_pending(host: Host, *, check: bool = True) -> CmdResult:
    return host.run(["dpkg", "--configure", "-a"], sudo=True, check=check)


def apt_remove(host: Host, packages: Sequence[str], *, purge: bool = False, check: bool = True) -> CmdResult:
    verb = "purge" if purge else "remove"
    return host.run(["apt-get", verb, "-y", *packages], sudo=True, check=check)


def apt_autoremove(host: Host, *, check: bool = True) -> CmdResult:
    return host.run(["apt-get", "autoremove", "-y"], sudo=True, check=check)


def apt_autoclean(host: Host, *, check: bool = True) -> CmdResult:
    return host.run(["apt-get", "autoclean"], sudo=True, check=check)


def add_apt_repository(host: Host, channel: str) -> None:
    host.run(["add-apt-repository", "-y", channel], sudo=True)


def classify_show(result: CmdResult) -> Availability:
    """Map an ``apt-cache show`` result onto present/absent/unknown."""

    text = f"{result.stdout}\n{result.stderr}"
    if result.ok and re.search(r"^Package:\s", result.stdout, re.MULTILINE):
        return Availability.PRESENT
    if any(marker in text for marker in _ABSENT_MARKERS):
        return Availability.ABSENT
    return Availability.UNKNOWN


def package_availability(host: Host, package: str) -> Availability:
    """Ask the package index whether it can install ``package``."""
    if host.dry_run:
        # Be permissive in dry-run so planning doesn't fail.
        return Availability.PRESENT
    return classify_show(host.run(["apt-cache", "show", package], check=False))


def apt_has_package(host: Host, package: str) -> bool:
    """Return True if apt knows about a package name.

    This is useful for optional packages that may only exist in some repos.
    """
    return package_availability(host, package) is Availability.PRESENT


def parse_search_output(stdout: str) -> tuple[List[str], int]:
    names: List[str] = []
    unparsed = 0
    for line in stdout.splitlines():
        if not line.strip():
            continue
        m = _SEARCH_ROW.match(line)
        if m:
            names.append(m.group("name"))
        else:
            unparsed += 1
    return names, unparsed


def apt_search(host: Host, terms: Sequence[str], *, names_only: bool = False) -> SearchResult:
    argv = ["apt-cache", "search"]
    if names_only:
        argv.append("--names-only")
    r = host.run([*argv, *terms], check=False)
    if not r.ok:
        return SearchResult(ok=False, names=[])
    names, unparsed = parse_search_output(r.stdout)
    return SearchResult(ok=True, names=names, unparsed=unparsed)


def parse_dpkg_list(stdout: str) -> List[DpkgEntry]:
    entries: List[DpkgEntry] = []
    in_table = False
    for line in stdout.splitlines():
        if line.startswith("+++-"):
            in_table = True
            continue
        if not in_table:
            continue
        cols = line.split()
        if len(cols) < 3:
            continue
        # "ii  libpython3.11-stdlib:amd64 3.11.0~rc1-1~22.04 amd64 ..."
        name = cols[1].split(":", 1)[0]
        entries.append(DpkgEntry(status=cols[0], name=name, version=cols[2]))
    return entries


def dpkg_installed_packages(host: Host) -> List[DpkgEntry]:
    r = host.run(["dpkg", "-l"], check=False)
    if not r.ok:
        logger.warning("dpkg -l failed (%s); assuming no installed packages", r.returncode)
        return []
    return parse_dpkg_list(r.stdout)


def release_codename(host: Host) -> Optional[str]:
    r = host.run(["lsb_release", "-cs"], check=False)
    codename = r.stdout.strip()
    return codename if r.ok and codename else None
