from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from ..host import Host

logger = logging.getLogger(__name__)

_STABLE = re.compile(r"^\d+\.\d+\.\d+$")


def pyenv_root(host: Host, configured: str = "~/.pyenv") -> Path:
    return host.expand(host.env.get("PYENV_ROOT") or configured)


def pyenv_bin(root: Path) -> str:
    return str(root / "bin" / "pyenv")


def activate(host: Host, root: Path) -> None:
    """Equivalent of ``export PYENV_ROOT``, PATH prepend and ``pyenv init -`` on the handle."""
    host.env["PYENV_ROOT"] = str(root)
    host.prepend_path(root / "bin")
    host.prepend_path(root / "shims")


def parse_install_list(stdout: str) -> List[str]:
    """Stable CPython versions from ``pyenv install --list`` (no rc/dev/alt builds)."""
    return [line.strip() for line in stdout.splitlines() if _STABLE.match(line.strip())]


def _key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


def latest_stable(versions: Iterable[str], minor: str) -> Optional[str]:
    prefix = minor.rstrip(".") + "."
    matching = [v for v in versions if v.startswith(prefix) and _STABLE.match(v)]
    if not matching:
        return None
    return max(matching, key=_key)


def list_installable(host: Host, root: Path) -> List[str]:
    r = host.run([pyenv_bin(root), "install", "--list"])
    return parse_install_list(r.stdout)


def update(host: Host, root: Path) -> bool:
    r = host.run([pyenv_bin(root), "update"], check=False)
    if not r.ok:
        logger.warning("pyenv update failed (%s); continuing with existing build definitions", r.returncode)
    return r.ok


def install(host: Host, root: Path, version: str) -> None:
    host.run([pyenv_bin(root), "install", "-s", version])


def set_global(host: Host, root: Path, version: str) -> None:
    host.run([pyenv_bin(root), "global", version])
