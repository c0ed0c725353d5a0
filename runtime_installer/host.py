"""Handle on the machine being mutated.

Every step receives a ``Host`` instead of reading ``os.environ`` or calling
``subprocess`` directly. PATH edits made during a run (pyenv activation,
``~/.local/bin``) live on the handle, so later steps and the verifier see
them without touching the interpreter's own environment.
"""

from __future__ import annotations

import logging
import os
import pwd
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .lib.command import CmdResult, Runner, run_cmd

logger = logging.getLogger(__name__)


@dataclass
class Host:
    env: Dict[str, str]
    euid: int
    dry_run: bool = False
    runner: Runner = field(default=run_cmd)

    @classmethod
    def from_environment(cls, *, dry_run: bool = False) -> "Host":
        return cls(env=dict(os.environ), euid=os.geteuid(), dry_run=dry_run)

    @property
    def home(self) -> Path:
        home = self.env.get("HOME")
        if not home:
            raise RuntimeError("HOME is not set")
        return Path(home)

    @property
    def user(self) -> str:
        name = self.env.get("USER") or self.env.get("LOGNAME")
        if name:
            return name
        try:
            return pwd.getpwuid(self.euid).pw_name
        except KeyError:
            return str(self.euid)

    def expand(self, path: str | Path) -> Path:
        """Expand a leading ``~`` against this host's HOME."""
        s = str(path)
        if s == "~":
            return self.home
        if s.startswith("~/"):
            return self.home / s[2:]
        return Path(s)

    def path_entries(self) -> List[str]:
        return [p for p in self.env.get("PATH", "").split(os.pathsep) if p]

    def has_path_entry(self, directory: str | Path) -> bool:
        target = os.path.normpath(str(directory))
        return any(os.path.normpath(p) == target for p in self.path_entries())

    def prepend_path(self, directory: str | Path) -> None:
        d = str(directory)
        entries = [p for p in self.path_entries() if os.path.normpath(p) != os.path.normpath(d)]
        self.env["PATH"] = os.pathsep.join([d, *entries])

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name, path=self.env.get("PATH", ""))

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        sudo: bool = False,
        cwd: str | None = None,
    ) -> CmdResult:
        argv_list = list(argv)
        if sudo and self.euid != 0:
            argv_list = ["sudo", *argv_list]
        return self.runner(argv_list, check=check, env=self.env, cwd=cwd, dry_run=self.dry_run)
