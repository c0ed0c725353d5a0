from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    state_default: str = "~/.local/state/runtime-installer/state.json"
    log_default: str = "~/.local/state/runtime-installer/install.log"
    local_bin: str = "~/.local/bin"
    profile: str = "~/.bashrc"
    pyenv_root: str = "~/.pyenv"


PATHS = Paths()
