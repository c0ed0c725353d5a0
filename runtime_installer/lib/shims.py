from __future__ import annotations

import logging
import os
from pathlib import Path

from ..errors import ShimError

logger = logging.getLogger(__name__)

WRAPPER_TEMPLATE = """#!/bin/bash
eval "$(pyenv init -)"
exec {command} "$@"
"""


def _clear(entry: Path) -> None:
    # lexists: a dangling symlink still has to go.
    if os.path.lexists(entry):
        if entry.is_dir() and not entry.is_symlink():
            raise ShimError(
                f"Refusing to replace directory with a shim: {entry}",
                hints=[f"Move or remove {entry} and rerun."],
            )
        entry.unlink()


def install_symlink_shim(local_bin: Path, name: str, target: str | Path, *, dry_run: bool = False) -> Path:
    entry = local_bin / name
    if dry_run:
        logger.info("Would link %s -> %s", entry, target)
        return entry
    _clear(entry)
    entry.symlink_to(target)
    logger.info("Linked %s -> %s", entry, target)
    return entry


def install_wrapper_shim(local_bin: Path, name: str, command: str | None = None, *, dry_run: bool = False) -> Path:
    entry = local_bin / name
    body = WRAPPER_TEMPLATE.format(command=command or name)
    if dry_run:
        logger.info("Would write wrapper %s", entry)
        return entry
    _clear(entry)
    entry.write_text(body, encoding="utf-8")
    entry.chmod(0o755)
    logger.info("Wrote wrapper %s (exec %s)", entry, command or name)
    return entry
