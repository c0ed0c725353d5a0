from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


def shell_path_ref(directory: Path, home: Path) -> str:
    """Render ``directory`` as ``$HOME/...`` when it lives under ``home``."""
    try:
        rel = directory.relative_to(home)
    except ValueError:
        return str(directory)
    return "$HOME" if str(rel) == "." else f"$HOME/{rel.as_posix()}"


def path_export_line(directory: Path, home: Path) -> str:
    return f'export PATH="{shell_path_ref(directory, home)}:$PATH"'


def read_profile(profile: Path) -> str:
    if not profile.exists():
        return ""
    return profile.read_text(encoding="utf-8")


def profile_has_line(profile: Path, line: str) -> bool:
    wanted = line.strip()
    return any(existing.strip() == wanted for existing in read_profile(profile).splitlines())


def profile_mentions(profile: Path, needle: str) -> bool:
    return needle in read_profile(profile)


def append_block(profile: Path, comment: str, lines: Sequence[str], *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would append %d line(s) to %s", len(lines), profile)
        return

    existing = read_profile(profile)
    profile.parent.mkdir(parents=True, exist_ok=True)
    with profile.open("a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write("\n")
        f.write(f"# {comment}\n")
        for line in lines:
            f.write(f"{line}\n")
    logger.info("Appended %d line(s) to %s", len(lines), profile)
