from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default

_LEVEL_COLORS = {
    logging.DEBUG: "\033[0;36m",
    logging.INFO: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}
_RESET = "\033[0m"


class ConsoleFormatter(logging.Formatter):
    """``[INFO] message`` lines, level tag coloured when ``color`` is set."""

    def __init__(self, *, color: bool):
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.color:
            tag = f"{_LEVEL_COLORS.get(record.levelno, '')}{tag}{_RESET}"
        return f"{tag} {super().format(record)}"


def _use_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return bool(getattr(stream, "isatty", lambda: False)())


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Notes:
    - The log file sits under the user's home by default, so no sudo is needed.
      If it cannot be opened we fall back to a local file in the working
      directory and keep reporting the requested path in state/logs.
    - The console shows short ``[LEVEL] message`` lines; the file gets
      timestamps and logger names.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_runtime_installer_configured", False):
        return getattr(logger, "_runtime_installer_log_path", log_path)

    requested = os.path.expanduser(log_path)
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested)
        chosen_path = requested
    except OSError:
        # Fall back to a writable location.
        chosen_path = str(Path.cwd() / "runtime-installer.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ConsoleFormatter(color=_use_color(sys.stderr)))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_runtime_installer_configured", True)
    setattr(logger, "_runtime_installer_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
