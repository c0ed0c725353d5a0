from __future__ import annotations

import logging
from pathlib import Path

from ..errors import DownloadError
from ..host import Host

logger = logging.getLogger(__name__)


def download(host: Host, url: str, dest: str | Path) -> Path:
    """Fetch ``url`` to ``dest`` with curl. No retry, no timeout."""

    dest_path = Path(dest)
    r = host.run(["curl", "-fsSL", url, "-o", str(dest_path)], check=False)
    if not r.ok:
        raise DownloadError(
            f"Download failed ({r.returncode}): {url}",
            hints=[
                "Check your internet connection and proxy settings",
                f"Try manually: curl -fsSL {url} -o {dest_path.name}",
            ],
        )
    logger.info("Downloaded %s -> %s", url, dest_path)
    return dest_path
