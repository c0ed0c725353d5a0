from __future__ import annotations

from typing import Iterable, List, Optional


class InstallerError(RuntimeError):
    """Fatal installer failure. Aborts the run with exit code 1.

    ``hints`` are operator-facing follow-ups printed after the error line.
    """

    def __init__(self, message: str, *, hints: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.hints: List[str] = list(hints or [])


class PrivilegeError(InstallerError):
    pass


class DependencyError(InstallerError):
    pass


class ChannelError(InstallerError):
    pass


class VersionResolutionError(InstallerError):
    pass


class RuntimeInstallError(InstallerError):
    pass


class DownloadError(InstallerError):
    pass


class ShimError(InstallerError):
    pass
