"""
Shared test fixtures: a scripted command runner and a host handle rooted in tmp_path.
"""

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

import pytest

from runtime_installer.config import load_config
from runtime_installer.host import Host
from runtime_installer.lib.command import CmdResult, CommandError
from runtime_installer.state_store import ensure_defaults

Responder = Callable[[List[str]], Tuple[int, str, str]]


def _strip_sudo(argv: List[str]) -> List[str]:
    return argv[1:] if argv and argv[0] == "sudo" else argv


class FakeRunner:
    """Stands in for run_cmd. Later rules win; unmatched commands succeed silently."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self._rules: List[Tuple[Callable[[List[str]], bool], Responder]] = []

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False):
        argv = list(argv)
        self.calls.append(argv)
        rc, out, err = 0, "", ""
        if not dry_run:
            cmd = _strip_sudo(argv)
            for matcher, responder in reversed(self._rules):
                if matcher(cmd):
                    rc, out, err = responder(cmd)
                    break
        result = CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)
        if check and rc != 0:
            raise CommandError(result)
        return result

    def on(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.when(lambda cmd: cmd[: len(prefix)] == list(prefix), lambda cmd: (returncode, stdout, stderr))

    def when(self, matcher: Callable[[List[str]], bool], responder: Responder) -> None:
        self._rules.append((matcher, responder))

    def package_index(self, present: Iterable[str]) -> None:
        """Answer ``apt-cache show`` from a fixed set of package names."""
        known = set(present)

        def respond(cmd: List[str]) -> Tuple[int, str, str]:
            pkg = cmd[2]
            if pkg in known:
                return 0, f"Package: {pkg}\nVersion: 1.0\n", ""
            return 100, "", f"N: Unable to locate package {pkg}\nE: No packages found\n"

        self.when(lambda cmd: cmd[:2] == ["apt-cache", "show"], respond)

    @property
    def commands(self) -> List[List[str]]:
        return [_strip_sudo(c) for c in self.calls]

    def ran(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.commands if c[: len(prefix)] == list(prefix)]

    def installs(self) -> List[List[str]]:
        return [c for c in self.ran("apt-get", "install") if "-f" not in c]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home" / "tester"
    h.mkdir(parents=True)
    return h


@pytest.fixture
def sys_bin(tmp_path: Path) -> Path:
    d = tmp_path / "usr-bin"
    d.mkdir()
    return d


@pytest.fixture
def host(home: Path, sys_bin: Path, fake_runner: FakeRunner) -> Host:
    return Host(
        env={"HOME": str(home), "PATH": str(sys_bin), "USER": "tester"},
        euid=1000,
        runner=fake_runner,
    )


@pytest.fixture
def make_state() -> Callable[..., dict]:
    def _make(variant: str = "ppa", **decisions) -> dict:
        state = ensure_defaults({})
        state["config"] = load_config(variant)
        state["execution"]["decisions"].update(decisions)
        return state

    return _make


def make_executable(directory: Path, name: str, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    p = directory / name
    p.write_text(body, encoding="utf-8")
    p.chmod(0o755)
    return p


def search_rows(*names: str, description: Optional[str] = None) -> str:
    return "".join(f"{n} - {description or 'Interactive high-level object-oriented language'}\n" for n in names)
