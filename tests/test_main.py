"""
End-to-end runs of the installer variants against a scripted host.
"""

import json

import pytest

from conftest import search_rows

from runtime_installer import main as main_mod
from runtime_installer.host import Host
from runtime_installer.main import build_steps, run

PY312 = {"python3.12", "python3.12-dev", "python3.12-venv"}


@pytest.fixture(autouse=True)
def no_global_logging(monkeypatch, tmp_path):
    monkeypatch.setattr(main_mod, "configure_logging", lambda **kw: str(tmp_path / "install.log"))


@pytest.fixture
def state_path(tmp_path):
    return str(tmp_path / "state.json")


def _happy_index(fake_runner):
    fake_runner.package_index(PY312 | {"libtk8.6-dev", "libgdm-dev", "libdb4o-cil-dev", "libpcap-dev"})
    fake_runner.on("apt-cache", "search", "--names-only", stdout=search_rows("python3.12"))


class TestBuildSteps:
    def test_ppa_order(self):
        assert [s.step_id for s in build_steps("ppa")] == [
            "00_preflight",
            "10_install_dependencies",
            "20_enable_channel",
            "30_resolve_conflicts",
            "40_resolve_version",
            "50_install_runtime",
            "60_bootstrap_pip",
            "70_install_shims",
            "80_update_profile",
            "90_verify",
        ]

    def test_step_ids_unique_per_variant(self):
        for variant in ("ppa", "pyenv", "docker"):
            ids = [s.step_id for s in build_steps(variant)]
            assert len(ids) == len(set(ids))

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            build_steps("conda")


class TestPpaRun:
    def test_full_run(self, host, home, fake_runner, state_path):
        _happy_index(fake_runner)
        result = run(host=host, state_path=state_path)
        assert result.ok
        assert result.exit_code == 0

        runtime_install = ["apt-get", "install", "-y", "python3.12", "python3.12-dev", "python3.12-venv"]
        assert runtime_install in fake_runner.installs()
        assert (home / ".local/bin/python").is_symlink()
        assert 'export PATH="$HOME/.local/bin:$PATH"' in (home / ".bashrc").read_text()

        saved = json.loads(open(state_path).read())
        assert saved["execution"]["decisions"]["python_version"] == "3.12"
        assert saved["execution"]["summary"]["ok"] is True
        assert saved["execution"]["completed_steps"][-1] == "90_verify"

    def test_rerun_is_idempotent(self, host, home, fake_runner, state_path):
        _happy_index(fake_runner)
        run(host=host, state_path=state_path)
        run(host=host, state_path=state_path)
        assert sorted(p.name for p in (home / ".local/bin").iterdir()) == ["pip", "python"]
        assert (home / ".bashrc").read_text().count("export PATH=") == 1

    def test_no_candidates_exits_1_without_runtime_install(self, host, fake_runner, state_path):
        fake_runner.package_index({"libtk8.6-dev"})
        result = run(host=host, state_path=state_path)
        assert result.exit_code == 1
        step_id, outcome = result.fatal
        assert step_id == "20_enable_channel"
        assert not any("python3.12" in c or "python3.13" in c for c in fake_runner.installs())
        saved = json.loads(open(state_path).read())
        assert saved["execution"]["errors"][0]["step"] == "20_enable_channel"

    def test_mandatory_dependency_failure_aborts(self, host, fake_runner, state_path):
        fake_runner.on("apt-get", "install", "-y", "software-properties-common", returncode=100)
        result = run(host=host, state_path=state_path)
        assert result.exit_code == 1
        assert result.fatal[0] == "10_install_dependencies"
        assert fake_runner.ran("apt-cache", "show") == []
        assert fake_runner.ran("add-apt-repository") == []

    def test_root_exits_1(self, home, fake_runner, state_path):
        root = Host(env={"HOME": str(home), "PATH": ""}, euid=0, runner=fake_runner)
        result = run(host=root, state_path=state_path)
        assert result.exit_code == 1
        assert fake_runner.calls == []

    def test_resume_continues_after_failure(self, host, fake_runner, state_path):
        fake_runner.package_index({"libtk8.6-dev"})
        assert run(host=host, state_path=state_path).exit_code == 1

        _happy_index(fake_runner)
        fake_runner.calls.clear()
        result = run(host=host, state_path=state_path, resume=True)
        assert result.ok
        assert result.skipped_steps == ["00_preflight", "10_install_dependencies"]
        assert fake_runner.commands[0] == ["add-apt-repository", "-y", "ppa:deadsnakes/ppa"]

    def test_start_at_reuses_earlier_decisions(self, host, fake_runner, state_path):
        _happy_index(fake_runner)
        fake_runner.on("curl", returncode=22, stderr="curl: (22) 503")
        first = run(host=host, state_path=state_path)
        assert first.fatal[0] == "60_bootstrap_pip"

        fake_runner.on("curl")
        fake_runner.calls.clear()
        second = run(host=host, state_path=state_path, start_at="60_bootstrap_pip")
        assert second.ok
        assert second.ran_steps == ["60_bootstrap_pip", "70_install_shims", "80_update_profile", "90_verify"]
        saved = json.loads(open(state_path).read())
        assert saved["execution"]["decisions"]["python_version"] == "3.12"
        assert saved["execution"]["errors"] == []

    def test_plain_rerun_forgets_decisions(self, host, fake_runner, state_path):
        _happy_index(fake_runner)
        fake_runner.on("curl", returncode=22)
        run(host=host, state_path=state_path)

        result = run(host=host, state_path=state_path, stop_after="00_preflight")
        assert result.ok
        assert result.state["execution"]["decisions"] == {"user": "tester"}

    def test_dry_run_mutates_nothing(self, home, fake_runner, sys_bin, state_path):
        dry = Host(env={"HOME": str(home), "PATH": str(sys_bin), "USER": "tester"}, euid=1000, dry_run=True, runner=fake_runner)
        result = run(host=dry, state_path=state_path)
        assert result.ok
        assert not (home / ".local/bin").exists()
        assert not (home / ".bashrc").exists()


class TestOtherVariants:
    def test_docker_run(self, host, fake_runner, state_path):
        fake_runner.package_index({"docker-buildx"})
        result = run(host=host, variant="docker", state_path=state_path)
        assert result.ok
        assert ["apt-get", "install", "-y", "docker.io", "docker-compose-v2"] in fake_runner.installs()
        assert fake_runner.ran("usermod", "-aG", "docker", "tester")

    def test_pyenv_run(self, host, home, fake_runner, state_path):
        pyenv = str(home / ".pyenv/bin/pyenv")
        fake_runner.on(pyenv, "install", "--list", stdout="  3.12.9\n  3.12.10\n")
        result = run(host=host, variant="pyenv", state_path=state_path)
        assert result.ok
        assert [pyenv, "install", "-s", "3.12.10"] in fake_runner.commands
        assert 'exec pip "$@"' in (home / ".local/bin/pip").read_text()
        assert "PYENV_ROOT" in (home / ".bashrc").read_text()


class TestCli:
    def test_main_returns_exit_code(self, monkeypatch, tmp_path):
        seen = {}

        class Result:
            exit_code = 1

        def fake_run(**kwargs):
            seen.update(kwargs)
            return Result()

        monkeypatch.setattr(main_mod, "run", fake_run)
        code = main_mod.main(["--variant", "pyenv", "--resume", "--state", str(tmp_path / "s.json")])
        assert code == 1
        assert seen["variant"] == "pyenv"
        assert seen["resume"] is True
        assert seen["dry_run"] is False

    def test_defaults_to_ppa(self, monkeypatch):
        seen = {}

        class Result:
            exit_code = 0

        monkeypatch.setattr(main_mod, "run", lambda **kw: seen.update(kw) or Result())
        assert main_mod.main([]) == 0
        assert seen["variant"] == "ppa"
        assert seen["config_path"] is None

    def test_rejects_unknown_start_step(self, monkeypatch, capsys):
        monkeypatch.setattr(main_mod, "run", lambda **kw: pytest.fail("run should not be called"))
        with pytest.raises(SystemExit) as exc:
            main_mod.main(["--start-at", "99_nope"])
        assert exc.value.code == 2
        err = capsys.readouterr().err
        assert "--start-at: unknown step '99_nope'" in err
        assert "Traceback" not in err

    def test_step_ids_are_checked_per_variant(self, monkeypatch):
        monkeypatch.setattr(main_mod, "run", lambda **kw: pytest.fail("run should not be called"))
        with pytest.raises(SystemExit):
            main_mod.main(["--variant", "docker", "--stop-after", "40_resolve_version"])

    def test_rejects_unknown_variant(self):
        with pytest.raises(SystemExit):
            main_mod.main(["--variant", "conda"])
