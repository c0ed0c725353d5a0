from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import InstallerConfig, VerifyProbe
from ..host import Host
from ..lib import pyenv
from ..pipeline import StepResult
from ..state_store import decisions

logger = logging.getLogger(__name__)


def run_probe(host: Host, probe: VerifyProbe) -> Dict[str, Any]:
    path = host.which(probe.command)
    if path is None:
        return {"name": probe.name, "command": probe.command, "found": False}

    r = host.run([path, *probe.args], check=False)
    # Some tools print their version on stderr.
    output = (r.stdout.strip() or r.stderr.strip()).splitlines()
    return {
        "name": probe.name,
        "command": probe.command,
        "found": True,
        "path": path,
        "returncode": r.returncode,
        "version": output[0] if output else "",
    }


class VerifyStep:
    """Report what the shell will now resolve. Diagnostic only, never fatal."""

    step_id = "90_verify"

    def run(self, host: Host, state: Dict[str, Any]) -> StepResult:
        cfg = InstallerConfig(state.get("config") or {})

        host.prepend_path(host.expand(cfg.local_bin))
        if cfg.variant == "pyenv":
            pyenv.activate(host, pyenv.pyenv_root(host, cfg.pyenv_root))

        logger.info("Verifying installation...")
        results: List[Dict[str, Any]] = []
        problems: List[str] = []
        for probe in cfg.verify_probes:
            res = run_probe(host, probe)
            results.append(res)
            if res["found"] and res["returncode"] == 0:
                logger.info("%s installed: %s", probe.name, res["version"])
                logger.info("   Command: %s", res["path"])
                continue

            problems.append(probe.name)
            if res["found"]:
                reason = f"{' '.join([probe.command, *probe.args])} exited {res['returncode']}"
            else:
                reason = f"{probe.command} command not found"
            if probe.required:
                logger.error("%s: %s", probe.name, reason)
            else:
                logger.warning("%s: %s (this might be normal)", probe.name, reason)

        state.setdefault("execution", {})["verification"] = results

        version = str(decisions(state).get("python_version") or "")
        notes = cfg.notes(version, home=str(host.home))
        if notes:
            logger.info("Next steps:")
            for note in notes:
                logger.info("  %s", note)

        if problems:
            return StepResult.warning(f"not verified: {', '.join(problems)}")
        return StepResult.success()
