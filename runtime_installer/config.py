from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.env import PATHS
from .lib.manifests import deep_merge, load_variant_manifest, load_yaml

DEFAULT_VARIANT = "ppa"


@dataclass(frozen=True)
class VerifyProbe:
    name: str
    command: str
    args: List[str]
    required: bool


def _fmt_all(items: List[str], **values: str) -> List[str]:
    return [str(item).format(**values) for item in items]


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any]

    @property
    def variant(self) -> str:
        return str(self.raw.get("variant") or DEFAULT_VARIANT)

    @property
    def local_bin(self) -> str:
        return str(((self.raw.get("paths") or {}).get("local_bin")) or PATHS.local_bin)

    @property
    def profile(self) -> str:
        return str(((self.raw.get("paths") or {}).get("profile")) or PATHS.profile)

    @property
    def core_packages(self) -> List[str]:
        return [str(p) for p in ((self.raw.get("dependencies") or {}).get("core") or [])]

    @property
    def optional_packages(self) -> List[str]:
        return [str(p) for p in ((self.raw.get("dependencies") or {}).get("optional") or [])]

    @property
    def channel_source(self) -> Optional[str]:
        return (self.raw.get("channel") or {}).get("source")

    @property
    def channel_probe_pattern(self) -> str:
        return str(((self.raw.get("channel") or {}).get("probe_pattern")) or r"^python3\.(11|12|13)$")

    @property
    def candidate_versions(self) -> List[str]:
        return [str(v) for v in (self.raw.get("candidate_versions") or [])]

    def runtime_packages(self, version: str = "") -> List[str]:
        return _fmt_all(list(self.raw.get("runtime_packages") or []), version=version)

    @property
    def conflict_name_pattern(self) -> Optional[str]:
        return (self.raw.get("conflicts") or {}).get("name_pattern")

    @property
    def conflict_version_pattern(self) -> str:
        return str(((self.raw.get("conflicts") or {}).get("version_pattern")) or "rc")

    @property
    def conflict_packages(self) -> List[str]:
        return [str(p) for p in ((self.raw.get("conflicts") or {}).get("packages") or [])]

    @property
    def pip_bootstrap_url(self) -> str:
        return str(((self.raw.get("pip") or {}).get("bootstrap_url")) or "https://bootstrap.pypa.io/get-pip.py")

    def pip_companion_packages(self, version: str) -> List[str]:
        return _fmt_all(list((self.raw.get("pip") or {}).get("companion_packages") or []), version=version)

    @property
    def shim_mode(self) -> str:
        return str(((self.raw.get("shims") or {}).get("mode")) or "symlink")

    def shim_targets(self, *, version: str, local_bin: str, home: str = "") -> Dict[str, str]:
        targets = (self.raw.get("shims") or {}).get("targets") or {}
        return {
            str(name): str(t).format(version=version, local_bin=local_bin, home=home)
            for name, t in targets.items()
        }

    @property
    def verify_probes(self) -> List[VerifyProbe]:
        probes: List[VerifyProbe] = []
        for item in self.raw.get("verify") or []:
            probes.append(
                VerifyProbe(
                    name=str(item.get("name") or item["command"]),
                    command=str(item["command"]),
                    args=[str(a) for a in (item.get("args") or ["--version"])],
                    required=bool(item.get("required", True)),
                )
            )
        return probes

    def notes(self, version: str = "", home: str = "") -> List[str]:
        return _fmt_all(list(self.raw.get("notes") or []), version=version, home=home)

    @property
    def pyenv_root(self) -> str:
        return str(((self.raw.get("pyenv") or {}).get("root")) or PATHS.pyenv_root)

    @property
    def pyenv_installer_url(self) -> str:
        return str(((self.raw.get("pyenv") or {}).get("installer_url")) or "https://pyenv.run")

    @property
    def docker_groups(self) -> List[str]:
        return [str(g) for g in ((self.raw.get("docker") or {}).get("groups") or [])]


def load_config(variant: str = DEFAULT_VARIANT, path: str | None = None) -> Dict[str, Any]:
    """Variant manifest with an optional user YAML file merged on top."""

    raw = load_variant_manifest(variant)
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("installer config must be YAML")
        raw = deep_merge(raw, load_yaml(p))
    raw["variant"] = variant
    return raw
