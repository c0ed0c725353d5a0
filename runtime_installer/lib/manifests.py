from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List

import yaml


def _manifests_dir() -> Path:
    # runtime_installer/lib/manifests.py -> runtime_installer/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def available_variants() -> List[str]:
    return sorted(p.stem for p in _manifests_dir().glob("*.yaml"))


def load_variant_manifest(variant: str) -> Dict[str, Any]:
    p = _manifests_dir() / f"{variant}.yaml"
    if not p.exists():
        raise ValueError(f"Unknown variant {variant!r} (known: {', '.join(available_variants())})")
    return load_yaml(p)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Mappings merge recursively; lists and scalars in ``override`` replace."""
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out
