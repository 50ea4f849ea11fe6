from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


def load_yaml(path: str) -> Dict[str, Any]:
    if not Path(path).is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a dict at root of YAML: {path}")
    return data


def get_section(cfg: Mapping[str, Any], key: str) -> Dict[str, Any]:
    section = cfg.get(key)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section '{key}' must be a dict, got {type(section).__name__}")
    return dict(section)


def merge_overrides(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for k, v in overrides.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = merge_overrides(out[k], v)
        else:
            out[k] = v
    return out


def resolve_path(path: str, base_dir: Optional[str] = None) -> str:
    p = Path(path).expanduser()
    if p.is_absolute():
        return str(p)
    if base_dir is None:
        base_dir = os.getcwd()
    return str((Path(base_dir) / p).resolve())
