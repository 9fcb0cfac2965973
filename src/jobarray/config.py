"""
jobarray | config.py

Runtime configuration: built-in defaults, an optional YAML file, then
JOBARRAY_* environment variables (later wins).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from jobarray.errors import ConfigError

Pathish = Union[str, Path]

# ---------------------------------------------------------------------------
# SLURM PRESETS
# ---------------------------------------------------------------------------
PRESETS: Dict[str, Dict[str, Any]] = {
    "test":   {"time": "00:10:00", "cpus-per-task": 4,  "mem-per-cpu": "2G"},
    "short":  {"time": "02:00:00", "cpus-per-task": 8,  "mem-per-cpu": "2G"},
    "medium": {"time": "24:00:00", "cpus-per-task": 8,  "mem-per-cpu": "4G"},
    "long":   {"time": "72:00:00", "cpus-per-task": 16, "mem-per-cpu": "4G"},
}

ENV_OVERRIDES = {
    "JOBARRAY_SBATCH": "sbatch",
    "JOBARRAY_SHELL": "shell",
    "JOBARRAY_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class SynthConfig:
    sbatch: str = "sbatch"
    shell: str = "/bin/bash"
    directive_prefix: str = "#SBATCH"
    task_id_var: str = "SLURM_ARRAY_TASK_ID"
    log_level: str = "WARNING"
    presets: Dict[str, Dict[str, Any]] = field(
        default_factory=lambda: {k: dict(v) for k, v in PRESETS.items()}
    )


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML ({exc})") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def _apply(cfg: SynthConfig, data: Mapping[str, Any], origin: str) -> SynthConfig:
    known = {f.name for f in fields(SynthConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{origin}: unknown key(s) {', '.join(unknown)}")

    updates: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "presets":
            if not isinstance(value, dict) or not all(isinstance(v, dict) for v in value.values()):
                raise ConfigError(f"{origin}: presets must map names to option mappings")
            merged = dict(cfg.presets)
            merged.update({str(k): dict(v) for k, v in value.items()})
            updates[key] = merged
        else:
            updates[key] = str(value)
    return replace(cfg, **updates)


def load_config(
    path: Optional[Pathish] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SynthConfig:
    """
    Build the effective configuration.

    The YAML file is `path` if given, else $JOBARRAY_CONFIG if set.
    An explicitly named file that does not exist is an error.
    """
    env = os.environ if environ is None else environ
    cfg = SynthConfig()

    cfg_path = path or env.get("JOBARRAY_CONFIG")
    if cfg_path:
        p = Path(cfg_path).expanduser()
        cfg = _apply(cfg, _read_yaml(p), str(p))

    overrides = {attr: env[var] for var, attr in ENV_OVERRIDES.items() if env.get(var)}
    if overrides:
        cfg = _apply(cfg, overrides, "environment")

    return cfg


def preset_options(cfg: SynthConfig, name: Optional[str]) -> List[str]:
    """Expand a named preset to `--key=value` scheduler words."""
    if not name:
        return []
    if name not in cfg.presets:
        raise ConfigError(f"unknown preset '{name}' (choose from {', '.join(sorted(cfg.presets))})")
    return [f"--{key}={value}" for key, value in cfg.presets[name].items()]
