"""
YAML → typed config loader.

Loads progression constants from progression.yaml (bundled with the
package) and optionally merges user overrides from
``<data dir>/progression.yaml``.

Usage:
    from lift_scheduler.core.engine.config_loader import load_progression_config
    cfg = load_progression_config()
    cfg.weight_increment_kg  # 2.5 unless overridden

If the bundled YAML cannot be read, the Python defaults from config.py are
used.  If the user override file exists but has parse errors, a warning is
issued and the file is ignored.  Values that parse but are out of range
raise ValueError.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    DATA_DIR_ENV,
    DEFAULT_DATA_DIR_NAME,
    DELOAD_FACTOR,
    MISSES_BEFORE_DELOAD,
    WEIGHT_INCREMENT_KG,
    ProgressionConfig,
)

CONFIG_FILE_NAME = "progression.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path, *, warn: bool) -> dict[str, Any]:
    """Load a single YAML mapping; return {} (optionally warning) on error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        if warn:
            warnings.warn(f"lift-scheduler: ignoring {path}: {e}", stacklevel=3)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        if warn:
            warnings.warn(
                f"lift-scheduler: ignoring {path}: expected a mapping at top level",
                stacklevel=3,
            )
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled progression.yaml, or None if not found."""
    ref = importlib.resources.files("lift_scheduler").joinpath(CONFIG_FILE_NAME)
    if ref.is_file():
        with importlib.resources.as_file(ref) as p:
            return p
    candidate = Path(__file__).parent.parent.parent / CONFIG_FILE_NAME
    return candidate if candidate.exists() else None


def get_default_data_dir() -> Path:
    """
    Return the data directory.

    ``$LIFT_SCHEDULER_HOME`` when set, else ``~/.lift-scheduler``.
    """
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / DEFAULT_DATA_DIR_NAME


def get_user_yaml_path(data_dir: Path | None = None) -> Path | None:
    """Return <data dir>/progression.yaml if it exists, else None."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    p = data_dir / CONFIG_FILE_NAME
    return p if p.exists() else None


def load_model_config(data_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_scheduler/progression.yaml
    2. User override at <data dir>/progression.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled, warn=False))

    user = get_user_yaml_path(data_dir)
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user, warn=True))

    return config


def progression_config_from_dict(config: dict[str, Any]) -> ProgressionConfig:
    """
    Build ProgressionConfig from the ``progression`` section.

    Missing keys fall back to config.py defaults.

    Raises:
        ValueError: If a value is not numeric or out of range
    """
    section = config.get("progression") or {}
    if not isinstance(section, dict):
        raise ValueError("'progression' section must be a mapping")
    try:
        return ProgressionConfig(
            weight_increment_kg=float(section.get("weight_increment_kg", WEIGHT_INCREMENT_KG)),
            deload_factor=float(section.get("deload_factor", DELOAD_FACTOR)),
            misses_before_deload=int(section.get("misses_before_deload", MISSES_BEFORE_DELOAD)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid progression config: {e}") from e


def load_progression_config(data_dir: Path | None = None) -> ProgressionConfig:
    """Load ProgressionConfig from bundled and user YAML."""
    return progression_config_from_dict(load_model_config(data_dir))
