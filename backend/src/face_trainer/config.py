"""
Configuration for the face trainer runtime.

All user-writable state lives under ~/.face-trainer/ (overridable via
$FACE_TRAINER_DATA_HOME). The config file is JSON and is merged over the
built-in defaults, so it only needs the values that differ.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def get_data_home() -> Path:
    """Return the base directory for all face trainer data.

    Default: ~/.face-trainer/
    Override: $FACE_TRAINER_DATA_HOME
    """
    env = os.environ.get("FACE_TRAINER_DATA_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".face-trainer"


def get_config_path() -> Path:
    """Return the path to config.json (may not exist yet)."""
    return get_data_home() / "config.json"


def ensure_data_home() -> Path:
    """Create the data home directory if it doesn't exist.

    Returns the data home path.
    """
    data_home = get_data_home()
    data_home.mkdir(parents=True, exist_ok=True)
    return data_home


def get_default_config() -> Dict[str, Any]:
    """Return default configuration."""
    return {
        "database": {
            "url": f"sqlite:///{get_data_home() / 'face_trainer.db'}",
        },
        "cache": {
            "lock_timeout": None,
        },
        "classifier": {
            "c": 1.0,
            "max_iter": 1000,
        },
        "logging": {
            "level": "INFO",
        },
    }


def _process_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a loaded config over the defaults and expand paths."""
    merged = get_default_config()

    for section, values in config.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values

    url = merged["database"].get("url")
    if url and isinstance(url, str) and url.startswith("sqlite:///"):
        path = url[len("sqlite:///"):]
        merged["database"]["url"] = "sqlite:///" + os.path.expanduser(os.path.expandvars(path))

    return merged


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration.

    Args:
        path: Config file to read (default: get_config_path())

    Returns:
        Configuration dictionary; defaults if the file does not exist

    Raises:
        ValueError: If the file exists but is not valid JSON
    """
    path = Path(path) if path is not None else get_config_path()

    if not path.is_file():
        logger.debug(f"No config file at {path}, using defaults")
        return get_default_config()

    with path.open("r", encoding="utf-8") as handle:
        try:
            config = json.load(handle)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e

    logger.debug(f"Loaded config from: {path}")
    return _process_config(config)


def write_default_config(path: Optional[Path] = None) -> Path:
    """Write the default configuration if no config file exists yet.

    Returns:
        The config file path
    """
    path = Path(path) if path is not None else get_config_path()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(copy.deepcopy(get_default_config()), indent=2), encoding="utf-8")
    return path
