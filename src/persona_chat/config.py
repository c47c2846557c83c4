"""Configuration loading utilities for the persona chat server.

This module handles layered configuration:
1. Explicit path argument (highest precedence)
2. Environment variable PERSONA_CHAT_CONFIG
3. Fallback to "config.yaml"

Values from the file are merged over :data:`DEFAULTS`, then overridden by
environment variables with prefix ``PERSONA_CHAT__`` (e.g.,
PERSONA_CHAT__STORAGE__DATA_FILE=/tmp/data.json).
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = "PERSONA_CHAT_CONFIG"
ENV_PREFIX = "PERSONA_CHAT__"

DEFAULTS: Dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 3001,
        "api_prefix": "/api",
        "cors_origins": ["*"],
    },
    "storage": {
        "data_file": "data/data.json",
        "uploads_dir": "uploads",
    },
    "ui": {"dir": "docs"},
    "logging": {"level": "INFO"},
}


def _coerce(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides with prefix PERSONA_CHAT__."""
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        # e.g., PERSONA_CHAT__SERVER__PORT -> cfg["server"]["port"]
        parts = key[len(ENV_PREFIX):].lower().split("__")
        sub = cfg
        for p in parts[:-1]:
            if p not in sub or not isinstance(sub[p], dict):
                sub[p] = {}
            sub = sub[p]
        leaf = parts[-1]
        # Paths and prefixes stay strings even if they look numeric
        if isinstance(sub.get(leaf), str):
            sub[leaf] = value
        else:
            sub[leaf] = _coerce(value)
    return cfg


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load YAML configuration for the chat server.

    Parameters
    ----------
    path : str | None
        Optional path to a configuration file. If not provided, the
        environment variable ``PERSONA_CHAT_CONFIG`` is consulted. As a
        last resort ``config.yaml`` is used.

    Returns
    -------
    Dict[str, Any]
        Defaults merged with the file contents, environment overrides applied.
    """
    if path is None:
        path = os.environ.get(ENV_CONFIG_PATH, "config.yaml")

    path_obj = Path(path)
    if not path_obj.exists():
        logger.warning("Config file not found at %s. Using defaults.", path_obj)
        return _apply_env_overrides(copy.deepcopy(DEFAULTS))

    with path_obj.open("r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Failed to parse config file {path_obj}: {e}")

    if not isinstance(loaded, dict):
        raise RuntimeError(f"Invalid config format in {path_obj}, expected dict.")

    return _apply_env_overrides(_merge(DEFAULTS, loaded))
