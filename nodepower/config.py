"""
Settings for platform power estimation.

Settings are plain dictionaries: built-in defaults, overlaid by an optional
YAML file, overlaid by ``NODEPOWER_*`` environment variables.
"""

import copy
import os
from typing import Any, Dict, Optional

from nodepower.common.io import read_yaml

ENV_PREFIX = "NODEPOWER_"

# Model settings keys
NODE_PLATFORM_POWER_KEY = "node_platform_power"

# Energy usage buckets on the node metrics
ABS_ENERGY_IN_PLATFORM = "abs_energy_in_platform"
IDLE_ENERGY_IN_PLATFORM = "idle_energy_in_platform"

DEFAULT_MODEL_SERVER_URL = "https://raw.githubusercontent.com/sustainable-computing-io/kepler-model-db/main/models"
DEFAULT_MODEL_VERSION = "v0.7"
DEFAULT_MODEL_FEATURE_GROUP = "BPFOnly"

DEFAULTS: Dict[str, Any] = {
    "sample_period_sec": 3,
    "model_server": {
        "url": DEFAULT_MODEL_SERVER_URL,
        "version": DEFAULT_MODEL_VERSION,
        "feature_group": DEFAULT_MODEL_FEATURE_GROUP,
    },
    "models": {
        NODE_PLATFORM_POWER_KEY: {
            "model_type": "linear_regression",
            "output_type": "AbsPower",
            "model_name": "LinearRegressionTrainer",
            "init_url": "",
        },
    },
    "logging": {
        "level": "INFO",
        "dir": None,
    },
}


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge_config(out[key], value)
        else:
            out[key] = value
    return out


def _apply_env(cfg: Dict[str, Any], environ) -> Dict[str, Any]:
    period = environ.get(ENV_PREFIX + "SAMPLE_PERIOD_SEC")
    if period:
        cfg["sample_period_sec"] = int(period)
    server = environ.get(ENV_PREFIX + "MODEL_SERVER_URL")
    if server:
        cfg["model_server"]["url"] = server
    for key, model_cfg in cfg["models"].items():
        for field in ("model_type", "output_type", "model_name", "init_url"):
            value = environ.get(f"{ENV_PREFIX}{key.upper()}_{field.upper()}")
            if value is not None:
                model_cfg[field] = value
    return cfg


def load_config(config_path: Optional[str] = None, environ=None) -> Dict[str, Any]:
    """
    Load settings.

    Args:
        config_path: Optional YAML file; missing keys fall back to defaults
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Settings dictionary
    """
    cfg = copy.deepcopy(DEFAULTS)
    if config_path:
        cfg = merge_config(cfg, read_yaml(config_path) or {})
    cfg = _apply_env(cfg, os.environ if environ is None else environ)
    if int(cfg["sample_period_sec"]) <= 0:
        raise ValueError(f"sample_period_sec must be positive, got {cfg['sample_period_sec']}")
    return cfg


def get_default_power_model_url(output_type: str, energy_source: str,
                                cfg: Optional[Dict[str, Any]] = None,
                                model_name: Optional[str] = None) -> str:
    """Default artifact location for an (output type, energy source) pair."""
    cfg = cfg or DEFAULTS
    server = cfg["model_server"]
    if model_name is None:
        model_name = DEFAULTS["models"][NODE_PLATFORM_POWER_KEY]["model_name"]
    base = server["url"].rstrip("/")
    return f"{base}/{server['version']}/{server['feature_group']}/{energy_source}/{output_type}/{model_name}.json"
