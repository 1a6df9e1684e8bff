"""
Configuration loader.

Settings come from ``config.json`` in the config directory, with
environment variables as overrides:

    CONTRACTSKIT_CONFIG_DIR       directory holding config.json (default ./config)
    CONTRACTSKIT_LOG_LEVEL        overrides logging.level
    CONTRACTSKIT_DEFAULT_AUTHOR   overrides contracts.default_author

Usage:
    from contractskit.config import get_config
    config = get_config()
"""
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "contracts": {
        "default_author": "Unknown",
        "default_version": "1.0.0",
        "id_prefix": None,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_bytes": 10485760,
        "backup_count": 5,
    },
}

# module cache
_config_cache: Optional[Dict[str, Any]] = None


def get_config_dir() -> Path:
    """Config directory: $CONTRACTSKIT_CONFIG_DIR or ./config."""
    if os.getenv("CONTRACTSKIT_CONFIG_DIR"):
        return Path(os.getenv("CONTRACTSKIT_CONFIG_DIR"))
    return Path.cwd() / "config"


def get_config_path() -> Optional[Path]:
    config_path = get_config_dir() / "config.json"
    if config_path.exists():
        return config_path
    return None


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read config.json (if any) on top of the defaults, then apply env overrides.

    Raises:
        ConfigError: config.json exists but is not a readable JSON object.
    """
    path = path or get_config_path()
    file_config: Dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, "r") as f:
                file_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path} is not valid JSON: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"{path} must contain a JSON object")

    config = _merge(DEFAULT_CONFIG, file_config)

    if os.getenv("CONTRACTSKIT_LOG_LEVEL"):
        config["logging"]["level"] = os.getenv("CONTRACTSKIT_LOG_LEVEL").upper()
    if os.getenv("CONTRACTSKIT_DEFAULT_AUTHOR"):
        config["contracts"]["default_author"] = os.getenv("CONTRACTSKIT_DEFAULT_AUTHOR")
    return config


def get_config() -> Dict[str, Any]:
    """Loaded once, then served from cache."""
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def get_contract_config() -> Dict[str, Any]:
    return get_config()["contracts"]


def reload_config() -> Dict[str, Any]:
    """Drop the cache and load again."""
    global _config_cache
    _config_cache = None
    return get_config()
