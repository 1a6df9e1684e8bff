"""Tests for the config loader and logging setup."""
import json
import logging
import logging.handlers

import pytest

from contractskit.config import DEFAULT_CONFIG, get_config, get_config_path, load_config, reload_config
from contractskit import config as config_module
from contractskit.errors import ConfigError
from contractskit.log import setup_logging
from contractskit.registry.documents import create_base_contract


def write_config(config_dir, data):
    path = config_dir / "config.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


def test_defaults_without_a_file():
    assert get_config_path() is None
    config = get_config()
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_file_is_deep_merged(isolated_config):
    write_config(isolated_config, {"contracts": {"default_author": "platform"}, "logging": {"level": "DEBUG"}})
    config = reload_config()
    assert config["contracts"]["default_author"] == "platform"
    assert config["contracts"]["default_version"] == "1.0.0"
    assert config["logging"]["level"] == "DEBUG"
    assert config["logging"]["backup_count"] == 5
    assert DEFAULT_CONFIG["contracts"]["default_author"] == "Unknown"


def test_config_is_cached(isolated_config):
    first = get_config()
    write_config(isolated_config, {"contracts": {"default_author": "later"}})
    assert get_config() is first
    assert reload_config()["contracts"]["default_author"] == "later"


def test_env_overrides(isolated_config, monkeypatch):
    write_config(isolated_config, {"contracts": {"default_author": "from-file"}})
    monkeypatch.setenv("CONTRACTSKIT_DEFAULT_AUTHOR", "from-env")
    monkeypatch.setenv("CONTRACTSKIT_LOG_LEVEL", "warning")
    config = reload_config()
    assert config["contracts"]["default_author"] == "from-env"
    assert config["logging"]["level"] == "WARNING"


def test_factories_use_configured_defaults(isolated_config, monkeypatch):
    write_config(isolated_config, {"contracts": {"default_version": "0.1.0"}})
    monkeypatch.setenv("CONTRACTSKIT_DEFAULT_AUTHOR", "team-x")
    reload_config()
    contract = create_base_contract("base-1", "Base")
    assert contract.metadata.author == "team-x"
    assert contract.version_string == "0.1.0"


def test_bad_json_raises(isolated_config):
    write_config(isolated_config, "{not json")
    with pytest.raises(ConfigError):
        reload_config()


def test_non_object_raises(isolated_config):
    path = write_config(isolated_config, [1, 2, 3])
    with pytest.raises(ConfigError):
        load_config(path)


def test_console_logging():
    logger = setup_logging(level="debug")
    assert logger.name == "contractskit"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    # calling again replaces rather than stacks handlers
    setup_logging()
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "contractskit.log"
    config = {"logging": dict(DEFAULT_CONFIG["logging"], file=str(log_file))}
    logger = setup_logging(config)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].backupCount == 5

    logging.getLogger("contractskit.registry").info("registry loaded")
    for handler in logger.handlers:
        handler.flush()
    assert "registry loaded" in log_file.read_text()
    file_handlers[0].close()


def test_each_test_starts_with_an_empty_cache():
    # a broken config.json from another test must never be read here
    assert config_module._config_cache is None
