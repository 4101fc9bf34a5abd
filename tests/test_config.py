"""Configuration validation and logging setup."""
import logging

import pytest

from multiseries import config


def test_defaults_are_valid():
    config.validate_config()
    assert 0 < config.DEFAULT_TOLERANCE < 1
    assert config.RADIUS_WINDOW <= config.MAX_TERMS


def test_invalid_values_are_collected(monkeypatch):
    monkeypatch.setattr(config, "MAX_TERMS", 0)
    monkeypatch.setattr(config, "SHIFT_MAX_WORKERS", 0)

    with pytest.raises(ValueError) as excinfo:
        config.validate_config()

    message = str(excinfo.value)
    assert "MAX_TERMS" in message
    assert "SHIFT_MAX_WORKERS" in message


def test_unknown_log_format_rejected(monkeypatch):
    monkeypatch.setattr(config, "LOG_FORMAT", "xml")
    with pytest.raises(ValueError):
        config.validate_config()


def test_setup_logging_sets_package_level(monkeypatch):
    monkeypatch.setattr(config, "LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(config, "LOG_FORMAT", "simple")
    package_logger = logging.getLogger("multiseries")
    previous = package_logger.level

    try:
        config.setup_logging()
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.setLevel(previous)
