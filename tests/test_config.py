"""
Tests for configuration parsing and logging helpers.
"""

import logging

import pytest

from multiscale.core.config import MultiScaleConfig
from multiscale.core.exceptions import ConfigurationError
from multiscale.utils.logging import LOG_FILE_NAME, get_logger, set_console_level, setup_file_logging


def test_defaults():
    config = MultiScaleConfig.from_options(None)
    assert config.name is None
    assert config.summary_correlation_matrix is False
    assert config.summary_pca is False
    assert config.summary_principal_axis is False
    assert config.pca_options == {}
    assert config.principal_axis_options == {}
    assert config.duplicate_policy == "overwrite"


def test_unknown_keys_are_dropped():
    config = MultiScaleConfig.from_options({"name": "X", "colour": "blue", 3: "three"})
    assert config.name == "X"
    assert not hasattr(config, "colour")


def test_option_dicts_are_copied():
    pca = {"n_components": 2}
    config = MultiScaleConfig.from_options({"pca_options": pca})
    pca["n_components"] = 5
    assert config.pca_options == {"n_components": 2}


def test_bad_duplicate_policy():
    with pytest.raises(ConfigurationError, match="duplicate_policy"):
        MultiScaleConfig.from_options({"duplicate_policy": "ignore"})


def test_get_logger_is_idempotent():
    first = get_logger("multiscale.test")
    second = get_logger("multiscale.test")
    assert first is second
    assert first.propagate is False
    consoles = [
        h for h in first.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    assert len(consoles) == 1


def test_file_logging_reaches_known_loggers(tmp_path):
    logger = get_logger("multiscale.test.file")
    log_file = setup_file_logging(tmp_path)
    logger.debug("written to file")
    for handler in logger.handlers:
        handler.flush()

    assert log_file == tmp_path / LOG_FILE_NAME
    assert "written to file" in log_file.read_text(encoding="utf-8")


def _console_levels(logger):
    return [
        h.level for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


def test_loggers_live_under_package_namespace():
    assert get_logger("test.short").name == "multiscale.test.short"
    assert get_logger("multiscale.test.short") is get_logger("test.short")
    assert get_logger("multiscale").name == "multiscale"


def test_console_level_per_logger():
    logger = get_logger("multiscale.test.quiet", console_level="warning")
    assert _console_levels(logger) == [logging.WARNING]
    # a later plain lookup keeps the chosen level
    assert _console_levels(get_logger("multiscale.test.quiet")) == [logging.WARNING]


def test_set_console_level_reaches_existing_and_new_loggers():
    before = get_logger("multiscale.test.before")
    try:
        assert set_console_level("DEBUG") == logging.DEBUG
        assert _console_levels(before) == [logging.DEBUG]
        assert _console_levels(get_logger("multiscale.test.after")) == [logging.DEBUG]
    finally:
        set_console_level(logging.INFO)
    assert _console_levels(before) == [logging.INFO]


def test_unknown_level_name_rejected():
    with pytest.raises(ValueError, match="Unknown logging level"):
        set_console_level("chatty")
