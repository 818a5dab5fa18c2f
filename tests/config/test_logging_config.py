"""
Unit tests for the logging configuration module.

This module contains tests for the logging configuration module, ensuring that it
selects the right configuration for each logging type, reports broken
configuration files, and tags log records with the instance ID.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

import json
import logging
from unittest.mock import mock_open, patch

import pytest

from shrtlnk.config.logging_config import (
    _get_local_package_file_path,
    _InstanceIdFilter,
    _load_logging_config,
    configure_logging,
)
from shrtlnk.config.server_context import ServerContext


def _context(logging_type: str, logging_config_file: str = "") -> ServerContext:
    return ServerContext(
        config_file="config.toml",
        instance_id="test-instance",
        logging_type=logging_type,
        logging_config_file=logging_config_file,
        proxy_timeout=30,
    )


@pytest.mark.parametrize(
    "logging_type, file_name",
    [("dev", "logging-config-dev.json"), ("PROD", "logging-config-prod.json")],
)
def test_configure_logging_should_load_builtin_configuration(
    logging_type: str, file_name: str
) -> None:
    """
    Tests that the built-in logging types load the packaged configuration files.
    """
    # Act
    with patch("shrtlnk.config.logging_config._load_logging_config") as mock_load:
        configure_logging(_context(logging_type))

    # Assert
    mock_load.assert_called_once_with(_get_local_package_file_path(file_name))


def test_configure_logging_should_load_custom_configuration() -> None:
    """
    Tests that the custom logging type loads the configured file.
    """
    # Act
    with patch("shrtlnk.config.logging_config._load_logging_config") as mock_load:
        configure_logging(_context("custom", "/etc/shrtlnk/logging.json"))

    # Assert
    mock_load.assert_called_once_with("/etc/shrtlnk/logging.json")


@pytest.mark.parametrize(
    "context, message",
    [
        (_context(""), "Logging type must be provided."),
        (_context("custom"), "Custom logging configuration file must be provided."),
        (_context("verbose"), "Invalid logging type: verbose"),
    ],
)
def test_configure_logging_should_reject_invalid_settings(
    context: ServerContext, message: str
) -> None:
    """
    Tests that configure_logging raises ValueError for unusable logging settings.
    """
    with patch("shrtlnk.config.logging_config._load_logging_config"):
        with pytest.raises(ValueError, match=message):
            configure_logging(context)


def test_configure_logging_should_attach_instance_filter_to_root_handlers() -> None:
    """
    Tests that every root handler gets the instance ID filter.
    """
    # Arrange
    handler = logging.NullHandler()
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        # Act
        with patch("shrtlnk.config.logging_config._load_logging_config"):
            configure_logging(_context("dev"))

        # Assert
        assert any(isinstance(f, _InstanceIdFilter) for f in handler.filters)
    finally:
        root_logger.removeHandler(handler)


def test_instance_id_filter_should_tag_records() -> None:
    """
    Tests that the filter adds the instance ID and never drops a record.
    """
    # Arrange
    record = logging.LogRecord("shrtlnk.test", logging.INFO, __file__, 1, "msg", None, None)

    # Act
    result = _InstanceIdFilter(instance_id="edge-1").filter(record)

    # Assert
    assert result is True
    assert record.instance_id == "edge-1"


@pytest.mark.parametrize("file_name", ["logging-config-dev.json", "logging-config-prod.json"])
def test_packaged_configurations_should_reference_instance_id(file_name: str) -> None:
    """
    Tests that the packaged configurations are valid JSON using the instance ID.
    """
    # Act
    with open(_get_local_package_file_path(file_name)) as f:
        config = json.load(f)

    # Assert
    assert config["version"] == 1
    assert "%(instance_id)s" in config["formatters"]["default"]["format"]


def test_load_logging_config_should_load_and_apply_config() -> None:
    """
    Tests that _load_logging_config loads and applies the logging configuration.
    """
    # Arrange
    config_file = "test-config.json"
    mock_config = {"version": 1, "formatters": {}, "handlers": {}, "loggers": {}}

    with patch("builtins.open", mock_open()) as mock_file:
        with patch("json.load", return_value=mock_config) as mock_json_load:
            with patch("logging.config.dictConfig") as mock_dict_config:
                # Act
                _load_logging_config(config_file)

                # Assert
                mock_file.assert_called_once_with(config_file)
                mock_json_load.assert_called_once()
                mock_dict_config.assert_called_once_with(mock_config)


def test_load_logging_config_should_raise_runtime_error_when_file_not_found() -> None:
    """
    Tests that _load_logging_config raises RuntimeError when the file is not found.
    """
    with patch("builtins.open", side_effect=FileNotFoundError()):
        with pytest.raises(RuntimeError, match="Logging config file not found: missing.json"):
            _load_logging_config("missing.json")


def test_load_logging_config_should_raise_runtime_error_when_invalid_json() -> None:
    """
    Tests that _load_logging_config raises RuntimeError when the JSON is invalid.
    """
    with patch("builtins.open", mock_open()):
        with patch("json.load", side_effect=json.JSONDecodeError("Invalid JSON", "", 0)):
            with pytest.raises(RuntimeError, match="Invalid JSON format in logging config file"):
                _load_logging_config("broken.json")


def test_load_logging_config_should_raise_runtime_error_when_other_error() -> None:
    """
    Tests that _load_logging_config raises RuntimeError when dictConfig rejects the file.
    """
    with patch("builtins.open", mock_open()):
        with patch("json.load", return_value={"version": 1}):
            with patch("logging.config.dictConfig", side_effect=ValueError("bad handler")):
                with pytest.raises(RuntimeError, match="Error loading logging config: bad handler"):
                    _load_logging_config("config.json")
