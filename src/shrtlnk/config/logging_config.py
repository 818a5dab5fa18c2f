"""
Logging setup for shrtlnk processes.

Several shrtlnk instances usually write to one log sink, so every record is tagged
with the ``instance_id`` of the process that wrote it. Reload outcomes, proxy
failures and request-ordering bugs are logged by the modules that detect them;
this module only installs the handlers and formatters.

``dev`` and ``prod`` map to dictConfig files shipped inside this package, and
``custom`` points at an operator-provided one.
"""

import json
import logging.config
import os
from typing import Any, Dict

from shrtlnk.config import ServerContext

# Logging types backed by a packaged dictConfig file
_PACKAGED_CONFIGS: Dict[str, str] = {
    "dev": "logging-config-dev.json",
    "prod": "logging-config-prod.json",
}


def configure_logging(context: ServerContext) -> None:
    """
    Install the logging configuration selected by ``context.logging_type``.

    Must run before the server starts: the formatters reference
    ``%(instance_id)s``, which only the instance filter provides.

    Args:
        context: Process settings. ``logging_type`` is matched case-insensitively;
            ``logging_config_file`` is only read for the ``custom`` type.

    Raises:
        ValueError: If the type is empty or unknown, or ``custom`` is selected
            without a file.
        RuntimeError: If the selected file cannot be loaded.
    """
    logging_type: str = context.logging_type.lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")

    if logging_type in _PACKAGED_CONFIGS:
        config_file = _get_local_package_file_path(_PACKAGED_CONFIGS[logging_type])
    elif logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        config_file = context.logging_config_file
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    _load_logging_config(config_file)

    # Logger filters do not see records propagated from child loggers, handler filters do
    instance_filter = _InstanceIdFilter(instance_id=context.instance_id)
    for handler in logging.getLogger().handlers:
        handler.addFilter(instance_filter)

    logging.debug(f"Logging configured from {config_file} for instance {context.instance_id}")


def _load_logging_config(config_file: str) -> None:
    """
    Apply a dictConfig JSON file.

    Raises:
        RuntimeError: If the file is missing, is not JSON, or is rejected by
            dictConfig.
    """
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
            logging.config.dictConfig(config)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err
    except Exception as err:
        raise RuntimeError(f"Error loading logging config: {str(err)}") from err


def _get_local_package_file_path(config_file: str) -> str:
    return os.path.join(os.path.dirname(__file__), config_file)


class _InstanceIdFilter(logging.Filter):
    """Stamps ``instance_id`` on every record passing through a root handler."""

    def __init__(self, instance_id: str) -> None:
        super().__init__()
        self._instance_id: str = instance_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.instance_id = self._instance_id
        return True
