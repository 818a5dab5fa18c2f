"""
Routing configuration file loader.

Reads the routing configuration file and deserializes it into plain Python values.
Files ending in ``.json`` are read as JSON, everything else as TOML. The result is
handed to ``shrtlnk.routing`` for validation.
"""

import json
import logging
import tomllib
from typing import Any, Dict

from shrtlnk.errors import ConfigError

# Module logger
logger = logging.getLogger(__name__)


def load_raw_config(config_file: str) -> Dict[str, Any]:
    """
    Read and deserialize a routing configuration file.

    Args:
        config_file: Path to the file.

    Returns:
        Dict[str, Any]: The deserialized configuration.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML/JSON.
    """
    logger.debug(f"Reading routing configuration from {config_file}")
    try:
        if config_file.lower().endswith(".json"):
            with open(config_file, encoding="utf-8") as f:
                raw = json.load(f)
        else:
            with open(config_file, "rb") as f:
                raw = tomllib.load(f)
    except OSError as err:
        raise ConfigError(f"could not read configuration file {config_file}: {err}") from err
    except (json.JSONDecodeError, UnicodeDecodeError, tomllib.TOMLDecodeError) as err:
        raise ConfigError(f"invalid configuration file {config_file}: {err}") from err

    if not isinstance(raw, dict):
        raise ConfigError(f"the configuration file {config_file} must contain a table")
    return raw
