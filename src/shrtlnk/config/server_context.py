"""
Process settings for the shrtlnk front end.

This module defines a data structure that holds the settings of one server
process. Routing itself is configured separately, in the file named by
``config_file``, which can be reloaded while the process runs.
"""

from typing import NamedTuple


class ServerContext(NamedTuple):
    """
    A data structure containing the settings of one server process.

    This class is immutable. It is created by parsing command-line arguments and
    environment variables.

    Attributes:
        config_file: Path to the routing configuration file (TOML, or JSON by suffix).
        instance_id: Unique identifier of this process, attached to every log record.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
        proxy_timeout: Total timeout in seconds for a request to a reverse-proxy upstream.
    """

    config_file: str
    instance_id: str
    logging_type: str
    logging_config_file: str
    proxy_timeout: int
