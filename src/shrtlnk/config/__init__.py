"""
Configuration module for the shrtlnk front end.

This module provides functionality to parse command-line arguments and environment
variables to create the process settings. It defines default values and help text
for all configurable parameters.
"""

import argparse
import os
from typing import Any, List, Optional
from uuid import uuid4

from shrtlnk.config.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_INSTANCE_ID_PREFIX,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_PROXY_TIMEOUT,
)
from shrtlnk.config.server_context import ServerContext


def get_context(argv: Optional[List[str]] = None) -> ServerContext:
    """
    Parse command-line arguments and environment variables to create the process settings.

    For each option, it first checks for a command-line argument, then falls back to
    an environment variable, and finally uses a default value.

    Args:
        argv: Arguments to parse. Defaults to ``sys.argv[1:]``.

    Returns:
        ServerContext: The parsed settings.
    """
    parser = argparse.ArgumentParser(
        description="A configuration-driven HTTP front end with hot-reloadable routing."
    )

    parser.add_argument(
        "config_file",
        type=str,
        nargs="?",
        default=os.getenv("SHRTLNK_CONFIG_FILE", DEFAULT_CONFIG_FILE),
        help="Path to the routing configuration file (TOML, or JSON if it ends in .json).\n"
        "If not provided, the value is read from the SHRTLNK_CONFIG_FILE environment variable.\n"
        f"If that is also absent, {DEFAULT_CONFIG_FILE} is used.",
    )

    parser.add_argument(
        "-iid",
        "--instance-id",
        type=str,
        default=os.getenv("SHRTLNK_INSTANCE_ID", f"{DEFAULT_INSTANCE_ID_PREFIX}{uuid4()}"),
        help="Specifies the identifier attached to every log record of this process.\n"
        "If not provided, the value is read from the SHRTLNK_INSTANCE_ID environment variable.\n"
        f"If that is also absent, the default value will be {DEFAULT_INSTANCE_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "-lt",
        "--logging-type",
        type=str,
        default=os.getenv("SHRTLNK_LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'dev' and 'prod', system will use built-in configurations.\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "-lcf",
        "--logging-config-file",
        type=str,
        default=os.getenv("SHRTLNK_LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    parser.add_argument(
        "-pt",
        "--proxy-timeout",
        type=int,
        default=int(os.getenv("SHRTLNK_PROXY_TIMEOUT", DEFAULT_PROXY_TIMEOUT)),
        help="Specifies the total timeout in seconds for requests to reverse-proxy upstreams.\n"
        "If not provided, the value is read from the SHRTLNK_PROXY_TIMEOUT environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_PROXY_TIMEOUT} seconds is used.",
    )

    args: Any = parser.parse_args(argv)

    return ServerContext(
        config_file=args.config_file,
        instance_id=args.instance_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
        proxy_timeout=args.proxy_timeout,
    )
