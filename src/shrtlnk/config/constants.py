"""
Constants for the shrtlnk front end.

This module defines default values for the process settings, used as fallback
values when neither command-line arguments nor environment variables are provided,
and the defaults applied to routing configuration files.
"""

# Process configuration defaults
DEFAULT_CONFIG_FILE = "./config.toml"
DEFAULT_INSTANCE_ID_PREFIX = "shrtlnk-"
DEFAULT_PROXY_TIMEOUT = 30

# Logging configuration defaults
DEFAULT_LOGGING_TYPE = "prod"
DEFAULT_LOGGING_CONFIG_FILE = ""

# Routing configuration defaults
DEFAULT_BIND_HOST = "127.0.0.1"
DEFAULT_BIND_PORT = 8387
DEFAULT_CONTENT_TYPE = "text/html"
DEFAULT_PROXY_SCHEME = "http"

# Built-in response bodies
NOT_FOUND_BODY = "404: not found."
NO_PATH_REDIRECT_TARGET = "/_"
BAD_GATEWAY_BODY = "502: bad gateway."

# Name of the catch-all route parameter holding the request path
PATH_PARAMETER = "path"
