"""
Routing table construction.

Turns the deserialized configuration into a routing table and prepares it. The
configuration shape is::

    host = "127.0.0.1"
    port = 8387

    [[handlers]]
    must_match = { type = "path", path = "abc" }
    type = "string"
    data = "abc"

    [errors.not_found]
    type = "string"
    data = "404: not found."

Construction either yields a fully prepared table or raises ConfigError; a
partially prepared table never leaves this module.
"""

import logging
from typing import Any, List, Mapping, Optional

import aiohttp

from shrtlnk.config.constants import (
    DEFAULT_BIND_HOST,
    DEFAULT_BIND_PORT,
    NO_PATH_REDIRECT_TARGET,
    NOT_FOUND_BODY,
)
from shrtlnk.contracts import Page
from shrtlnk.domain import BindSpec, Handler, RoutingTable
from shrtlnk.errors import ConfigError
from shrtlnk.matchers import parse_matcher
from shrtlnk.pages import EmbeddedPage, RedirectPage, parse_page

# Module logger
logger = logging.getLogger(__name__)


def default_not_found_page() -> Page:
    """The page served for routing misses when ``errors.not_found`` is not set."""
    return EmbeddedPage(NOT_FOUND_BODY.encode("utf-8"), "text/html")


def default_no_path_page() -> Page:
    """The page served without a path parameter when ``errors.no_path`` is not set."""
    return RedirectPage(NO_PATH_REDIRECT_TARGET)


def parse_routing_table(
    raw: Mapping[str, Any], session: Optional[aiohttp.ClientSession] = None
) -> RoutingTable:
    """
    Build an unprepared routing table from the deserialized configuration.

    Args:
        raw: The configuration as produced by the loader.
        session: The shared HTTP client handed to reverse-proxy pages.

    Returns:
        RoutingTable: The table. Its matchers and pages are not prepared yet.

    Raises:
        ConfigError: If the configuration does not have the expected shape.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError(f"the configuration must be a table, got {type(raw).__name__}")

    bind = _parse_bind(raw)

    raw_handlers = raw.get("handlers", [])
    if not isinstance(raw_handlers, list):
        raise ConfigError("'handlers' must be a list of tables")

    handlers: List[Handler] = []
    for index, raw_handler in enumerate(raw_handlers):
        try:
            handlers.append(_parse_handler(raw_handler, session))
        except ConfigError as err:
            raise err.within(f"inside handler {index}, counting from 0") from err

    raw_errors = raw.get("errors", {})
    if not isinstance(raw_errors, Mapping):
        raise ConfigError("'errors' must be a table")

    not_found = _parse_error_page(raw_errors, "not_found", session) or default_not_found_page()
    no_path = _parse_error_page(raw_errors, "no_path", session) or default_no_path_page()

    return RoutingTable(tuple(handlers), not_found=not_found, no_path=no_path, bind=bind)


def validate_and_prepare(table: RoutingTable) -> RoutingTable:
    """
    Prepare every matcher and page of a routing table.

    Handlers are prepared in declaration order, matcher first and then page; the
    fallback pages come last. The first failure aborts preparation.

    Args:
        table: A freshly parsed routing table.

    Returns:
        RoutingTable: The same table, now ready to serve.

    Raises:
        ConfigError: Annotated with the position of the failing handler or page.
    """
    for index, handler in enumerate(table.handlers):
        try:
            handler.matcher.prepare()
            handler.page.prepare()
        except ConfigError as err:
            raise err.within(f"inside handler {index}, counting from 0") from err

    for name, page in (("not_found", table.not_found), ("no_path", table.no_path)):
        try:
            page.prepare()
        except ConfigError as err:
            raise err.within(f"inside errors.{name}") from err

    logger.debug(f"Prepared {table!r}")
    return table


def load_routing_table(
    raw: Mapping[str, Any], session: Optional[aiohttp.ClientSession] = None
) -> RoutingTable:
    """
    Parse and prepare a routing table in one step.

    Args:
        raw: The configuration as produced by the loader.
        session: The shared HTTP client handed to reverse-proxy pages.

    Returns:
        RoutingTable: A fully prepared table.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    return validate_and_prepare(parse_routing_table(raw, session))


def _parse_bind(raw: Mapping[str, Any]) -> BindSpec:
    host = raw.get("host", DEFAULT_BIND_HOST)
    if not isinstance(host, str) or not host:
        raise ConfigError(f"'host' must be a non-empty string, got {host!r}")

    port = raw.get("port", DEFAULT_BIND_PORT)
    # bool is a subclass of int
    if not isinstance(port, int) or isinstance(port, bool) or not 0 <= port <= 65535:
        raise ConfigError(f"'port' must be an integer between 0 and 65535, got {port!r}")

    return BindSpec(host=host, port=port)


def _parse_handler(raw: Any, session: Optional[aiohttp.ClientSession]) -> Handler:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"a handler must be a table, got {type(raw).__name__}")
    if "must_match" not in raw:
        raise ConfigError("the handler has no 'must_match' matcher")

    matcher = parse_matcher(raw["must_match"])
    page_fields = {key: value for key, value in raw.items() if key != "must_match"}
    return Handler(matcher=matcher, page=parse_page(page_fields, session))


def _parse_error_page(
    raw_errors: Mapping[str, Any], name: str, session: Optional[aiohttp.ClientSession]
) -> Optional[Page]:
    if name not in raw_errors:
        return None
    try:
        return parse_page(raw_errors[name], session)
    except ConfigError as err:
        raise err.within(f"inside errors.{name}") from err
