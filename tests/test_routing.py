"""
Unit tests for routing table construction and resolution.

This module contains tests for parsing configuration into a routing table,
preparing it, locating preparation errors, and resolving request paths in
handler declaration order.

The tests follow the Arrange-Act-Assert (AAA) pattern.
"""

from pathlib import Path
from typing import Any, Dict

import pytest

from shrtlnk.domain import BindSpec, Handler, RoutingTable
from shrtlnk.errors import ConfigError
from shrtlnk.matchers import PathMatcher, RootMatcher
from shrtlnk.pages import EmbeddedPage, RedirectPage, StaticFilePage
from shrtlnk.routing import load_routing_table, parse_routing_table, validate_and_prepare


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    """
    Creates a deserialized configuration with a few handlers.

    Returns:
        Dict[str, Any]: The configuration.
    """
    return {
        "host": "0.0.0.0",
        "port": 9000,
        "handlers": [
            {"must_match": {"type": "path", "path": "abc"}, "type": "string", "data": "abc"},
            {"must_match": {"type": "regex", "pattern": "^a"}, "type": "redirect", "to": "/abc"},
            {"must_match": {"type": "root"}, "type": "string", "data": "home"},
        ],
        "errors": {"not_found": {"type": "string", "data": "nothing here", "content_type": "text/plain"}},
    }


def test_load_routing_table_should_build_a_prepared_table(raw_config: Dict[str, Any]) -> None:
    # Act
    table = load_routing_table(raw_config)

    # Assert
    assert table.bind == BindSpec(host="0.0.0.0", port=9000)
    assert len(table.handlers) == 3
    assert isinstance(table.resolve("abc"), EmbeddedPage)
    assert isinstance(table.resolve("apple"), RedirectPage)
    assert table.resolve("zzz") is table.not_found
    assert table.not_found.data == b"nothing here"


def test_parse_routing_table_should_apply_defaults() -> None:
    # Act
    table = load_routing_table({})

    # Assert
    assert table.bind == BindSpec(host="127.0.0.1", port=8387)
    assert table.handlers == ()
    assert table.not_found.data == b"404: not found."
    assert table.not_found.content_type == "text/html"
    assert isinstance(table.no_path, RedirectPage)
    assert table.no_path.to == "/_"


def test_resolve_should_prefer_the_first_declared_handler() -> None:
    # Arrange
    first, second = EmbeddedPage(b"first"), EmbeddedPage(b"second")
    table = RoutingTable(
        (Handler(PathMatcher("same"), first), Handler(PathMatcher("same"), second)),
        not_found=EmbeddedPage(b"404"),
        no_path=EmbeddedPage(b"index"),
        bind=BindSpec("127.0.0.1", 8387),
    )

    # Act & Assert
    assert table.resolve("/same/") is first


def test_resolve_should_use_no_path_page_without_a_path() -> None:
    # Arrange
    no_path = EmbeddedPage(b"index")
    table = RoutingTable(
        (Handler(RootMatcher(), EmbeddedPage(b"root")),),
        not_found=EmbeddedPage(b"404"),
        no_path=no_path,
        bind=BindSpec("127.0.0.1", 8387),
    )

    # Act & Assert
    assert table.resolve(None) is no_path
    assert table.resolve("") is table.handlers[0].page


def test_validate_and_prepare_should_read_static_files(tmp_path: Path) -> None:
    # Arrange
    file_path = tmp_path / "page.html"
    file_path.write_text("from disk")
    table = parse_routing_table(
        {"handlers": [{"must_match": {"type": "root"}, "type": "file", "path": str(file_path)}]}
    )

    # Act
    prepared = validate_and_prepare(table)

    # Assert
    assert prepared is table
    assert isinstance(table.handlers[0].page, StaticFilePage)


def test_validate_and_prepare_should_locate_the_failing_handler(tmp_path: Path) -> None:
    # Arrange
    raw = {
        "handlers": [
            {"must_match": {"type": "root"}, "type": "string", "data": "ok"},
            {"must_match": {"type": "all", "matchers": []}, "type": "string", "data": "x"},
        ]
    }

    # Act
    with pytest.raises(ConfigError) as exc_info:
        load_routing_table(raw)

    # Assert
    assert exc_info.value.context == ("inside handler 1, counting from 0", "inside a MatchesAll block")
    assert str(exc_info.value) == (
        "inside handler 1, counting from 0: inside a MatchesAll block: "
        "the list of matchers must not be empty"
    )


def test_validate_and_prepare_should_locate_failing_error_pages(tmp_path: Path) -> None:
    # Arrange
    raw = {"errors": {"no_path": {"type": "file", "path": str(tmp_path / "missing")}}}

    # Act
    with pytest.raises(ConfigError) as exc_info:
        load_routing_table(raw)

    # Assert
    assert exc_info.value.context == ("inside errors.no_path", "inside a StaticFile page")


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"port": "80"}, "'port' must be an integer"),
        ({"port": 70000}, "'port' must be an integer"),
        ({"port": True}, "'port' must be an integer"),
        ({"host": ""}, "'host' must be a non-empty string"),
        ({"handlers": {"a": 1}}, "'handlers' must be a list"),
        ({"handlers": [{"type": "string", "data": "x"}]}, "no 'must_match' matcher"),
        ({"errors": []}, "'errors' must be a table"),
    ],
)
def test_parse_routing_table_should_reject_malformed_configuration(raw, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        parse_routing_table(raw)


def test_parse_routing_table_should_locate_parse_errors_by_handler() -> None:
    # Arrange
    raw = {
        "handlers": [
            {"must_match": {"type": "root"}, "type": "string", "data": "ok"},
            {"must_match": {"type": "root"}, "type": "string", "data": "ok"},
            {"must_match": {"type": "root"}, "type": "carrier-pigeon"},
        ]
    }

    # Act
    with pytest.raises(ConfigError) as exc_info:
        parse_routing_table(raw)

    # Assert
    assert exc_info.value.context == ("inside handler 2, counting from 0",)
