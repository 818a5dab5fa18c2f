"""
Domain models for the shrtlnk routing engine.

This module defines the routing rule (a matcher paired with a page), the bind
address of the listening socket and the routing table, which is the unit that
gets validated, installed and swapped as a whole on every reload.
"""

from typing import NamedTuple, Optional, Tuple

from shrtlnk.contracts import Matcher, Page


class BindSpec(NamedTuple):
    """
    Address the HTTP listener binds to.

    Changing it requires a restart, so it is compared on every reload.

    Attributes:
        host: Interface to listen on.
        port: TCP port to listen on.
    """

    host: str
    port: int

    @property
    def address(self) -> str:
        """The ``host:port`` form used in log messages and errors."""
        return f"{self.host}:{self.port}"


class Handler(NamedTuple):
    """
    One routing rule.

    Attributes:
        matcher: Decides whether a request path belongs to this rule.
        page: Produces the response when the matcher accepts the path.
    """

    matcher: Matcher
    page: Page


class RoutingTable:
    """
    An ordered list of handlers plus the two fallback pages and the bind address.

    Handler order is significant: the first handler whose matcher accepts the path
    wins. A table is built once, prepared once and then never mutated; reloads
    replace it wholesale.
    """

    def __init__(
        self,
        handlers: Tuple[Handler, ...],
        not_found: Page,
        no_path: Page,
        bind: BindSpec,
    ) -> None:
        """
        Initializes a routing table.

        Args:
            handlers: Routing rules in declaration order.
            not_found: Page served when no handler matches.
            no_path: Page served when the dispatcher has no path to route on.
            bind: Address of the listening socket.
        """
        self.handlers: Tuple[Handler, ...] = tuple(handlers)
        self.not_found: Page = not_found
        self.no_path: Page = no_path
        self.bind: BindSpec = bind

    def resolve(self, path: Optional[str]) -> Page:
        """
        Find the page for a request path.

        Args:
            path: The request path, or None when the dispatcher could not extract one.

        Returns:
            Page: The page of the first matching handler, the not-found page when
                nothing matches, or the no-path page when ``path`` is None.
        """
        if path is None:
            return self.no_path
        for handler in self.handlers:
            if handler.matcher.matches(path):
                return handler.page
        return self.not_found

    def __repr__(self) -> str:
        return f"RoutingTable({len(self.handlers)} handlers, bind={self.bind.address})"
