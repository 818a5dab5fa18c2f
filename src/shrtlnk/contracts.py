"""
Core interfaces for the shrtlnk routing engine.

Routing rules are built from two kinds of configuration objects: matchers, which
decide whether a request path belongs to a rule, and pages, which produce the
response. Both go through a one-time preparation step when a routing table is
loaded, so that everything which can fail because of bad configuration fails
before the table is ever installed.
"""

import abc

from aiohttp import web


class Matcher(abc.ABC):
    """
    Abstract interface for a predicate over a request path.

    Matchers form a tree through the boolean combinators. After a successful call
    to ``prepare`` a matcher is immutable and ``matches`` must never raise.
    """

    @abc.abstractmethod
    def prepare(self) -> None:
        """
        Performs one-time setup such as compiling regular expressions.

        Raises:
            ConfigError: If the matcher (or one of its children) is invalid. The
                error context names the combinator in which the failure happened.
        """
        pass

    @abc.abstractmethod
    def matches(self, path: str) -> bool:
        """
        Decides whether the given request path satisfies this predicate.

        Args:
            path: The request path as handed over by the dispatcher.

        Returns:
            bool: True if the path matches.
        """
        pass


class Page(abc.ABC):
    """
    Abstract interface for a response-producing behavior.

    Preparation resolves every I/O or validation dependent step up front. After it,
    serving is I/O-free for every page except the reverse proxy, whose upstream
    request is inherently fallible.
    """

    @abc.abstractmethod
    def prepare(self) -> None:
        """
        Performs one-time setup such as reading a file into memory.

        Raises:
            ConfigError: If the page cannot be prepared.
        """
        pass

    @abc.abstractmethod
    async def serve(self, request: web.Request) -> web.StreamResponse:
        """
        Produces the response for a request that was routed to this page.

        Args:
            request: The inbound request.

        Returns:
            web.StreamResponse: The response to send to the client.

        Raises:
            ProxyError: Only for reverse-proxy pages, when the upstream request fails.
        """
        pass
