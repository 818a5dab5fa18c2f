"""
Exception hierarchy for the shrtlnk front end.

Configuration problems are always fatal to the reload attempt that found them but
never to the running process: the previously installed routing table keeps serving.
Proxy failures are confined to the request that triggered them and are turned into
a gateway error response by the dispatcher.
"""

from typing import Iterable, Tuple


class ShrtlnkError(Exception):
    """Base class for every error raised by this package."""


class ReloadError(ShrtlnkError):
    """A routing configuration could not be installed."""


class ConfigError(ReloadError):
    """
    Raised while parsing, validating or preparing a routing configuration.

    The error carries a chain of location strings, outermost first, describing where
    in the configuration tree the failure was found, e.g.
    ``("inside handler 2, counting from 0", "inside a MatchesAll block")``.

    Attributes:
        message: The innermost description of what went wrong.
        context: Location strings, outermost first.
    """

    def __init__(self, message: str, context: Iterable[str] = ()) -> None:
        self.message: str = message
        self.context: Tuple[str, ...] = tuple(context)
        super().__init__(self._render())

    def within(self, location: str) -> "ConfigError":
        """
        Return a copy of this error wrapped in one more (outer) location.

        Args:
            location: Description of the enclosing configuration element.

        Returns:
            ConfigError: A new error whose context starts with ``location``.
        """
        return type(self)(self.message, (location,) + self.context)

    def _render(self) -> str:
        return ": ".join(self.context + (self.message,))


class RestartRequiredError(ReloadError):
    """
    The new configuration is valid but changes the bind address.

    The listening socket is owned by the server bootstrap, so such a change can only
    be applied by restarting the process.
    """

    def __init__(self, current: str, requested: str) -> None:
        self.current: str = current
        self.requested: str = requested
        super().__init__(
            f"These configuration changes would require a restart "
            f"(bind address {current} -> {requested})."
        )


class ProxyError(ShrtlnkError):
    """Forwarding a request to a reverse-proxy upstream failed."""


class StoreNotLoadedError(ShrtlnkError, RuntimeError):
    """A request was dispatched before any routing table had been installed."""
