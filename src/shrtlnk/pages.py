"""
Response-producing pages.

A page is configured with a ``type`` tag and the fields of that page type:

- ``redirect``: ``{type = "redirect", to = "https://example.com"}``
- ``string``: ``{type = "string", data = "hello", content_type = "text/plain"}``
- ``file``: ``{type = "file", path = "/srv/index.html"}``
- ``proxy``: ``{type = "proxy", host = "127.0.0.1:9000", scheme = "http"}``

``content_type`` defaults to ``text/html`` and ``scheme`` to ``http``.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

import aiohttp
from aiohttp import hdrs, web
from multidict import CIMultiDict
from yarl import URL

from shrtlnk.config.constants import DEFAULT_CONTENT_TYPE, DEFAULT_PROXY_SCHEME
from shrtlnk.contracts import Page
from shrtlnk.errors import ConfigError, ProxyError

# Module logger
logger = logging.getLogger(__name__)

# Framing headers that describe a single connection, not the message. Bodies are
# re-framed on both legs of the proxy, so these are dropped in either direction.
_HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


class RedirectPage(Page):
    """Answers with a temporary redirect to a literal target."""

    def __init__(self, to: str) -> None:
        self.to: str = to

    def prepare(self) -> None:
        pass

    async def serve(self, request: web.Request) -> web.StreamResponse:
        return web.Response(status=307, headers={hdrs.LOCATION: self.to})

    def __repr__(self) -> str:
        return f"RedirectPage(to={self.to!r})"


class EmbeddedPage(Page):
    """Answers 200 with bytes stored in the configuration itself."""

    def __init__(self, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        self.data: bytes = data
        self.content_type: str = content_type

    def prepare(self) -> None:
        pass

    async def serve(self, request: web.Request) -> web.StreamResponse:
        return web.Response(body=self.data, headers={hdrs.CONTENT_TYPE: self.content_type})

    def __repr__(self) -> str:
        return f"EmbeddedPage({len(self.data)} bytes, content_type={self.content_type!r})"


class StaticFilePage(Page):
    """
    Answers 200 with the contents of a file read once, at preparation time.

    Serving never touches the file system: a file deleted or changed after the
    routing table was loaded keeps being served as it was read.
    """

    def __init__(self, path: str, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        self.path: str = path
        self.content_type: str = content_type
        self._cached: Optional[bytes] = None

    def prepare(self) -> None:
        try:
            with open(self.path, "rb") as f:
                self._cached = f.read()
        except OSError as err:
            raise ConfigError(f"could not read {self.path!r}: {err}").within(
                "inside a StaticFile page"
            ) from err
        logger.debug(f"Cached {len(self._cached)} bytes from {self.path}")

    async def serve(self, request: web.Request) -> web.StreamResponse:
        if self._cached is None:
            raise RuntimeError(f"StaticFile page {self.path!r} served before prepare()")
        return web.Response(body=self._cached, headers={hdrs.CONTENT_TYPE: self.content_type})

    def __repr__(self) -> str:
        return f"StaticFilePage({self.path!r}, content_type={self.content_type!r})"


class ReverseProxyPage(Page):
    """
    Forwards the request to another server and relays its answer.

    Only the scheme and authority of the request URI are replaced. Method, path,
    query string, headers and body are sent as received, and the upstream status,
    headers and body are returned as received. Upstream redirects are not followed
    and failed requests are not retried.

    The client session is shared by the whole process and outlives reloads, so a
    request still running against a replaced routing table can finish normally.
    """

    def __init__(
        self,
        host: str,
        scheme: str = DEFAULT_PROXY_SCHEME,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.host: str = host
        self.scheme: str = scheme
        self._session: Optional[aiohttp.ClientSession] = session
        self._base: Optional[URL] = None

    def prepare(self) -> None:
        location = "inside a ReverseProxy page"
        if self.scheme not in ("http", "https"):
            raise ConfigError(
                f"unsupported scheme {self.scheme!r}. Allowed values are: http, https"
            ).within(location)
        try:
            base = URL.build(scheme=self.scheme, authority=self.host)
        except (TypeError, ValueError) as err:
            raise ConfigError(f"invalid upstream host {self.host!r}: {err}").within(
                location
            ) from err
        if not base.host:
            raise ConfigError(f"invalid upstream host {self.host!r}").within(location)
        if self._session is None:
            raise ConfigError("no HTTP client session is available for proxying").within(
                location
            )
        self._base = base

    def upstream_url(self, request: web.Request) -> URL:
        """
        Rebuild the request URI against the upstream's scheme and authority.

        Args:
            request: The inbound request.

        Returns:
            URL: The already-encoded upstream URL with the inbound path and query.

        Raises:
            ProxyError: If the URI cannot be rebuilt.
        """
        if self._base is None:
            raise RuntimeError(f"ReverseProxy page {self.host!r} served before prepare()")
        try:
            return URL(f"{self._base}{request.rel_url}", encoded=True)
        except ValueError as err:
            raise ProxyError(f"could not rebuild {request.rel_url} for {self._base}") from err

    async def serve(self, request: web.Request) -> web.StreamResponse:
        url = self.upstream_url(request)
        body = await request.read() if request.can_read_body else None
        # The body is buffered, so the client computes a fresh Content-Length
        outbound_headers = _end_to_end_headers(request.headers, hdrs.CONTENT_LENGTH)

        logger.debug(f"Proxying {request.method} {request.rel_url} to {url}")
        try:
            async with self._session.request(
                request.method,
                url,
                headers=outbound_headers,
                data=body,
                allow_redirects=False,
            ) as upstream:
                payload: bytes = await upstream.read()
                headers = _end_to_end_headers(upstream.headers)
                return web.Response(
                    status=upstream.status,
                    reason=upstream.reason,
                    headers=headers,
                    body=payload,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise ProxyError(f"upstream request to {url} failed: {err!r}") from err

    def __repr__(self) -> str:
        return f"ReverseProxyPage({self.scheme}://{self.host})"


def parse_page(raw: Any, session: Optional[aiohttp.ClientSession] = None) -> Page:
    """
    Build an unprepared page from its deserialized configuration.

    Args:
        raw: A mapping with a ``type`` tag and the fields of that page type. Unknown
            keys are ignored, so a handler table can be passed as is.
        session: The shared HTTP client handed to reverse-proxy pages.

    Returns:
        Page: The page. ``prepare`` has not been called yet.

    Raises:
        ConfigError: If the tag is unknown or a required field is missing.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError(f"a page must be a table, got {type(raw).__name__}")

    tag = raw.get("type")
    if tag == "redirect":
        return RedirectPage(_require_str(raw, "to", tag))
    elif tag == "string":
        return EmbeddedPage(
            _require_str(raw, "data", tag).encode("utf-8"),
            _optional_str(raw, "content_type", tag, DEFAULT_CONTENT_TYPE),
        )
    elif tag == "file":
        return StaticFilePage(
            _require_str(raw, "path", tag),
            _optional_str(raw, "content_type", tag, DEFAULT_CONTENT_TYPE),
        )
    elif tag == "proxy":
        return ReverseProxyPage(
            _require_str(raw, "host", tag),
            _optional_str(raw, "scheme", tag, DEFAULT_PROXY_SCHEME),
            session=session,
        )

    raise ConfigError(
        f"unknown page type {tag!r}. Allowed values are: redirect, string, file, proxy"
    )


def _require_str(raw: Mapping, key: str, tag: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise ConfigError(f"the '{tag}' page needs a string field '{key}'")
    return value


def _optional_str(raw: Mapping, key: str, tag: str, default: str) -> str:
    if key not in raw:
        return default
    return _require_str(raw, key, tag)


def _end_to_end_headers(headers: Mapping[str, str], *also_drop: str) -> CIMultiDict:
    dropped = _HOP_BY_HOP_HEADERS.union(name.lower() for name in also_drop)
    return CIMultiDict(
        [(name, value) for name, value in headers.items() if name.lower() not in dropped]
    )
