"""
HTTP client configuration module for the shrtlnk front end.

This module creates the client session shared by every reverse-proxy page. The
session outlives routing-table reloads and is closed on shutdown.
"""

import logging

import aiohttp

from shrtlnk.config import ServerContext

# Module logger
logger = logging.getLogger(__name__)


def get_http_session(context: ServerContext) -> aiohttp.ClientSession:
    """
    Create the HTTP client session used to reach reverse-proxy upstreams.

    Using a shared session is recommended for performance reasons. Responses are
    not decompressed, so proxied bodies reach the client byte for byte. Must be
    called from within a running event loop.

    Args:
        context: Process settings containing the proxy timeout.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    timeout = aiohttp.ClientTimeout(total=context.proxy_timeout)
    logger.debug(f"Creating HTTP client session with a {context.proxy_timeout}s timeout")
    return aiohttp.ClientSession(timeout=timeout, auto_decompress=False)
