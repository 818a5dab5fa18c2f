"""
Per-request entry point.

The dispatcher is installed as the aiohttp handler for every method on ``/`` and on
the catch-all ``/{path}`` route. It routes on the ``path`` match-info parameter,
which the ``/`` route does not bind, so requests to ``/`` get the no-path page.
"""

import logging

from aiohttp import web

from shrtlnk.config.constants import BAD_GATEWAY_BODY, PATH_PARAMETER
from shrtlnk.errors import ProxyError, StoreNotLoadedError
from shrtlnk.store import ConfigStore

# Module logger
logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Resolves each request against a snapshot of the active routing table.

    A reload that lands while a request is in flight does not affect it: the
    request keeps the table it read when it started.
    """

    def __init__(self, store: ConfigStore) -> None:
        """
        Initializes the dispatcher.

        Args:
            store: The store holding the active routing table.
        """
        self._store: ConfigStore = store

    async def dispatch(self, request: web.Request) -> web.StreamResponse:
        """
        Route a request and serve the resulting page.

        Args:
            request: The inbound request.

        Returns:
            web.StreamResponse: The page's response, or a 502 response when a
                reverse-proxy upstream could not be reached.

        Raises:
            StoreNotLoadedError: If no routing table has been installed yet. This is
                a startup-ordering bug and is not turned into a response.
        """
        try:
            table = self._store.snapshot()
        except StoreNotLoadedError:
            logger.critical("Request received before the first routing table was loaded")
            raise

        page = table.resolve(request.match_info.get(PATH_PARAMETER))
        try:
            return await page.serve(request)
        except ProxyError as e:
            logger.warning(f"Proxying {request.method} {request.rel_url} failed: {e}")
            return web.Response(status=502, text=BAD_GATEWAY_BODY, content_type="text/html")
