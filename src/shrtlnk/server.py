"""
Server lifecycle for the shrtlnk front end.

This module provides the Application class, which ties the routing configuration
file, the config store, the request dispatcher and the aiohttp server together. It
performs the startup load, serves requests, and reloads the routing configuration
on SIGHUP without closing the listening socket.
"""

import asyncio
import logging
import signal
from asyncio import Task
from typing import Optional, Set

import aiohttp
from aiohttp import web

from shrtlnk.config.constants import PATH_PARAMETER
from shrtlnk.config.loader import load_raw_config
from shrtlnk.dispatcher import RequestDispatcher
from shrtlnk.domain import RoutingTable
from shrtlnk.errors import ConfigError, RestartRequiredError
from shrtlnk.routing import load_routing_table
from shrtlnk.store import ConfigStore


class Application:
    """
    Owns the routing state of one server process.

    The bind address is read from the routing table installed at startup. Reloads
    that would change it are rejected, since the socket is bound only once.
    """

    def __init__(
        self,
        config_location: str,
        session: aiohttp.ClientSession,
        store: Optional[ConfigStore] = None,
    ) -> None:
        """
        Initializes a new Application instance.

        Args:
            config_location: Path to the routing configuration file.
            session: Shared HTTP client session for reverse-proxy pages.
            store: Store for the active routing table. A new, empty one by default.
        """
        self._config_location: str = config_location
        self._session: aiohttp.ClientSession = session
        self._store: ConfigStore = store if store is not None else ConfigStore()
        self._dispatcher: RequestDispatcher = RequestDispatcher(self._store)
        self._logger: logging.Logger = logging.getLogger(__name__)
        self._runner: Optional[web.AppRunner] = None
        self._stopped: asyncio.Event = asyncio.Event()
        self._reload_tasks: Set[Task] = set()

    @property
    def store(self) -> ConfigStore:
        return self._store

    async def load(self) -> RoutingTable:
        """
        Performs the startup load of the routing configuration.

        Returns:
            RoutingTable: The installed table.

        Raises:
            ConfigError: If the configuration is invalid. The process cannot start.
        """
        table = await self.reload_config(check=False)
        self._logger.info(f"Loaded configuration from {self._config_location}: {table!r}")
        return table

    async def reload_config(self, check: bool = True) -> RoutingTable:
        """
        Re-reads the routing configuration file and installs the result.

        The active table is only replaced once the new one is fully prepared and, when
        ``check`` is set, binds to the same address.

        Args:
            check: Reject configurations that change the bind address.

        Returns:
            RoutingTable: The table that is now active.

        Raises:
            ConfigError: If the new configuration is invalid.
            RestartRequiredError: If ``check`` is set and the bind address changed.
        """
        return await self._store.reload(self._build_table, require_same_bind=check)

    def _build_table(self) -> RoutingTable:
        raw = load_raw_config(self._config_location)
        return load_routing_table(raw, self._session)

    async def handle_reload_signal(self) -> None:
        """
        Runs one reload in response to the reload trigger and logs its outcome.

        Failures never propagate: the process keeps serving the previous table.
        """
        try:
            table = await self.reload_config(check=True)
        except RestartRequiredError as e:
            self._logger.error(f"Configuration reload rejected: {e}")
        except ConfigError as e:
            self._logger.error(f"Got an error during configuration reload: {e}")
        else:
            self._logger.info(f"Successfully reloaded configuration: {table!r}")

    def install_signal_handlers(self) -> None:
        """Registers SIGHUP as the reload trigger, where the platform has it."""
        if not hasattr(signal, "SIGHUP"):
            self._logger.warning("SIGHUP is not available, configuration reloads are disabled")
            return
        asyncio.get_running_loop().add_signal_handler(signal.SIGHUP, self.schedule_reload)
        self._logger.debug("Installed SIGHUP handler for configuration reloads")

    def schedule_reload(self) -> Task:
        """
        Starts a reload in the background.

        Returns:
            Task: The task running the reload.
        """
        task = asyncio.create_task(self.handle_reload_signal())
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)
        return task

    def build_web_app(self) -> web.Application:
        """
        Creates the aiohttp application routing every request to the dispatcher.

        ``/`` is registered without a path parameter and therefore serves the
        no-path page; every other path goes through the routing table.

        Returns:
            web.Application: The application.
        """
        app = web.Application()
        app.add_routes(
            [
                web.route("*", "/", self._dispatcher.dispatch),
                web.route("*", f"/{{{PATH_PARAMETER}:.*}}", self._dispatcher.dispatch),
            ]
        )
        return app

    async def serve(self) -> None:
        """
        Binds the listening socket and serves until ``stop`` is called.

        Raises:
            StoreNotLoadedError: If ``load`` has not completed successfully.
        """
        bind = self._store.snapshot().bind

        self._runner = web.AppRunner(self.build_web_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, bind.host, bind.port)
        await site.start()
        self._logger.info(f"Listening on http://{bind.address}")

        await self._stopped.wait()

    async def stop(self) -> None:
        """
        Gracefully stops the server.

        Pending reloads are cancelled and the aiohttp runner is cleaned up. The
        client session belongs to the caller and is left open.
        """
        self._logger.info("Stopping server...")
        self._stopped.set()

        if hasattr(signal, "SIGHUP"):
            asyncio.get_running_loop().remove_signal_handler(signal.SIGHUP)

        for task in list(self._reload_tasks):
            task.cancel()
        await asyncio.gather(*self._reload_tasks, return_exceptions=True)

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        self._logger.info("Server stopped")
