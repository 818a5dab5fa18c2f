"""
Holder of the active routing table.

Requests read the current table without locking: taking a reference is atomic, and
a reference once taken stays valid for the whole request because tables are never
mutated after installation. Writers are serialized by a lock so that at most one
reload runs at a time.
"""

import asyncio
import logging
from typing import Callable, Optional

from shrtlnk.domain import RoutingTable
from shrtlnk.errors import RestartRequiredError, StoreNotLoadedError

# Module logger
logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Swap-on-reload storage for exactly one routing table.

    The store starts empty. The first install always succeeds; later installs made
    with ``require_same_bind`` are rejected when the bind address would change.
    """

    def __init__(self) -> None:
        self._table: Optional[RoutingTable] = None
        self._write_lock: asyncio.Lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        """Whether a routing table has been installed."""
        return self._table is not None

    def snapshot(self) -> RoutingTable:
        """
        Return the routing table that is active right now.

        Callers should take one snapshot per request and use it to completion, so
        that a concurrent reload cannot change the table underneath them.

        Returns:
            RoutingTable: The active table.

        Raises:
            StoreNotLoadedError: If no table has been installed yet.
        """
        table = self._table
        if table is None:
            raise StoreNotLoadedError("no routing table has been loaded yet")
        return table

    async def swap(self, table: RoutingTable, require_same_bind: bool = True) -> None:
        """
        Install a prepared routing table, replacing the current one.

        Args:
            table: A fully prepared table.
            require_same_bind: Reject the table if it binds to a different address
                than the active one. Ignored while the store is empty.

        Raises:
            RestartRequiredError: If the bind address would change.
        """
        async with self._write_lock:
            self._install(table, require_same_bind)

    async def reload(
        self, build: Callable[[], RoutingTable], require_same_bind: bool = True
    ) -> RoutingTable:
        """
        Build a new table and install it, as one serialized write.

        ``build`` runs in a worker thread while the write lock is held: its file
        reads do not stall requests, and two reloads never interleave. If it
        raises, the active table is left untouched.

        Args:
            build: Produces a fully prepared routing table or raises ConfigError.
            require_same_bind: Reject the table if it binds to a different address.

        Returns:
            RoutingTable: The table that is now active.

        Raises:
            ConfigError: If ``build`` fails.
            RestartRequiredError: If the bind address would change.
        """
        async with self._write_lock:
            table = await asyncio.to_thread(build)
            self._install(table, require_same_bind)
            return table

    def _install(self, table: RoutingTable, require_same_bind: bool) -> None:
        current = self._table
        if require_same_bind and current is not None and current.bind != table.bind:
            raise RestartRequiredError(current.bind.address, table.bind.address)
        self._table = table
        logger.debug(f"Installed {table!r}")
