"""
Client that wires the ledger connection, reads and writes together.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from web3 import AsyncWeb3

from .actions import ArenaActions
from .aggregator import ArenaAggregator
from .blockchain import (
    ArenaReader,
    LocalWallet,
    Wallet,
    get_contract,
    get_erc20_contract,
    get_web3_connection,
)
from .cache import QueryCache
from .config import ArenaConfig
from .polling import LatestValue, Poller


logger = logging.getLogger(__name__)


class InverseArenaClient:
    """Entry point for presentation code.

    Use as an async context manager::

        async with InverseArenaClient(config) as client:
            arenas = await client.aggregator.list_recent_arenas()
    """

    def __init__(self, config: ArenaConfig, wallet: Optional[Wallet] = None):
        self.config = config
        self.wallet: Optional[Wallet] = wallet
        if self.wallet is None and config.private_key:
            self.wallet = LocalWallet(config.private_key)

        self.cache = QueryCache(stale_seconds=config.cache_stale_seconds)
        self.web3: Optional[AsyncWeb3] = None
        self.reader: Optional[ArenaReader] = None
        self.aggregator: Optional[ArenaAggregator] = None
        self._actions: Optional[ArenaActions] = None

    async def __aenter__(self) -> "InverseArenaClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def connect(self) -> None:
        self.web3 = await get_web3_connection(self.config.rpc_url, self.config.rpc_timeout_seconds)
        arena = get_contract(self.web3, self.config.arena_manager_address)
        token = get_erc20_contract(self.web3, self.config.token_address)

        self.reader = ArenaReader(self.web3, arena, token)
        self.aggregator = ArenaAggregator(self.reader, self.cache, self.config.listing_limit)
        if self.wallet is not None:
            self._actions = ArenaActions(self.web3, self.reader, arena, token, self.wallet, self.cache)
            logger.info(f"Write operations enabled for {self.wallet.address}")
        else:
            logger.info("No wallet configured, client is read-only")

    async def close(self) -> None:
        if self.web3 is not None:
            await self.web3.provider.disconnect()
            self.web3 = None

    @property
    def actions(self) -> ArenaActions:
        if self._actions is None:
            raise RuntimeError("No wallet configured; set ARENA_PRIVATE_KEY to enable writes")
        return self._actions

    def poll(
        self,
        fetcher: Callable[[], Awaitable[Any]],
        on_update: Optional[Callable[[LatestValue], None]] = None,
        interval_seconds: Optional[float] = None,
    ) -> Poller:
        """A poller for ``fetcher`` at the configured interval; call ``start()`` on it."""
        return Poller(
            fetcher,
            interval_seconds or self.config.poll_interval_seconds,
            on_update,
        )
