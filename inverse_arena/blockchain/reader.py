"""
Read-only ledger queries.

One method is one round trip. Every method raises ``PoolNotFoundError`` or
``TransportError`` and nothing else, so callers can isolate failures per item.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional

import aiohttp
from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.exceptions import ContractLogicError, Web3Exception

from ..arena_abi import PoolStatus
from ..errors import PoolNotFoundError, TransportError, revert_name
from ..mapper import to_pool_status


logger = logging.getLogger(__name__)


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class PoolConfig:
    """Immutable pool configuration. ``entry_fee`` is fixed-point (6 decimals)."""
    host: str
    entry_fee: int
    max_players: int
    min_players: int
    round_duration: int
    start_deadline: int


@dataclass(frozen=True)
class PoolState:
    """Mutable pool state as last read. ``total_deposited`` is fixed-point."""
    status: PoolStatus
    current_round: int
    survivor_count: int
    player_count: int
    total_deposited: int
    round_deadline: int
    winner: Optional[str]


@dataclass(frozen=True)
class ParticipantRecord:
    """A participant's record in one pool."""
    is_active: bool
    has_claimed: bool
    round_eliminated: int
    last_choice: int


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


class ArenaReader:
    """Remote read client for the arena manager and its token."""

    def __init__(self, web3: AsyncWeb3, arena: AsyncContract, token: AsyncContract):
        self.web3 = web3
        self.arena = arena
        self.token = token

    async def _call(self, what: str, call: Awaitable[Any], pool_id: Optional[int] = None) -> Any:
        try:
            return await call
        except ContractLogicError as e:
            if pool_id is not None and revert_name(e) == "PoolNotFound":
                raise PoolNotFoundError(pool_id) from e
            raise TransportError(f"{what} reverted: {e}") from e
        except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            raise TransportError(f"{what} failed: {e}") from e

    async def pool_count(self) -> int:
        """Total number of pools ever created; valid ids are 1..count."""
        return int(await self._call("poolCount", self.arena.functions.poolCount().call()))

    async def pool_config(self, pool_id: int) -> PoolConfig:
        raw = await self._call(
            f"getPoolConfig({pool_id})",
            self.arena.functions.getPoolConfig(pool_id).call(),
            pool_id,
        )
        config = PoolConfig(
            host=raw[0],
            entry_fee=int(raw[1]),
            max_players=int(raw[2]),
            min_players=int(raw[3]),
            round_duration=int(raw[4]),
            start_deadline=int(raw[5]),
        )
        # Unset storage reads back as zeros
        if config.host == ZERO_ADDRESS:
            raise PoolNotFoundError(pool_id)
        return config

    async def pool_state(self, pool_id: int) -> PoolState:
        raw = await self._call(
            f"getPoolState({pool_id})",
            self.arena.functions.getPoolState(pool_id).call(),
            pool_id,
        )
        try:
            status = to_pool_status(int(raw[0]))
        except ValueError as e:
            raise TransportError(f"getPoolState({pool_id}) returned unknown status {raw[0]}") from e

        winner = raw[6]
        return PoolState(
            status=status,
            current_round=int(raw[1]),
            survivor_count=int(raw[2]),
            player_count=int(raw[3]),
            total_deposited=int(raw[4]),
            round_deadline=int(raw[5]),
            winner=None if winner == ZERO_ADDRESS else winner,
        )

    async def player_info(self, pool_id: int, player: str) -> ParticipantRecord:
        raw = await self._call(
            f"getPlayerInfo({pool_id})",
            self.arena.functions.getPlayerInfo(pool_id, Web3.to_checksum_address(player)).call(),
            pool_id,
        )
        return ParticipantRecord(
            is_active=bool(raw[0]),
            has_claimed=bool(raw[1]),
            round_eliminated=int(raw[2]),
            last_choice=int(raw[3]),
        )

    async def creator_stake(self, creator: str) -> int:
        return int(await self._call(
            "creatorStake",
            self.arena.functions.creatorStake(Web3.to_checksum_address(creator)).call(),
        ))

    async def creator_active_pools(self, creator: str) -> int:
        return int(await self._call(
            "creatorActivePools",
            self.arena.functions.creatorActivePools(Web3.to_checksum_address(creator)).call(),
        ))

    async def allowance(self, owner: str, spender: str) -> int:
        return int(await self._call(
            "allowance",
            self.token.functions.allowance(
                Web3.to_checksum_address(owner),
                Web3.to_checksum_address(spender),
            ).call(),
        ))
