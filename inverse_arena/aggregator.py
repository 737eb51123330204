"""
State aggregation: fans out ledger reads and folds them into display views.

Structural reads (the pool count, creator status) raise ``ArenaReadError`` to
the caller. Per-pool reads are isolated: a pool whose reads fail is left out
of the result and logged, it never fails the batch.

Views are frozen and collections are tuples: cached results are shared
between callers.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from .arena_abi import PoolStatus
from .blockchain.reader import ArenaReader, ParticipantRecord, PoolConfig, PoolState, same_address
from .cache import QueryCache
from .errors import ArenaReadError, PoolNotFoundError
from .mapper import (
    display_status,
    format_pnl,
    format_token,
    from_fixed,
    network_load,
    profile_status,
    round_speed_label,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LISTING_LIMIT = 5

# Only ids 1..50 are scanned for a user's pools; older pools are missed on
# larger ledgers.
MAX_POOLS_FOR_USER = 50

# Must match MIN_CREATOR_STAKE in the contract
MIN_CREATOR_STAKE_USDC = 4

LIVE_STATUSES = (PoolStatus.ACTIVE, PoolStatus.RESOLVING)


@dataclass(frozen=True)
class ArenaState:
    """Everything known about one pool, from the point of view of ``viewer``."""
    pool_id: int
    config: PoolConfig
    state: PoolState
    record: Optional[ParticipantRecord] = None
    viewer: Optional[str] = None

    @property
    def survivors_count(self) -> int:
        return self.state.survivor_count

    @property
    def player_count(self) -> int:
        return self.state.player_count

    @property
    def max_capacity(self) -> int:
        return self.config.max_players

    @property
    def entry_fee_usdc(self) -> float:
        return from_fixed(self.config.entry_fee)

    @property
    def potential_payout(self) -> float:
        return from_fixed(self.state.total_deposited)

    @property
    def is_user_in(self) -> bool:
        return bool(self.record and self.record.is_active)

    @property
    def current_stake(self) -> float:
        return self.entry_fee_usdc if self.is_user_in else 0.0

    @property
    def has_won(self) -> bool:
        return self.state.status is PoolStatus.FINISHED and same_address(self.state.winner, self.viewer)


@dataclass(frozen=True)
class ArenaView:
    id: str
    number: str
    players_joined: int
    max_players: int
    round_speed: str
    stake: str
    status: str
    is_featured: bool


@dataclass(frozen=True)
class GlobalStatsView:
    global_pool_total: float
    live_survivors: int
    total_pools: int
    network_load: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProfileArenaRow:
    id: str
    pool_id: int
    name: str
    stake: str
    participants: str
    status: str


@dataclass(frozen=True)
class ProfileHistoryRow:
    pool_id: int
    arena: str
    stake: str
    rounds: str
    result: str  # "SURVIVED" or "ELIMINATED"
    pnl: str
    success: bool


@dataclass(frozen=True)
class ProfileView:
    arenas: Tuple[ProfileArenaRow, ...] = ()
    history: Tuple[ProfileHistoryRow, ...] = ()


@dataclass(frozen=True)
class CreatorStatus:
    stake: float
    active_pools: int

    @property
    def has_enough_stake(self) -> bool:
        return self.stake >= MIN_CREATOR_STAKE_USDC


async def gather_settled(*aws: Awaitable[Any]) -> List[Any]:
    """Await every awaitable, then raise the first failure if there was one."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def map_arena(state: ArenaState, is_featured: bool) -> ArenaView:
    """Map joined pool state into the listing card shape."""
    return ArenaView(
        id=str(state.pool_id),
        number=f"#{state.pool_id}",
        players_joined=state.player_count,
        max_players=state.max_capacity,
        round_speed=round_speed_label(state.config.round_duration),
        stake=format_token(state.entry_fee_usdc),
        status=display_status(state.state.status),
        is_featured=is_featured,
    )


def map_profile_row(state: ArenaState) -> ProfileArenaRow:
    return ProfileArenaRow(
        id=str(state.pool_id),
        pool_id=state.pool_id,
        name=f"Arena #{state.pool_id}",
        stake=format_token(state.entry_fee_usdc),
        participants=f"{state.player_count}/{state.max_capacity}",
        status=profile_status(state.state.status),
    )


def map_history_row(state: ArenaState) -> ProfileHistoryRow:
    success = state.has_won
    pnl = state.potential_payout if success else -state.entry_fee_usdc
    return ProfileHistoryRow(
        pool_id=state.pool_id,
        arena=f"#{state.pool_id}",
        stake=format_token(state.entry_fee_usdc),
        rounds=f"{state.state.current_round} Rounds",
        result="SURVIVED" if success else "ELIMINATED",
        pnl=format_pnl(pnl),
        success=success,
    )


class ArenaAggregator:
    """Builds the read-side views from an ``ArenaReader``."""

    def __init__(
        self,
        reader: ArenaReader,
        cache: Optional[QueryCache] = None,
        listing_limit: int = DEFAULT_LISTING_LIMIT,
    ):
        self.reader = reader
        self.cache = cache
        self.listing_limit = listing_limit

    async def _cached(self, key: tuple, fetcher: Callable[[], Awaitable[T]]) -> T:
        if self.cache is None:
            return await fetcher()
        return await self.cache.get_or_fetch(key, fetcher)

    async def _fan_out(
        self,
        what: str,
        pool_ids: Iterable[int],
        fetch: Callable[[int], Awaitable[T]],
    ) -> Dict[int, T]:
        """Run ``fetch`` for every id concurrently; ids whose reads fail are dropped."""

        async def _one(pool_id: int):
            try:
                return pool_id, await fetch(pool_id)
            except PoolNotFoundError:
                logger.debug(f"Skipping {what} for pool {pool_id}: not initialised")
            except ArenaReadError as e:
                logger.warning(f"Skipping {what} for pool {pool_id}: {e}")
            return pool_id, None

        results = await gather_settled(*(_one(pool_id) for pool_id in pool_ids))
        return {pool_id: value for pool_id, value in results if value is not None}

    async def _arena_state(self, pool_id: int, viewer: Optional[str]) -> ArenaState:
        reads = [self.reader.pool_config(pool_id), self.reader.pool_state(pool_id)]
        if viewer:
            reads.append(self.reader.player_info(pool_id, viewer))
        results = await gather_settled(*reads)
        return ArenaState(
            pool_id=pool_id,
            config=results[0],
            state=results[1],
            record=results[2] if viewer else None,
            viewer=viewer,
        )

    async def fetch_arena_state(self, pool_id: int, viewer: Optional[str] = None) -> ArenaState:
        """Joined config, state and viewer record for one pool. Raises on failure."""
        key = ("arena_state", pool_id, viewer.lower() if viewer else None)
        return await self._cached(key, lambda: self._arena_state(pool_id, viewer))

    async def list_recent_arenas(self, limit: Optional[int] = None) -> Tuple[ArenaView, ...]:
        """The most recent ``limit`` pools, newest first."""
        limit = self.listing_limit if limit is None else limit
        return await self._cached(("arenas", limit), lambda: self._list_recent_arenas(limit))

    async def _list_recent_arenas(self, limit: int) -> Tuple[ArenaView, ...]:
        count = await self.reader.pool_count()
        use_count = min(count, max(limit, 0))
        if use_count == 0:
            return ()

        start = count - use_count + 1
        pool_ids = list(range(start, count + 1))
        states = await self._fan_out("arena", pool_ids, lambda pool_id: self._arena_state(pool_id, None))

        # The oldest id of the window carries the featured flag
        arenas = tuple(
            map_arena(states[pool_id], pool_id == start) for pool_id in reversed(pool_ids) if pool_id in states
        )
        logger.debug(f"Listed {len(arenas)} of {use_count} recent arenas (pool count {count})")
        return arenas

    async def fetch_global_stats(self) -> GlobalStatsView:
        """Network-wide rollup from a full scan of every pool's state."""
        return await self._cached(("global_stats",), self._fetch_global_stats)

    async def _fetch_global_stats(self) -> GlobalStatsView:
        count = await self.reader.pool_count()
        if not count:
            return GlobalStatsView(global_pool_total=0.0, live_survivors=0, total_pools=0, network_load="low")

        states = await self._fan_out("pool state", range(1, count + 1), self.reader.pool_state)

        total_deposited = sum(state.total_deposited for state in states.values())
        live_survivors = sum(state.survivor_count for state in states.values() if state.status in LIVE_STATUSES)

        return GlobalStatsView(
            global_pool_total=from_fixed(total_deposited),
            live_survivors=live_survivors,
            total_pools=count,
            network_load=network_load(count),
        )

    async def fetch_pools_for_user(self, address: str) -> Tuple[int, ...]:
        """Ids among the first ``MAX_POOLS_FOR_USER`` pools that ``address`` hosts or has played in."""
        return await self._cached(("pools_for_user", address.lower()), lambda: self._fetch_pools_for_user(address))

    async def _fetch_pools_for_user(self, address: str) -> Tuple[int, ...]:
        count = await self.reader.pool_count()
        if not count:
            return ()

        pool_ids = list(range(1, min(count, MAX_POOLS_FOR_USER) + 1))

        async def _is_relevant(pool_id: int) -> bool:
            config, record = await gather_settled(
                self.reader.pool_config(pool_id),
                self.reader.player_info(pool_id, address),
            )
            is_host = same_address(config.host, address)
            has_participated = record.is_active or record.round_eliminated > 0
            return is_host or has_participated

        relevant = await self._fan_out("user scan", pool_ids, _is_relevant)
        return tuple(pool_id for pool_id in pool_ids if relevant.get(pool_id))

    async def fetch_profile_arenas(self, address: str) -> ProfileView:
        """The user's pools, split into open arenas and finished history (newest first)."""
        return await self._cached(("profile", address.lower()), lambda: self._fetch_profile_arenas(address))

    async def _fetch_profile_arenas(self, address: str) -> ProfileView:
        pool_ids = await self._fetch_pools_for_user(address)
        if not pool_ids:
            return ProfileView()

        states = await self._fan_out("profile arena", pool_ids, lambda pool_id: self._arena_state(pool_id, address))

        arenas = []
        history = []
        for pool_id in pool_ids:
            state = states.get(pool_id)
            if state is None:
                continue
            if state.state.status is PoolStatus.FINISHED:
                history.append(map_history_row(state))
            else:
                arenas.append(map_profile_row(state))

        history.sort(key=lambda row: row.pool_id, reverse=True)
        return ProfileView(arenas=tuple(arenas), history=tuple(history))

    async def fetch_creator_status(self, address: str) -> CreatorStatus:
        """Creator stake (display units) and number of active pools hosted."""
        return await self._cached(("creator_status", address.lower()), lambda: self._fetch_creator_status(address))

    async def _fetch_creator_status(self, address: str) -> CreatorStatus:
        stake, active_pools = await gather_settled(
            self.reader.creator_stake(address),
            self.reader.creator_active_pools(address),
        )
        return CreatorStatus(stake=from_fixed(stake), active_pools=int(active_pools))
