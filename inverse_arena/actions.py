"""
High-level write operations against the arena manager.

Every operation has the same shape: optional allowance approval, fee
estimate, one contract call, wait for inclusion, decode what the receipt
carries. Operations never raise; they return a ``TxOutcome`` whose error, if
any, is already classified. Nothing is retried and nothing is queued: callers
that do not want two writes interleaved must wait for the first outcome.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

from web3 import AsyncWeb3
from web3.contract import AsyncContract
from web3.logs import DISCARD

from .blockchain.allowance import ensure_allowance
from .blockchain.fees import estimate_fees
from .blockchain.reader import ArenaReader
from .blockchain.transactions import StateCallback, TxState, build_sign_send_transaction
from .blockchain.wallet import Wallet
from .cache import QueryCache
from .errors import ClassifiedError, classify_error
from .mapper import choice_value, round_speed_seconds, to_fixed


logger = logging.getLogger(__name__)


MIN_PLAYERS = 2  # contract minimum
START_DEADLINE_SECONDS = 24 * 60 * 60


@dataclass
class TxOutcome:
    """Terminal result of one write operation."""
    action: str
    state: TxState
    tx_hash: Optional[str] = None
    pool_id: Optional[int] = None
    approved: bool = False
    error: Optional[ClassifiedError] = None

    @property
    def ok(self) -> bool:
        return self.state is TxState.SUCCESS


def decode_pool_created(arena: AsyncContract, receipt: Dict[str, Any]) -> Optional[int]:
    """Pool id from the PoolCreated event in ``receipt``, if present."""
    events = arena.events.PoolCreated().process_receipt(receipt, errors=DISCARD)
    if not events:
        return None
    return int(events[0]["args"]["poolId"])


class ArenaActions:
    """Write operations for one wallet."""

    def __init__(
        self,
        web3: AsyncWeb3,
        reader: ArenaReader,
        arena: AsyncContract,
        token: AsyncContract,
        wallet: Wallet,
        cache: Optional[QueryCache] = None,
    ):
        self.web3 = web3
        self.reader = reader
        self.arena = arena
        self.token = token
        self.wallet = wallet
        self.cache = cache

    @property
    def _actor(self) -> str:
        return self.wallet.address.lower()

    def _pool_keys(self, pool_id: int) -> Tuple[tuple, ...]:
        return (
            ("arenas",),
            ("global_stats",),
            ("arena_state", pool_id),
            ("pools_for_user", self._actor),
            ("profile", self._actor),
        )

    async def _execute(
        self,
        action: str,
        build: Callable[[], Any],
        *,
        approve: Optional[Callable[[], Awaitable[int]]] = None,
        invalidate: Iterable[tuple] = (),
        decode: Optional[Callable[[Dict[str, Any]], Optional[int]]] = None,
        on_state: Optional[StateCallback] = None,
    ) -> TxOutcome:
        def _notify(state: TxState) -> None:
            if on_state:
                on_state(state)

        outcome = TxOutcome(action=action, state=TxState.IDLE)
        try:
            if approve is not None:
                amount = await approve()
                outcome.approved = await ensure_allowance(
                    self.web3,
                    self.reader,
                    self.token,
                    self.wallet,
                    self.arena.address,
                    amount,
                    on_state=on_state,
                )

            fee_overrides = await estimate_fees(self.web3)
            tx_hash, receipt = await build_sign_send_transaction(
                self.web3,
                build(),
                self.wallet,
                fee_overrides,
                on_state=on_state,
            )
            outcome.tx_hash = tx_hash
            if decode is not None:
                outcome.pool_id = decode(receipt)

        except Exception as e:
            outcome.state = TxState.ERROR
            outcome.error = classify_error(e)
            logger.error(f"\033[31m❌ {action} failed [{outcome.error.category.value}]: {outcome.error.raw}\033[0m")
            _notify(TxState.ERROR)
            return outcome

        if self.cache is not None:
            for prefix in invalidate:
                self.cache.invalidate(*prefix)

        outcome.state = TxState.SUCCESS
        logger.info(f"\033[92m✅ {action} succeeded: {outcome.tx_hash}\033[0m")
        _notify(TxState.SUCCESS)
        return outcome

    async def create_pool(
        self,
        stake_amount: float,
        round_speed: str,
        arena_capacity: int,
        *,
        on_state: Optional[StateCallback] = None,
    ) -> TxOutcome:
        """Create a pool hosted by this wallet; the outcome carries the new pool id.

        Requires enough creator stake on the ledger; createPool itself moves
        no tokens, so no approval is involved.
        """
        entry_fee = to_fixed(stake_amount)
        round_duration = round_speed_seconds(round_speed)
        start_deadline = int(time.time()) + START_DEADLINE_SECONDS

        outcome = await self._execute(
            "createPool",
            lambda: self.arena.functions.createPool(
                entry_fee, arena_capacity, MIN_PLAYERS, round_duration, start_deadline
            ),
            invalidate=(
                ("arenas",),
                ("global_stats",),
                ("creator_status", self._actor),
                ("pools_for_user", self._actor),
                ("profile", self._actor),
            ),
            decode=lambda receipt: decode_pool_created(self.arena, receipt),
            on_state=on_state,
        )
        if outcome.ok and outcome.pool_id is None:
            logger.warning(f"createPool {outcome.tx_hash} included without a PoolCreated event")
        return outcome

    async def join_pool(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        """Join a pool, approving exactly its entry fee first if needed."""

        async def _entry_fee() -> int:
            # Authoritative fee from the ledger, never a caller-supplied hint
            config = await self.reader.pool_config(pool_id)
            return config.entry_fee

        return await self._execute(
            "joinPool",
            lambda: self.arena.functions.joinPool(pool_id),
            approve=_entry_fee,
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def submit_choice(self, pool_id: int, choice: str, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        """Submit "Heads" or "Tails" for the pool's current round."""
        return await self._execute(
            "submitChoice",
            lambda: self.arena.functions.submitChoice(pool_id, int(choice_value(choice))),
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def resolve_round(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        return await self._execute(
            "resolveRound",
            lambda: self.arena.functions.resolveRound(pool_id),
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def start_game(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        return await self._execute(
            "startGame",
            lambda: self.arena.functions.startGame(pool_id),
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def cancel_pool(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        return await self._execute(
            "cancelPool",
            lambda: self.arena.functions.cancelPool(pool_id),
            invalidate=self._pool_keys(pool_id) + (("creator_status", self._actor),),
            on_state=on_state,
        )

    async def claim_winnings(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        return await self._execute(
            "claimWinnings",
            lambda: self.arena.functions.claimWinnings(pool_id),
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def claim_refund(self, pool_id: int, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        return await self._execute(
            "claimRefund",
            lambda: self.arena.functions.claimRefund(pool_id),
            invalidate=self._pool_keys(pool_id),
            on_state=on_state,
        )

    async def deposit_creator_stake(self, amount: float, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        """Deposit creator stake (display units), approving the token first if needed."""
        amount_fixed = to_fixed(amount)

        async def _amount() -> int:
            return amount_fixed

        return await self._execute(
            "depositCreatorStake",
            lambda: self.arena.functions.depositCreatorStake(amount_fixed),
            approve=_amount,
            invalidate=(("creator_status", self._actor),),
            on_state=on_state,
        )

    async def withdraw_creator_stake(self, *, on_state: Optional[StateCallback] = None) -> TxOutcome:
        """Withdraw creator stake.

        With active pools the ledger slashes part of the stake; the amount is
        decided on-chain and not computed here.
        """
        return await self._execute(
            "withdrawCreatorStake",
            lambda: self.arena.functions.withdrawCreatorStake(),
            invalidate=(("creator_status", self._actor),),
            on_state=on_state,
        )
