import pytest
from web3 import Web3

from inverse_arena.actions import MIN_PLAYERS, ArenaActions
from inverse_arena.blockchain.transactions import TxState
from inverse_arena.cache import QueryCache
from inverse_arena.errors import ErrorCategory, TransactionRevertedError, UserRejectedError

from fakes import ARENA_ADDRESS, USER, FakeReader, SendRecorder, pool_config


async def _no_fees(web3):
    return None


@pytest.fixture()
def send(monkeypatch):
    """Route every transaction, approvals included, through one recorder."""
    recorder = SendRecorder()
    monkeypatch.setattr("inverse_arena.actions.build_sign_send_transaction", recorder)
    monkeypatch.setattr("inverse_arena.blockchain.allowance.build_sign_send_transaction", recorder)
    monkeypatch.setattr("inverse_arena.actions.estimate_fees", _no_fees)
    monkeypatch.setattr("inverse_arena.blockchain.allowance.estimate_fees", _no_fees)
    return recorder


def _actions(reader, arena_contract, token_contract, wallet, cache=None):
    return ArenaActions(None, reader, arena_contract, token_contract, wallet, cache)


class TestJoinPool:
    @pytest.mark.asyncio
    async def test_approves_entry_fee_then_joins(self, send, arena_contract, token_contract, wallet):
        reader = FakeReader(7, configs={7: pool_config(entry_fee=5_000_000)}, allowance=0)

        outcome = await _actions(reader, arena_contract, token_contract, wallet).join_pool(7)

        assert outcome.ok
        assert outcome.approved is True
        assert send.names == ["approve", "joinPool"]
        assert send.calls[0][0] == ("approve", (Web3.to_checksum_address(ARENA_ADDRESS), 5_000_000))
        assert send.calls[1][0] == ("joinPool", (7,))

    @pytest.mark.asyncio
    async def test_skips_approval_when_allowance_covers_fee(self, send, arena_contract, token_contract, wallet):
        reader = FakeReader(7, configs={7: pool_config(entry_fee=5_000_000)}, allowance=5_000_000)

        outcome = await _actions(reader, arena_contract, token_contract, wallet).join_pool(7)

        assert outcome.ok
        assert outcome.approved is False
        assert send.names == ["joinPool"]

    @pytest.mark.asyncio
    async def test_failed_approval_aborts_join(self, send, arena_contract, token_contract, wallet):
        send.error = TransactionRevertedError("0xdead")
        send.fail_on = "approve"
        reader = FakeReader(7, allowance=0)

        outcome = await _actions(reader, arena_contract, token_contract, wallet).join_pool(7)

        assert not outcome.ok
        assert outcome.state is TxState.ERROR
        assert send.names == ["approve"]
        assert outcome.error.category is ErrorCategory.TRANSPORT
        assert outcome.error.message == "Transaction failed: 0xdead"

    @pytest.mark.asyncio
    async def test_unknown_pool_fails_before_any_write(self, send, arena_contract, token_contract, wallet):
        outcome = await _actions(FakeReader(3), arena_contract, token_contract, wallet).join_pool(9)

        assert not outcome.ok
        assert send.calls == []

    @pytest.mark.asyncio
    async def test_invalidates_pool_and_user_queries(self, send, arena_contract, token_contract, wallet):
        cache = QueryCache(stale_seconds=60)
        for key in [("arenas", 5), ("global_stats",), ("arena_state", 7, None), ("profile", USER),
                    ("pools_for_user", USER), ("creator_status", USER), ("arena_state", 8, None)]:
            cache.put(key, object())
        reader = FakeReader(8, allowance=10 ** 12)

        await _actions(reader, arena_contract, token_contract, wallet, cache).join_pool(7)

        assert ("creator_status", USER) in cache
        assert ("arena_state", 8, None) in cache
        assert len(cache) == 2


class TestCreatePool:
    @pytest.mark.asyncio
    async def test_decodes_new_pool_id(self, send, arena_contract, token_contract, wallet):
        send.receipt = {"status": 1, "events": [{"args": {"poolId": 12}}]}

        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).create_pool(5, "30S", 8)

        assert outcome.ok
        assert outcome.pool_id == 12
        name, args = send.calls[0][0]
        assert name == "createPool"
        assert args[:4] == (5_000_000, 8, MIN_PLAYERS, 30)

    @pytest.mark.asyncio
    async def test_missing_event_leaves_pool_id_empty(self, send, arena_contract, token_contract, wallet):
        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).create_pool(5, "5M", 4)

        assert outcome.ok
        assert outcome.pool_id is None

    @pytest.mark.asyncio
    async def test_does_not_approve(self, send, arena_contract, token_contract, wallet):
        reader = FakeReader()

        await _actions(reader, arena_contract, token_contract, wallet).create_pool(5, "1M", 4)

        assert send.names == ["createPool"]
        assert reader.count_calls("allowance") == 0

    @pytest.mark.asyncio
    async def test_insufficient_creator_stake(self, send, arena_contract, token_contract, wallet):
        send.error = Exception("execution reverted: InsufficientCreatorStake()")

        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).create_pool(5, "1M", 4)

        assert outcome.error.category is ErrorCategory.INSUFFICIENT_CREATOR_STAKE


class TestOtherActions:
    @pytest.mark.asyncio
    async def test_submit_choice(self, send, arena_contract, token_contract, wallet):
        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).submit_choice(4, "Tails")

        assert outcome.ok
        assert send.calls[0][0] == ("submitChoice", (4, 2))

    @pytest.mark.asyncio
    async def test_unknown_choice_is_not_sent(self, send, arena_contract, token_contract, wallet):
        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).submit_choice(4, "Edge")

        assert not outcome.ok
        assert send.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, function", [
        ("resolve_round", "resolveRound"),
        ("start_game", "startGame"),
        ("cancel_pool", "cancelPool"),
        ("claim_winnings", "claimWinnings"),
        ("claim_refund", "claimRefund"),
    ])
    async def test_single_call_actions(self, send, arena_contract, token_contract, wallet, method, function):
        actions = _actions(FakeReader(), arena_contract, token_contract, wallet)

        outcome = await getattr(actions, method)(3)

        assert outcome.ok
        assert outcome.action == function
        assert send.calls[0][0] == (function, (3,))

    @pytest.mark.asyncio
    async def test_deposit_creator_stake_approves_amount(self, send, arena_contract, token_contract, wallet):
        reader = FakeReader(allowance=1_000_000)

        outcome = await _actions(reader, arena_contract, token_contract, wallet).deposit_creator_stake(4)

        assert outcome.ok
        assert send.names == ["approve", "depositCreatorStake"]
        assert send.calls[0][0][1][1] == 4_000_000
        assert send.calls[1][0] == ("depositCreatorStake", (4_000_000,))

    @pytest.mark.asyncio
    async def test_withdraw_creator_stake(self, send, arena_contract, token_contract, wallet):
        cache = QueryCache(stale_seconds=60)
        cache.put(("creator_status", USER), object())

        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet, cache).withdraw_creator_stake()

        assert outcome.ok
        assert send.calls[0][0] == ("withdrawCreatorStake", ())
        assert ("creator_status", USER) not in cache


class TestOutcomeStates:
    @pytest.mark.asyncio
    async def test_success_sequence(self, send, arena_contract, token_contract, wallet):
        states = []

        await _actions(FakeReader(), arena_contract, token_contract, wallet).claim_winnings(1, on_state=states.append)

        assert states == [TxState.SIGNING, TxState.SUBMITTING, TxState.SUCCESS]

    @pytest.mark.asyncio
    async def test_user_rejection(self, send, arena_contract, token_contract, wallet):
        send.error = UserRejectedError()
        states = []

        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet).claim_refund(
            1, on_state=states.append
        )

        assert outcome.state is TxState.ERROR
        assert outcome.error.is_user_rejection
        assert states == [TxState.SIGNING, TxState.ERROR]
        assert outcome.tx_hash is None

    @pytest.mark.asyncio
    async def test_failure_keeps_cache(self, send, arena_contract, token_contract, wallet):
        send.error = Exception("execution reverted: NotWinner()")
        cache = QueryCache(stale_seconds=60)
        cache.put(("arenas", 5), object())

        outcome = await _actions(FakeReader(), arena_contract, token_contract, wallet, cache).claim_winnings(1)

        assert outcome.error.category is ErrorCategory.NOT_WINNER
        assert ("arenas", 5) in cache
