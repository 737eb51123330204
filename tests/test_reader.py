import aiohttp
import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from inverse_arena.arena_abi import PoolStatus
from inverse_arena.blockchain.reader import ZERO_ADDRESS, ArenaReader, same_address
from inverse_arena.errors import PoolNotFoundError, TransportError

from fakes import OTHER, USER


class FakeCall:
    def __init__(self, result):
        self.result = result

    async def call(self):
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class FakeReadFunctions:
    def __init__(self, results):
        self.results = results
        self.args = {}

    def __getattr__(self, name):
        def _build(*args):
            self.args[name] = args
            return FakeCall(self.results[name])
        return _build


class FakeReadContract:
    def __init__(self, **results):
        self.functions = FakeReadFunctions(results)


def _reader(**results):
    contract = FakeReadContract(**results)
    return ArenaReader(None, contract, contract)


def _pool_not_found() -> ContractLogicError:
    selector = "0x" + bytes(Web3.keccak(text="PoolNotFound(uint256)")[:4]).hex()
    return ContractLogicError("execution reverted", data=selector + "00" * 32)


class TestPoolReads:
    @pytest.mark.asyncio
    async def test_pool_count(self):
        assert await _reader(poolCount=12).pool_count() == 12

    @pytest.mark.asyncio
    async def test_pool_config(self):
        reader = _reader(getPoolConfig=(OTHER, 5_000_000, 8, 2, 30, 1_700_000_000))

        config = await reader.pool_config(3)

        assert config.host == OTHER
        assert config.entry_fee == 5_000_000
        assert config.max_players == 8
        assert config.min_players == 2
        assert config.round_duration == 30
        assert config.start_deadline == 1_700_000_000

    @pytest.mark.asyncio
    async def test_zero_host_means_missing_pool(self):
        reader = _reader(getPoolConfig=(ZERO_ADDRESS, 0, 0, 0, 0, 0))

        with pytest.raises(PoolNotFoundError) as exc_info:
            await reader.pool_config(9)

        assert exc_info.value.pool_id == 9

    @pytest.mark.asyncio
    async def test_pool_not_found_revert(self):
        with pytest.raises(PoolNotFoundError):
            await _reader(getPoolState=_pool_not_found()).pool_state(9)

    @pytest.mark.asyncio
    async def test_pool_state(self):
        reader = _reader(getPoolState=(3, 4, 1, 6, 15_000_000, 0, USER))

        state = await reader.pool_state(3)

        assert state.status is PoolStatus.FINISHED
        assert state.current_round == 4
        assert state.survivor_count == 1
        assert state.player_count == 6
        assert state.total_deposited == 15_000_000
        assert state.winner == USER

    @pytest.mark.asyncio
    async def test_no_winner_yet(self):
        state = await _reader(getPoolState=(1, 1, 4, 4, 4_000_000, 1_700_000_060, ZERO_ADDRESS)).pool_state(2)

        assert state.winner is None

    @pytest.mark.asyncio
    async def test_unknown_status_is_transport_error(self):
        with pytest.raises(TransportError):
            await _reader(getPoolState=(9, 0, 0, 0, 0, 0, ZERO_ADDRESS)).pool_state(2)

    @pytest.mark.asyncio
    async def test_player_info(self):
        reader = _reader(getPlayerInfo=(False, False, 2, 1))

        record = await reader.player_info(5, USER)

        assert record.is_active is False
        assert record.round_eliminated == 2
        assert record.last_choice == 1
        assert reader.arena.functions.args["getPlayerInfo"] == (5, Web3.to_checksum_address(USER))


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("refused"),
        TimeoutError(),
        ValueError("could not decode"),
    ])
    async def test_transport_failures(self, error):
        with pytest.raises(TransportError):
            await _reader(poolCount=error).pool_count()

    @pytest.mark.asyncio
    async def test_other_revert_is_transport_error(self):
        with pytest.raises(TransportError):
            await _reader(getPoolConfig=ContractLogicError("execution reverted")).pool_config(1)

    @pytest.mark.asyncio
    async def test_pool_not_found_without_pool_id(self):
        with pytest.raises(TransportError):
            await _reader(creatorStake=_pool_not_found()).creator_stake(USER)


class TestAccountReads:
    @pytest.mark.asyncio
    async def test_creator_reads(self):
        reader = _reader(creatorStake=4_000_000, creatorActivePools=2)

        assert await reader.creator_stake(USER) == 4_000_000
        assert await reader.creator_active_pools(USER) == 2

    @pytest.mark.asyncio
    async def test_allowance(self):
        reader = _reader(allowance=10)

        assert await reader.allowance(USER, OTHER) == 10
        assert reader.token.functions.args["allowance"] == (
            Web3.to_checksum_address(USER),
            Web3.to_checksum_address(OTHER),
        )


def test_same_address():
    assert same_address("0xABCdef0000000000000000000000000000000000", "0xabcdef0000000000000000000000000000000000")
    assert not same_address(None, USER)
    assert not same_address(USER, OTHER)
