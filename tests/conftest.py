import pytest

from fakes import ARENA_ADDRESS, TOKEN_ADDRESS, FakeContract, FakeWallet


@pytest.fixture()
def arena_contract() -> FakeContract:
    return FakeContract(ARENA_ADDRESS)


@pytest.fixture()
def token_contract() -> FakeContract:
    return FakeContract(TOKEN_ADDRESS)


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet()
