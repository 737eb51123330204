import pytest

from inverse_arena.arena_abi import Choice, PoolStatus
from inverse_arena.mapper import (
    DISPLAY_STATUS,
    PROFILE_STATUS,
    choice_value,
    display_status,
    format_pnl,
    format_token,
    from_fixed,
    network_load,
    profile_status,
    round_speed_label,
    round_speed_seconds,
    to_fixed,
    to_pool_status,
)


def test_every_status_has_display_and_profile_text():
    assert set(DISPLAY_STATUS) == set(PoolStatus)
    assert set(PROFILE_STATUS) == set(PoolStatus)


@pytest.mark.parametrize("status, display, profile", [
    (PoolStatus.PENDING, "PENDING", "PENDING"),
    (PoolStatus.ACTIVE, "ACTIVE", "LIVE"),
    (PoolStatus.RESOLVING, "ACTIVE", "SETTLING"),
    (PoolStatus.FINISHED, "CLOSED", "COMPLETED"),
    (PoolStatus.CANCELLED, "ACTIVE", "CANCELLED"),
])
def test_status_text(status, display, profile):
    assert display_status(status) == display
    assert profile_status(status) == profile


def test_unknown_status_code():
    assert to_pool_status(3) is PoolStatus.FINISHED
    with pytest.raises(ValueError):
        to_pool_status(9)


@pytest.mark.parametrize("seconds, label", [(30, "30S"), (60, "1M"), (300, "5M"), (45, "1M"), (0, "1M")])
def test_round_speed_label(seconds, label):
    assert round_speed_label(seconds) == label


@pytest.mark.parametrize("label, seconds", [("30S", 30), ("1M", 60), ("5M", 300), ("10M", 60)])
def test_round_speed_seconds(label, seconds):
    assert round_speed_seconds(label) == seconds


def test_choices():
    assert choice_value("Heads") is Choice.HEADS
    assert choice_value("Tails") is Choice.TAILS
    assert int(choice_value("Tails")) == 2
    with pytest.raises(ValueError):
        choice_value("heads")


@pytest.mark.parametrize("amount, fixed", [
    (5, 5_000_000),
    (0.1, 100_000),
    (12.345678, 12_345_678),
    (1.0000005, 1_000_001),
    (0, 0),
])
def test_to_fixed(amount, fixed):
    assert to_fixed(amount) == fixed


def test_from_fixed():
    assert from_fixed(15_000_000) == 15.0
    assert from_fixed(2_500_000) == 2.5
    assert from_fixed(0) == 0.0


def test_format_token():
    assert format_token(5) == "5.00 USDC"
    assert format_token(0.1) == "0.10 USDC"


@pytest.mark.parametrize("amount, text", [
    (15.0, "+15.0 USDC"),
    (0.0, "+0.0 USDC"),
    (-5.0, "-5.0 USDC"),
    (-0.25, "-0.2 USDC"),
    (-0.0, "+0.0 USDC"),
    (-0.04, "+0.0 USDC"),
    (0.04, "+0.0 USDC"),
])
def test_format_pnl(amount, text):
    assert format_pnl(amount) == text


@pytest.mark.parametrize("count, load", [
    (0, "low"), (5, "low"), (6, "medium"), (20, "medium"), (21, "high"),
])
def test_network_load(count, load):
    assert network_load(count) == load
