"""
Pure translation from ledger values to display values.

Nothing here performs I/O. Fixed-point amounts are converted to floats for
display only; comparisons against ledger values stay on the integers.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict

from .arena_abi import Choice, PoolStatus


TOKEN_DECIMALS = 6
TOKEN_SCALE = 10 ** TOKEN_DECIMALS
TOKEN_SYMBOL = "USDC"

DEFAULT_ROUND_SPEED = "1M"
DEFAULT_ROUND_SECONDS = 60

ROUND_LABELS: Dict[int, str] = {
    30: "30S",
    60: "1M",
    300: "5M",
}

ROUND_SPEED_SECONDS: Dict[str, int] = {label: seconds for seconds, label in ROUND_LABELS.items()}

# Every PoolStatus member appears exactly once in each table below.
DISPLAY_STATUS: Dict[PoolStatus, str] = {
    PoolStatus.PENDING: "PENDING",
    PoolStatus.ACTIVE: "ACTIVE",
    PoolStatus.RESOLVING: "ACTIVE",
    PoolStatus.FINISHED: "CLOSED",
    PoolStatus.CANCELLED: "ACTIVE",
}

PROFILE_STATUS: Dict[PoolStatus, str] = {
    PoolStatus.PENDING: "PENDING",
    PoolStatus.ACTIVE: "LIVE",
    PoolStatus.RESOLVING: "SETTLING",
    PoolStatus.FINISHED: "COMPLETED",
    PoolStatus.CANCELLED: "CANCELLED",
}

CHOICES: Dict[str, Choice] = {
    "Heads": Choice.HEADS,
    "Tails": Choice.TAILS,
}


def to_pool_status(code: int) -> PoolStatus:
    """Convert a raw status code, raising ValueError for codes the contract does not define."""
    return PoolStatus(code)


def display_status(status: PoolStatus) -> str:
    return DISPLAY_STATUS[status]


def profile_status(status: PoolStatus) -> str:
    return PROFILE_STATUS[status]


def round_speed_label(duration_seconds: int) -> str:
    """Round duration to speed label; unknown durations fall back to 1M."""
    return ROUND_LABELS.get(duration_seconds, DEFAULT_ROUND_SPEED)


def round_speed_seconds(label: str) -> int:
    """Speed label to round duration; unknown labels fall back to 60 seconds."""
    return ROUND_SPEED_SECONDS.get(label, DEFAULT_ROUND_SECONDS)


def choice_value(choice: str) -> Choice:
    """Map "Heads"/"Tails" to the contract enum."""
    try:
        return CHOICES[choice]
    except KeyError:
        raise ValueError(f"Unknown choice {choice!r}, expected one of {sorted(CHOICES)}") from None


def from_fixed(amount: int) -> float:
    """Fixed-point token amount to display units (lossy)."""
    return amount / TOKEN_SCALE


def to_fixed(amount: float) -> int:
    """Display units to fixed-point token amount, rounded to 6 decimal places."""
    quantized = Decimal(str(amount)).quantize(Decimal(1).scaleb(-TOKEN_DECIMALS), rounding=ROUND_HALF_UP)
    return int(quantized * TOKEN_SCALE)


def format_token(amount: float) -> str:
    """Entry-fee style display string, e.g. ``5.00 USDC``."""
    return f"{amount:.2f} {TOKEN_SYMBOL}"


def format_pnl(amount: float) -> str:
    """Signed profit/loss string with one decimal, e.g. ``+15.0 USDC``.

    Amounts that round to zero, including -0.0, read as ``+0.0 USDC``.
    """
    amount = round(amount, 1) + 0.0
    if amount >= 0:
        return f"+{amount:.1f} {TOKEN_SYMBOL}"
    return f"{amount:.1f} {TOKEN_SYMBOL}"


def network_load(pool_count: int) -> str:
    """Coarse load classification by total pool count."""
    if pool_count > 20:
        return "high"
    if pool_count > 5:
        return "medium"
    return "low"
