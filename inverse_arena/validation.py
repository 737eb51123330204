"""
Input validation for stake amounts typed by a user.
"""

import re
from typing import Optional, Tuple


DECIMAL_PRECISION = {
    "ETH": 6,
    "USDC": 2,
}


def get_decimal_precision(currency: str) -> int:
    return DECIMAL_PRECISION.get(currency, 2)


def validate_stake_amount(amount: str, currency: str, min_stake: float, max_stake: float) -> Tuple[bool, Optional[str]]:
    """Return ``(is_valid, error_message)`` for a raw amount string."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False, "Please enter a valid amount"
    if value != value or value <= 0:
        return False, "Please enter a valid amount"
    if value < min_stake:
        return False, f"Minimum stake is {min_stake:g} {currency}"
    if value > max_stake:
        return False, "Insufficient balance"
    return True, None


def sanitize_numeric_input(value: str) -> str:
    """Keep digits and the first decimal point only."""
    digits = re.sub(r"[^0-9.]", "", value)
    head, dot, tail = digits.partition(".")
    return head + dot + tail.replace(".", "")


def format_currency_input(value: str, currency: str) -> str:
    """Truncate the fractional part to the currency's display precision."""
    if not value:
        return value
    decimals = get_decimal_precision(currency)
    whole, dot, fraction = value.partition(".")
    if dot and len(fraction) > decimals:
        return f"{whole}.{fraction[:decimals]}"
    return value
