"""
Error types and failure classification.

Reads raise ``ArenaReadError`` subclasses. Writes never raise to their
caller: every failure is folded into a ``ClassifiedError`` by
``classify_error`` so the presentation layer can pick a message without
parsing provider output itself.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Optional, Tuple, Union

from web3 import Web3

from .arena_abi import ARENA_MANAGER_ABI


class ArenaError(Exception):
    """Base class for every error raised by this package."""


class ArenaReadError(ArenaError):
    """A read against the ledger did not produce a usable value."""


class PoolNotFoundError(ArenaReadError):
    """The pool id does not exist (yet) on the ledger."""

    def __init__(self, pool_id: int):
        super().__init__(f"Pool {pool_id} not found")
        self.pool_id = pool_id


class TransportError(ArenaReadError):
    """RPC or transport failure, or data that could not be decoded."""


class UserRejectedError(ArenaError):
    """The holder of the signing key declined to sign.

    Wallet implementations raise this; the message deliberately contains
    "User rejected" so it classifies the same way as provider rejections.
    """

    def __init__(self, message: str = "User rejected the request."):
        super().__init__(message)


class TransactionRevertedError(ArenaError):
    """The transaction was included but its execution failed."""

    def __init__(self, tx_hash: str):
        super().__init__(f"Transaction failed: {tx_hash}")
        self.tx_hash = tx_hash


class ErrorCategory(Enum):
    """User-facing failure categories."""
    USER_REJECTED = "user_rejected"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_CONFIG = "invalid_config"
    ALREADY_JOINED = "already_joined"
    POOL_FULL = "pool_full"
    START_DEADLINE_PASSED = "start_deadline_passed"
    NOT_WINNER = "not_winner"
    NOTHING_TO_CLAIM = "nothing_to_claim"
    ALREADY_SUBMITTED = "already_submitted"
    ROUND_DEADLINE_PASSED = "round_deadline_passed"
    MIN_PLAYERS_NOT_MET = "min_players_not_met"
    INSUFFICIENT_CREATOR_STAKE = "insufficient_creator_stake"
    TRANSPORT = "transport"


# Checked in order; the first substring found wins.
_PATTERNS: Tuple[Tuple[Tuple[str, ...], ErrorCategory], ...] = (
    (("User rejected", "user rejected"), ErrorCategory.USER_REJECTED),
    (("insufficient funds",), ErrorCategory.INSUFFICIENT_FUNDS),
    (("InvalidConfig",), ErrorCategory.INVALID_CONFIG),
    (("AlreadyJoined",), ErrorCategory.ALREADY_JOINED),
    (("PoolFull",), ErrorCategory.POOL_FULL),
    (("StartDeadlinePassed",), ErrorCategory.START_DEADLINE_PASSED),
    (("NotWinner",), ErrorCategory.NOT_WINNER),
    (("NothingToClaim",), ErrorCategory.NOTHING_TO_CLAIM),
    (("AlreadySubmitted",), ErrorCategory.ALREADY_SUBMITTED),
    (("RoundDeadlinePassed",), ErrorCategory.ROUND_DEADLINE_PASSED),
    (("MinPlayersNotMet",), ErrorCategory.MIN_PLAYERS_NOT_MET),
    (("InsufficientCreatorStake",), ErrorCategory.INSUFFICIENT_CREATOR_STAKE),
)

_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.USER_REJECTED: "Transaction rejected in wallet.",
    ErrorCategory.INSUFFICIENT_FUNDS: "Insufficient funds for gas.",
    ErrorCategory.INVALID_CONFIG: "Invalid pool configuration, check fee and player limits.",
    ErrorCategory.ALREADY_JOINED: "You have already joined this pool.",
    ErrorCategory.POOL_FULL: "This pool is full.",
    ErrorCategory.START_DEADLINE_PASSED: "The pool start deadline has passed.",
    ErrorCategory.NOT_WINNER: "Only the winner can claim winnings.",
    ErrorCategory.NOTHING_TO_CLAIM: "Nothing left to claim.",
    ErrorCategory.ALREADY_SUBMITTED: "You already submitted a choice this round.",
    ErrorCategory.ROUND_DEADLINE_PASSED: "The round deadline has passed, wait for round resolution.",
    ErrorCategory.MIN_PLAYERS_NOT_MET: "Not enough players to start the game.",
    ErrorCategory.INSUFFICIENT_CREATOR_STAKE: (
        "You need at least 4 USDC creator stake to create pools. Deposit first."
    ),
    # Transport failures carry the raw message instead
    ErrorCategory.TRANSPORT: "Transaction failed. Please try again.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """A failure mapped to a category, with the text to show and the raw text."""
    category: ErrorCategory
    message: str
    raw: str

    @property
    def is_user_rejection(self) -> bool:
        return self.category is ErrorCategory.USER_REJECTED


@lru_cache(maxsize=1)
def _error_selectors() -> Dict[str, str]:
    """Map 4-byte custom error selectors ("0x" + 8 hex chars) to ABI error names."""
    selectors = {}
    for entry in ARENA_MANAGER_ABI:
        if entry["type"] != "error":
            continue
        signature = f"{entry['name']}({','.join(i['type'] for i in entry['inputs'])})"
        selector = "0x" + bytes(Web3.keccak(text=signature)[:4]).hex()
        selectors[selector] = entry["name"]
    return selectors


def revert_name(err: BaseException) -> Optional[str]:
    """Return the ABI error name encoded in a custom revert, if any.

    web3 reports custom errors as raw ABI data, e.g. ``0xa4b5e2ab...``.
    """
    candidates = [getattr(err, "data", None), *err.args]
    for candidate in candidates:
        if isinstance(candidate, (bytes, bytearray)):
            candidate = "0x" + bytes(candidate).hex()
        if isinstance(candidate, str) and candidate.startswith("0x") and len(candidate) >= 10:
            name = _error_selectors().get(candidate[:10].lower())
            if name:
                return name
    return None


def _failure_text(err: Union[BaseException, str]) -> str:
    if isinstance(err, str):
        return err
    message = str(err)
    name = revert_name(err)
    if name and name not in message:
        message = f"{message} ({name})" if message else name
    return message


def classify_error(err: Union[BaseException, str]) -> ClassifiedError:
    """Map a raw failure into one of the fixed user-facing categories."""
    if isinstance(err, UserRejectedError):
        return ClassifiedError(ErrorCategory.USER_REJECTED, _MESSAGES[ErrorCategory.USER_REJECTED], str(err))

    text = _failure_text(err)
    for needles, category in _PATTERNS:
        if any(needle in text for needle in needles):
            return ClassifiedError(category, _MESSAGES[category], text)

    # Unmatched: keep the raw message verbatim
    return ClassifiedError(ErrorCategory.TRANSPORT, text or _MESSAGES[ErrorCategory.TRANSPORT], text)
