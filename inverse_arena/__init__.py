"""
Inverse Arena: ledger reads and transaction orchestration for the on-chain
elimination game.
"""

from .actions import ArenaActions, TxOutcome
from .aggregator import ArenaAggregator
from .client import InverseArenaClient
from .config import ArenaConfig
from .errors import ClassifiedError, ErrorCategory, classify_error

__version__ = "0.1.0"

__all__ = [
    "ArenaActions",
    "ArenaAggregator",
    "ArenaConfig",
    "ClassifiedError",
    "ErrorCategory",
    "InverseArenaClient",
    "TxOutcome",
    "classify_error",
]
