"""
Blockchain utilities for Inverse Arena.
"""

from .allowance import ensure_allowance
from .connection import get_contract, get_erc20_contract, get_web3_connection
from .fees import FeeOverrides, estimate_fees, fees_from_base_fee
from .reader import ArenaReader, ParticipantRecord, PoolConfig, PoolState
from .transactions import TxState, build_sign_send_transaction
from .wallet import LocalWallet, Wallet

__all__ = [
    "get_web3_connection",
    "get_contract",
    "get_erc20_contract",
    "ArenaReader",
    "PoolConfig",
    "PoolState",
    "ParticipantRecord",
    "FeeOverrides",
    "estimate_fees",
    "fees_from_base_fee",
    "ensure_allowance",
    "TxState",
    "build_sign_send_transaction",
    "LocalWallet",
    "Wallet",
]
