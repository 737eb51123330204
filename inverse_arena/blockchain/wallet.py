"""
Signing abstraction.

Wallet connection and session management live outside this package. Anything
with an ``address`` and an async ``sign_transaction`` returning raw signed
bytes can be used; a wallet whose holder declines must raise
``UserRejectedError``.
"""

import logging
from typing import Any, Dict, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount


logger = logging.getLogger(__name__)


class Wallet(Protocol):
    address: str

    async def sign_transaction(self, transaction: Dict[str, Any]) -> bytes:
        ...


class LocalWallet:
    """Wallet backed by a private key held in process."""

    def __init__(self, private_key: str):
        self._account: LocalAccount = Account.from_key(private_key)
        self.address = self._account.address

    async def sign_transaction(self, transaction: Dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(transaction)
        return bytes(signed.raw_transaction)

    def __repr__(self) -> str:
        return f"LocalWallet({self.address})"
