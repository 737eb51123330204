"""
Transaction utilities.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError

from ..errors import TransactionRevertedError
from .fees import FeeOverrides
from .wallet import Wallet


logger = logging.getLogger(__name__)


DEFAULT_GAS_LIMIT = 500000


class TxState(Enum):
    """Lifecycle of one write: idle -> signing -> submitting -> success | error."""
    IDLE = "idle"
    SIGNING = "signing"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TxState.SUCCESS, TxState.ERROR)


StateCallback = Callable[[TxState], None]


async def estimate_gas_with_buffer(function_call, sender: str, buffer_percent: int = 20) -> int:
    """Estimate gas with buffer.

    A revert during estimation is the contract refusing the call, so it is
    raised rather than papered over with the default limit.
    """
    try:
        estimated_gas = await function_call.estimate_gas({"from": sender})
        return int(estimated_gas * (1 + buffer_percent / 100))
    except ContractLogicError:
        raise
    except Exception as e:
        logger.warning(f"Gas estimation failed: {e}, using default")
        return DEFAULT_GAS_LIMIT


async def build_sign_send_transaction(
    web3: AsyncWeb3,
    function_call,
    wallet: Wallet,
    fee_overrides: Optional[FeeOverrides] = None,
    *,
    on_state: Optional[StateCallback] = None,
) -> Tuple[str, Dict[str, Any]]:
    """Build, sign and send one transaction, then wait for inclusion.

    Does not retry: a failed write has to be started again by the caller,
    which picks up a fresh nonce and fee snapshot. Raises
    ``TransactionRevertedError`` if the receipt reports failure; anything else
    (rejected signature, RPC errors) propagates unchanged.
    """
    def _notify(state: TxState) -> None:
        if on_state:
            on_state(state)

    current_nonce = await web3.eth.get_transaction_count(wallet.address, "pending")
    params: Dict[str, Any] = {
        "from": wallet.address,
        "nonce": current_nonce,
        "gas": await estimate_gas_with_buffer(function_call, wallet.address),
    }
    if fee_overrides:
        params.update(fee_overrides.as_tx_params())

    # Fields not set above (chainId, fees without overrides) are filled by web3
    transaction: Dict[str, Any] = await function_call.build_transaction(params)

    _notify(TxState.SIGNING)
    raw_transaction = await wallet.sign_transaction(transaction)

    _notify(TxState.SUBMITTING)
    tx_hash = Web3.to_hex(await web3.eth.send_raw_transaction(raw_transaction))
    logger.info(f"Broadcast transaction {tx_hash} (nonce {current_nonce})")

    receipt = await web3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        raise TransactionRevertedError(tx_hash)

    logger.info(f"Transaction {tx_hash} included in block {receipt.get('blockNumber')}")
    return tx_hash, receipt
