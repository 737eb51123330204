"""
Token allowance guard for the approve-then-act flow.
"""

import logging
from typing import Optional

from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract

from .fees import estimate_fees
from .reader import ArenaReader
from .transactions import StateCallback, build_sign_send_transaction
from .wallet import Wallet


logger = logging.getLogger(__name__)


async def ensure_allowance(
    web3: AsyncWeb3,
    reader: ArenaReader,
    token: AsyncContract,
    wallet: Wallet,
    spender: str,
    amount: int,
    *,
    on_state: Optional[StateCallback] = None,
) -> bool:
    """Make sure ``spender`` may move ``amount`` of the wallet's tokens.

    Returns False without writing anything when the current allowance already
    covers ``amount``. Otherwise approves exactly ``amount`` (not the
    difference) and returns True once the approval is included. A failed
    allowance read aborts the caller's whole operation.
    """
    current = await reader.allowance(wallet.address, spender)
    if current >= amount:
        logger.debug(f"Allowance {current} covers {amount} for {spender}, no approval needed")
        return False

    logger.info(f"Allowance {current} below {amount}, approving {spender}")
    fee_overrides = await estimate_fees(web3)
    tx_hash, _ = await build_sign_send_transaction(
        web3,
        token.functions.approve(Web3.to_checksum_address(spender), amount),
        wallet,
        fee_overrides,
        on_state=on_state,
    )
    logger.info(f"Approval confirmed: {tx_hash}")
    return True
