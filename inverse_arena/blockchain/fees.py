"""
EIP-1559 fee ceilings for write transactions.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from web3 import AsyncWeb3


logger = logging.getLogger(__name__)


# maxFeePerGas = baseFee * 130 / 100
BASE_FEE_BUFFER_PERCENT = 130
PRIORITY_FEE_DIVISOR = 10


@dataclass(frozen=True)
class FeeOverrides:
    """Fee pair in wei, applied on top of a transaction's ambient defaults."""
    max_fee_per_gas: int
    max_priority_fee_per_gas: int

    def as_tx_params(self) -> Dict[str, int]:
        return {
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
        }


def fees_from_base_fee(base_fee: Optional[int]) -> Optional[FeeOverrides]:
    """Compute fee overrides from an observed base fee; ``None`` when there is nothing to go on."""
    if not base_fee:
        return None
    max_fee = base_fee * BASE_FEE_BUFFER_PERCENT // 100
    return FeeOverrides(
        max_fee_per_gas=max_fee,
        max_priority_fee_per_gas=max_fee // PRIORITY_FEE_DIVISOR,
    )


async def estimate_fees(web3: AsyncWeb3) -> Optional[FeeOverrides]:
    """Fee overrides from the pending block so a transaction is not priced under the base fee.

    Returns ``None`` when the base fee is zero or cannot be read, in which case
    the transaction goes out with the provider's default fee policy.
    """
    try:
        block = await web3.eth.get_block("pending")
        base_fee = block.get("baseFeePerGas")
    except Exception as e:
        logger.warning(f"Could not read pending block base fee: {e}, using default fees")
        return None

    overrides = fees_from_base_fee(base_fee)
    if overrides:
        logger.debug(
            f"Fee overrides: maxFeePerGas={overrides.max_fee_per_gas} "
            f"maxPriorityFeePerGas={overrides.max_priority_fee_per_gas}"
        )
    return overrides
