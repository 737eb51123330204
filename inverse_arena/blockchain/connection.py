"""
Web3 connection utilities.
"""

import logging
from typing import Any, List, Optional

import aiohttp
from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract

from ..arena_abi import ARENA_MANAGER_ABI, ERC20_ABI


logger = logging.getLogger(__name__)


async def get_web3_connection(rpc_url: str, timeout_seconds: Optional[float] = None) -> AsyncWeb3:
    """Create an async Web3 connection.

    ``timeout_seconds`` is handed to the aiohttp transport; nothing above it
    imposes a timeout of its own.
    """
    request_kwargs = {}
    if timeout_seconds:
        request_kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout_seconds)

    web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs=request_kwargs))

    if not await web3.is_connected():
        raise ConnectionError(f"Failed to connect to {rpc_url}")

    logger.info(f"Connected to blockchain at {rpc_url}")
    return web3


def get_contract(web3: AsyncWeb3, contract_address: str, abi: Optional[List[Any]] = None) -> AsyncContract:
    """Get the arena manager contract instance."""
    contract = web3.eth.contract(
        address=Web3.to_checksum_address(contract_address),
        abi=abi or ARENA_MANAGER_ABI
    )

    logger.info(f"Loaded arena contract at {contract_address}")
    return contract


def get_erc20_contract(web3: AsyncWeb3, token_address: str) -> AsyncContract:
    """Get ERC20 token contract instance."""
    contract = web3.eth.contract(
        address=Web3.to_checksum_address(token_address),
        abi=ERC20_ABI
    )

    logger.info(f"Loaded ERC20 contract at {token_address}")
    return contract
