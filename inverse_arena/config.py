"""
Configuration settings for the Inverse Arena client.
"""

import os
from dataclasses import dataclass
from typing import Optional


# USDC on Arbitrum Sepolia (chainId 421614)
DEFAULT_TOKEN_ADDRESS = "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d"


@dataclass
class ArenaConfig:
    """Client configuration settings."""

    # Blockchain settings
    rpc_url: str
    arena_manager_address: str
    token_address: str = DEFAULT_TOKEN_ADDRESS

    # Wallet settings
    # Without a private key the client is read-only
    private_key: Optional[str] = None
    # Passed through to the presentation layer, unused here
    walletconnect_project_id: str = ""

    # Read settings
    listing_limit: int = 5
    cache_stale_seconds: float = 10.0
    poll_interval_seconds: float = 15.0

    # Transport timeout, the only timeout in the system
    rpc_timeout_seconds: float = 30.0

    @property
    def can_write(self) -> bool:
        return self.private_key is not None

    @classmethod
    def from_env(cls) -> "ArenaConfig":
        """Create config from environment variables."""
        # Normalize private key to ensure it has 0x prefix
        private_key = os.getenv("ARENA_PRIVATE_KEY") or None
        if private_key and not private_key.startswith("0x"):
            private_key = "0x" + private_key

        return cls(
            rpc_url=os.environ["ARENA_RPC_URL"],
            arena_manager_address=os.environ["ARENA_MANAGER_ADDRESS"],
            token_address=os.getenv("ARENA_TOKEN_ADDRESS", DEFAULT_TOKEN_ADDRESS),
            private_key=private_key,
            walletconnect_project_id=os.getenv("ARENA_WALLETCONNECT_PROJECT_ID", ""),
            listing_limit=int(os.getenv("ARENA_LISTING_LIMIT", "5")),
            cache_stale_seconds=float(os.getenv("ARENA_CACHE_STALE_SECONDS", "10")),
            poll_interval_seconds=float(os.getenv("ARENA_POLL_INTERVAL_SECONDS", "15")),
            rpc_timeout_seconds=float(os.getenv("ARENA_RPC_TIMEOUT_SECONDS", "30")),
        )
