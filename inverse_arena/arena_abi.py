"""
Contract ABIs and on-chain enumerations for Inverse Arena.

Generated from ArenaManager.sol; keep in sync with the deployed contract.
"""

from enum import IntEnum


class PoolStatus(IntEnum):
    """Pool lifecycle status as stored by the contract."""
    PENDING = 0
    ACTIVE = 1
    RESOLVING = 2
    FINISHED = 3
    CANCELLED = 4


class Choice(IntEnum):
    """Round choice as stored by the contract."""
    NONE = 0
    HEADS = 1
    TAILS = 2


def _uint256(name):
    return {"internalType": "uint256", "name": name, "type": "uint256"}


def _pool_id_function(name):
    return {
        "inputs": [_uint256("poolId")],
        "name": name,
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }


def _error(name, inputs=None):
    return {"inputs": inputs or [], "name": name, "type": "error"}


ARENA_MANAGER_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "entryFee", "type": "uint256"},
            {"internalType": "uint32", "name": "maxPlayers", "type": "uint32"},
            {"internalType": "uint32", "name": "minPlayers", "type": "uint32"},
            {"internalType": "uint32", "name": "roundDuration", "type": "uint32"},
            {"internalType": "uint32", "name": "startDeadline", "type": "uint32"}
        ],
        "name": "createPool",
        "outputs": [_uint256("poolId")],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    _pool_id_function("joinPool"),
    _pool_id_function("startGame"),
    _pool_id_function("cancelPool"),
    {
        "inputs": [
            _uint256("poolId"),
            {"internalType": "uint8", "name": "choice", "type": "uint8"}
        ],
        "name": "submitChoice",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    _pool_id_function("resolveRound"),
    _pool_id_function("claimWinnings"),
    _pool_id_function("claimRefund"),
    {
        "inputs": [_uint256("poolId")],
        "name": "getPoolConfig",
        "outputs": [
            {
                "components": [
                    {"internalType": "address", "name": "host", "type": "address"},
                    {"internalType": "uint256", "name": "entryFee", "type": "uint256"},
                    {"internalType": "uint32", "name": "maxPlayers", "type": "uint32"},
                    {"internalType": "uint32", "name": "minPlayers", "type": "uint32"},
                    {"internalType": "uint32", "name": "roundDuration", "type": "uint32"},
                    {"internalType": "uint32", "name": "startDeadline", "type": "uint32"}
                ],
                "internalType": "struct ArenaManager.PoolConfig",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [_uint256("poolId")],
        "name": "getPoolState",
        "outputs": [
            {
                "components": [
                    {"internalType": "uint8", "name": "status", "type": "uint8"},
                    {"internalType": "uint32", "name": "currentRound", "type": "uint32"},
                    {"internalType": "uint32", "name": "survivorCount", "type": "uint32"},
                    {"internalType": "uint32", "name": "playerCount", "type": "uint32"},
                    {"internalType": "uint256", "name": "totalDeposited", "type": "uint256"},
                    {"internalType": "uint256", "name": "roundDeadline", "type": "uint256"},
                    {"internalType": "address", "name": "winner", "type": "address"}
                ],
                "internalType": "struct ArenaManager.PoolState",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            _uint256("poolId"),
            {"internalType": "address", "name": "player", "type": "address"}
        ],
        "name": "getPlayerInfo",
        "outputs": [
            {
                "components": [
                    {"internalType": "bool", "name": "isActive", "type": "bool"},
                    {"internalType": "bool", "name": "hasClaimed", "type": "bool"},
                    {"internalType": "uint32", "name": "roundEliminated", "type": "uint32"},
                    {"internalType": "uint8", "name": "lastChoice", "type": "uint8"}
                ],
                "internalType": "struct ArenaManager.PlayerInfo",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "poolCount",
        "outputs": [_uint256("")],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [_uint256("amount")],
        "name": "depositCreatorStake",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "withdrawCreatorStake",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "", "type": "address"}],
        "name": "creatorStake",
        "outputs": [_uint256("")],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "creator", "type": "address"}],
        "name": "creatorActivePools",
        "outputs": [_uint256("")],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "poolId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "host", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "entryFee", "type": "uint256"},
            {"indexed": False, "internalType": "uint32", "name": "maxPlayers", "type": "uint32"}
        ],
        "name": "PoolCreated",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "poolId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "player", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "name": "PlayerJoined",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "poolId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "winner", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "payout", "type": "uint256"}
        ],
        "name": "GameFinished",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "creator", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "slashedAmount", "type": "uint256"}
        ],
        "name": "CreatorStakeSlashed",
        "type": "event"
    },
    _error("InvalidConfig"),
    _error("InsufficientCreatorStake"),
    _error("PoolNotFound", [_uint256("poolId")]),
    _error("InvalidPoolStatus", [
        {"internalType": "uint8", "name": "current", "type": "uint8"},
        {"internalType": "uint8", "name": "required", "type": "uint8"}
    ]),
    _error("AlreadyJoined", [{"internalType": "address", "name": "player", "type": "address"}]),
    _error("PoolFull"),
    _error("NotActivePlayer"),
    _error("AlreadySubmitted"),
    _error("RoundDeadlinePassed"),
    _error("RoundDeadlineNotPassed"),
    _error("RoundNotOpen"),
    _error("NothingToClaim"),
    _error("NotWinner"),
    _error("StartDeadlinePassed"),
    _error("MinPlayersNotMet"),
    _error("TransferFailed"),
]


# ERC20 subset used for the approve-then-act flow
ERC20_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
]
