"""
Chain Configuration Module

Contains the Tempo system contract addresses, TIP-20 role identifiers and
the environment variables that can override them.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv
from web3 import Web3

# Special Addresses
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# System Contracts (precompiles)
SYSTEM_CONTRACTS = {
    "fee_manager": "0xfeec000000000000000000000000000000000000",
    "stablecoin_exchange": "0xdec0000000000000000000000000000000000000",
    "tip20_factory": "0x20fc000000000000000000000000000000000000",
    "tip403_registry": "0x403c000000000000000000000000000000000000",
    "nonce_manager": "0x4e4f4e4345000000000000000000000000000000",
}

FEE_MANAGER_ADDRESS = SYSTEM_CONTRACTS["fee_manager"]
STABLECOIN_EXCHANGE_ADDRESS = SYSTEM_CONTRACTS["stablecoin_exchange"]

# TIP-20 tokens are deployed under this address prefix
TIP20_ADDRESS_PREFIX = "0x20c000000"

# TIP-20 role identifiers -> display names
TIP20_ROLES = {
    "DEFAULT_ADMIN_ROLE": "Default Admin",
    "PAUSE_ROLE": "Pause",
    "UNPAUSE_ROLE": "Unpause",
    "ISSUER_ROLE": "Issuer",
    "BURN_BLOCKED_ROLE": "Burn Blocked",
}

# Environment overrides
ENV_FEE_MANAGER = "TEMPO_FEE_MANAGER_ADDRESS"
ENV_STABLECOIN_EXCHANGE = "TEMPO_STABLECOIN_EXCHANGE_ADDRESS"


def role_hash(role_id: str) -> str:
    """bytes32 role hash as emitted in TIP-20 role events (lowercase hex)."""
    if role_id == "DEFAULT_ADMIN_ROLE":
        return "0x" + "00" * 32
    return "0x" + Web3.keccak(text=role_id).hex().removeprefix("0x")


def build_role_names(roles: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Map role hash -> display name."""
    roles = roles if roles is not None else TIP20_ROLES
    return {role_hash(role_id): name for role_id, name in roles.items()}


@dataclass(frozen=True)
class EngineConfig:
    """
    Read-only configuration handed to the event engine.

    All addresses are stored lowercase so comparisons are plain string
    equality after lower-casing the other side.
    """
    fee_manager: str = FEE_MANAGER_ADDRESS
    stablecoin_exchange: str = STABLECOIN_EXCHANGE_ADDRESS
    zero_address: str = ZERO_ADDRESS
    role_names: Dict[str, str] = field(default_factory=build_role_names)

    def __post_init__(self):
        object.__setattr__(self, "fee_manager", self.fee_manager.lower())
        object.__setattr__(self, "stablecoin_exchange", self.stablecoin_exchange.lower())
        object.__setattr__(self, "zero_address", self.zero_address.lower())
        object.__setattr__(
            self, "role_names", {k.lower(): v for k, v in self.role_names.items()}
        )

    @classmethod
    def default(cls) -> "EngineConfig":
        return cls()

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build config from environment variables (and a .env file if present)."""
        load_dotenv()
        return cls(
            fee_manager=os.getenv(ENV_FEE_MANAGER, FEE_MANAGER_ADDRESS),
            stablecoin_exchange=os.getenv(ENV_STABLECOIN_EXCHANGE, STABLECOIN_EXCHANGE_ADDRESS),
        )

    def role_name(self, role: str) -> Optional[str]:
        return self.role_names.get(str(role).lower())

    def is_fee_manager(self, address: Optional[str]) -> bool:
        return bool(address) and address.lower() == self.fee_manager

    def is_exchange(self, address: Optional[str]) -> bool:
        return bool(address) and address.lower() == self.stablecoin_exchange

    def is_zero(self, address: Optional[str]) -> bool:
        return bool(address) and address.lower() == self.zero_address
