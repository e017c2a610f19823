"""
X402 Network Configuration
Centralized configuration for networks, chain IDs and resource-server settings
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from x402.exceptions import ConfigurationError, UnsupportedNetworkError

DEFAULT_FACILITATOR_URL = "https://x402.org/facilitator"


class NetworkConfig:
    """Network configuration for chain IDs, RPC endpoints and network families"""

    BASE = "base"
    BASE_SEPOLIA = "base-sepolia"
    AVALANCHE = "avalanche"
    AVALANCHE_FUJI = "avalanche-fuji"

    EVM_FAMILY = "evm"

    DEFAULT_NETWORK = BASE_SEPOLIA

    CHAIN_IDS: Dict[str, int] = {
        "base": 8453,
        "base-sepolia": 84532,
        "avalanche": 43114,
        "avalanche-fuji": 43113,
    }

    TESTNETS: frozenset[str] = frozenset({"base-sepolia", "avalanche-fuji"})

    RPC_URLS: Dict[str, str] = {
        "base": "https://mainnet.base.org",
        "base-sepolia": "https://sepolia.base.org",
        "avalanche": "https://api.avax.network/ext/bc/C/rpc",
        "avalanche-fuji": "https://api.avax-test.network/ext/bc/C/rpc",
    }

    @classmethod
    def supported_networks(cls) -> list[str]:
        return list(cls.CHAIN_IDS)

    @classmethod
    def is_supported(cls, network: str) -> bool:
        return network in cls.CHAIN_IDS

    @classmethod
    def is_testnet(cls, network: str) -> bool:
        return network in cls.TESTNETS

    @classmethod
    def get_family(cls, network: str) -> str:
        """Get the network family a mechanism is registered under

        Raises:
            UnsupportedNetworkError: If network is not supported
        """
        if network not in cls.CHAIN_IDS:
            raise UnsupportedNetworkError(f"Unsupported network: {network}")
        return cls.EVM_FAMILY

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        """Get chain ID for network

        Args:
            network: Network identifier (e.g., "base-sepolia")

        Returns:
            Chain ID as integer

        Raises:
            UnsupportedNetworkError: If network is not supported
        """
        chain_id = cls.CHAIN_IDS.get(network)
        if chain_id is None:
            raise UnsupportedNetworkError(f"Unsupported network: {network}")
        return chain_id

    @classmethod
    def get_rpc_url(cls, network: str) -> str | None:
        """Get RPC URL for a network.

        ``X402_RPC_URL_<NETWORK>`` (e.g. ``X402_RPC_URL_BASE_SEPOLIA``) overrides
        the built-in public endpoint.

        Returns:
            RPC URL string, or None if not configured
        """
        env_key = "X402_RPC_URL_" + network.upper().replace("-", "_")
        return os.getenv(env_key) or cls.RPC_URLS.get(network)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class X402Settings:
    """Resource-server settings loaded from the environment"""

    pay_to: str
    facilitator_url: str = DEFAULT_FACILITATOR_URL
    network: str = NetworkConfig.DEFAULT_NETWORK
    testnet: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "X402Settings":
        """Load settings from environment variables (and a ``.env`` file if present).

        Variables: ``X402_PAY_TO`` (required), ``X402_FACILITATOR_URL``,
        ``X402_NETWORK``, ``X402_TESTNET``, ``X402_LOG_LEVEL``.

        Raises:
            ConfigurationError: If ``X402_PAY_TO`` is missing
            UnsupportedNetworkError: If ``X402_NETWORK`` is not a known network
        """
        load_dotenv(env_file)

        pay_to = os.getenv("X402_PAY_TO", "").strip()
        if not pay_to:
            raise ConfigurationError("X402_PAY_TO is required")

        network = os.getenv("X402_NETWORK", NetworkConfig.DEFAULT_NETWORK).strip()
        if not NetworkConfig.is_supported(network):
            raise UnsupportedNetworkError(f"Unsupported network: {network}")

        testnet_env = os.getenv("X402_TESTNET")
        testnet = (
            _parse_bool(testnet_env)
            if testnet_env is not None
            else NetworkConfig.is_testnet(network)
        )

        return cls(
            pay_to=pay_to,
            facilitator_url=os.getenv("X402_FACILITATOR_URL", DEFAULT_FACILITATOR_URL).rstrip("/"),
            network=network,
            testnet=testnet,
            log_level=os.getenv("X402_LOG_LEVEL", "INFO"),
        )
