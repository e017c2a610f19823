"""
EVM chain adapter for exact.
"""

import re

from web3 import Web3

from x402.config import NetworkConfig
from x402.mechanisms._exact_base.base import ChainAdapter

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


class EvmChainAdapter(ChainAdapter):
    """Chain adapter for the EVM networks listed in NetworkConfig."""

    def parse_chain_id(self, network: str) -> int:
        return NetworkConfig.get_chain_id(network)

    def validate_network(self, network: str) -> bool:
        return (
            NetworkConfig.is_supported(network)
            and NetworkConfig.get_family(network) == NetworkConfig.EVM_FAMILY
        )

    def validate_address(self, address: str) -> bool:
        return bool(_EVM_ADDRESS.match(address))

    def normalize_address(self, address: str) -> str:
        return address.lower()

    def to_signing_address(self, address: str) -> str:
        return Web3.to_checksum_address(address)
