"""
Signer utility functions
"""

from typing import Any

from x402.config import NetworkConfig
from x402.exceptions import ConfigurationError

# Canonical EIP-712 domain field order and types
_EIP712_DOMAIN_FIELDS: list[tuple[str, str]] = [
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
    ("salt", "bytes32"),
]


def _eip712_domain_type_from_keys(domain: dict[str, Any]) -> list[dict[str, str]]:
    """Build an EIP712Domain type array from the keys present in *domain*.

    Preserves the canonical field order defined in EIP-712.
    """
    return [{"name": name, "type": typ} for name, typ in _EIP712_DOMAIN_FIELDS if name in domain]


def build_typed_data(
    domain: dict[str, Any],
    types: dict[str, Any],
    message: dict[str, Any],
    primary_type: str,
) -> dict[str, Any]:
    """Assemble the full EIP-712 structure signed and recovered over."""
    return {
        "types": {"EIP712Domain": _eip712_domain_type_from_keys(domain), **types},
        "domain": domain,
        "primaryType": primary_type,
        "message": message,
    }


def to_json_typed_data(typed_data: dict[str, Any]) -> dict[str, Any]:
    """Hex-encode bytes values so typed data can go over JSON-RPC."""

    def _convert(value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            return "0x" + bytes(value).hex()
        if isinstance(value, dict):
            return {k: _convert(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_convert(v) for v in value]
        return value

    return _convert(typed_data)


def resolve_provider_uri(network: str) -> str:
    """Resolve a network identifier to an RPC provider URI.

    Checks in order:
    1. If network is already an HTTP/WS URL, return as-is
    2. Look up in NetworkConfig (environment override, then built-in endpoint)

    Raises:
        ConfigurationError: If no provider is available
    """
    if network.startswith(("http://", "https://", "ws://", "wss://")):
        return network
    uri = NetworkConfig.get_rpc_url(network)
    if uri is None:
        raise ConfigurationError(f"No RPC provider configured for network: {network}")
    return uri


def create_async_web3(network: str) -> Any:
    """Create an AsyncWeb3 client for *network*."""
    from web3 import AsyncHTTPProvider, AsyncWeb3
    from web3.middleware import ExtraDataToPOAMiddleware

    w3 = AsyncWeb3(AsyncHTTPProvider(resolve_provider_uri(network)))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3
