"""
Token registry - default stablecoin and known tokens for each network
"""

from dataclasses import dataclass

from x402.exceptions import UnknownTokenError, UnsupportedNetworkError
from x402.types import Eip712Domain, TokenAsset


@dataclass
class TokenInfo:
    """Token information"""

    address: str
    decimals: int
    name: str
    symbol: str
    version: str = "2"

    def to_asset(self) -> TokenAsset:
        return TokenAsset(
            address=self.address,
            decimals=self.decimals,
            eip712=Eip712Domain(name=self.name, version=self.version),
        )


class TokenRegistry:
    """Token registry"""

    _tokens: dict[str, dict[str, TokenInfo]] = {
        "base": {
            "USDC": TokenInfo(
                address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
        },
        "base-sepolia": {
            "USDC": TokenInfo(
                address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
                decimals=6,
                name="USDC",
                symbol="USDC",
            ),
        },
        "avalanche": {
            "USDC": TokenInfo(
                address="0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
        },
        "avalanche-fuji": {
            "USDC": TokenInfo(
                address="0x5425890298aed601595a70AB815c96711a31Bc65",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
        },
    }

    # Symbol of the reference stablecoin money-like prices are denominated in
    _defaults: dict[str, str] = {
        "base": "USDC",
        "base-sepolia": "USDC",
        "avalanche": "USDC",
        "avalanche-fuji": "USDC",
    }

    @classmethod
    def register_token(cls, network: str, token: TokenInfo, default: bool = False) -> None:
        """Register a custom token for specified network

        Args:
            network: Network identifier (e.g. "base-sepolia")
            token: TokenInfo to register
            default: Make it the network's default asset for money-like prices
        """
        cls._tokens.setdefault(network, {})[token.symbol.upper()] = token
        if default:
            cls._defaults[network] = token.symbol.upper()

    @classmethod
    def get_token(cls, network: str, symbol: str) -> TokenInfo:
        """Get token information for specified network and symbol

        Raises:
            UnknownTokenError: If token does not exist
        """
        token = cls._tokens.get(network, {}).get(symbol.upper())
        if token is None:
            raise UnknownTokenError(f"Unknown token {symbol} on network {network}")
        return token

    @classmethod
    def get_default_asset(cls, network: str) -> TokenInfo:
        """Get the default stablecoin for a network

        Raises:
            UnsupportedNetworkError: If no default asset is registered
        """
        symbol = cls._defaults.get(network)
        token = cls._tokens.get(network, {}).get(symbol) if symbol else None
        if token is None:
            raise UnsupportedNetworkError(f"No default asset registered for network: {network}")
        return token

    @classmethod
    def find_by_address(cls, network: str, address: str) -> TokenInfo | None:
        """Find token information by address (case-insensitive)"""
        lower = address.lower()
        for info in cls._tokens.get(network, {}).values():
            if info.address.lower() == lower:
                return info
        return None

    @classmethod
    def is_default_asset(cls, network: str, address: str) -> bool:
        """Return True if *address* is the network's default stablecoin"""
        try:
            default = cls.get_default_asset(network)
        except UnsupportedNetworkError:
            return False
        return default.address.lower() == address.lower()
