"""
Token registry and price resolution
"""

from x402.tokens.price import parse_money, process_price_to_atomic_amount
from x402.tokens.registry import TokenInfo, TokenRegistry
from x402.tokens.version_cache import TokenVersionCache

__all__ = [
    "TokenInfo",
    "TokenRegistry",
    "TokenVersionCache",
    "parse_money",
    "process_price_to_atomic_amount",
]
