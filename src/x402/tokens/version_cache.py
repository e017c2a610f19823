"""
Read-through cache of token signing domains
"""

import time
from typing import Callable

from x402.types import Eip712Domain


class TokenVersionCache:
    """
    Cache of a token contract's EIP-712 name/version keyed by (network, asset).

    Entries expire after *ttl* seconds; ``ttl=None`` keeps them for the
    lifetime of the cache object. Pass one instance to the mechanisms that
    should share it.
    """

    def __init__(
        self,
        ttl: float | None = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[Eip712Domain, float]] = {}

    def get(self, network: str, asset: str) -> Eip712Domain | None:
        key = (network, asset.lower())
        entry = self._entries.get(key)
        if entry is None:
            return None
        domain, stored_at = entry
        if self._ttl is not None and self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return domain

    def set(self, network: str, asset: str, domain: Eip712Domain) -> None:
        self._entries[(network, asset.lower())] = (domain, self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
