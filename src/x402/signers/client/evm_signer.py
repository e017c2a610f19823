"""
EvmClientSigner - raw private key signer
"""

import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from x402.exceptions import SignatureCreationError
from x402.signers.client.base import ClientSigner
from x402.signers.utils import build_typed_data

logger = logging.getLogger(__name__)


class EvmClientSigner(ClientSigner):
    """EVM client signer holding a private key, using eth_account"""

    def __init__(self, private_key: str) -> None:
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        self._private_key = private_key
        self._address = Account.from_key(private_key).address
        logger.debug("EvmClientSigner initialized", extra={"address": self._address})

    @classmethod
    def from_private_key(cls, private_key: str) -> "EvmClientSigner":
        """Create signer from private key."""
        return cls(private_key)

    def get_address(self) -> str:
        return self._address

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        primary_type: str,
    ) -> str:
        try:
            encoded = encode_typed_data(
                full_message=build_typed_data(domain, types, message, primary_type)
            )
            signed = Account.sign_message(encoded, private_key=self._private_key)
            return "0x" + bytes(signed.signature).hex()
        except Exception as e:
            raise SignatureCreationError(f"Failed to sign typed data: {e}") from e
