"""
Web3ClientSigner - signs through a node-managed wallet account
"""

import logging
from typing import Any

from x402.exceptions import SignatureCreationError
from x402.signers.client.base import ClientSigner
from x402.signers.utils import build_typed_data, to_json_typed_data

logger = logging.getLogger(__name__)


class Web3ClientSigner(ClientSigner):
    """
    Client signer backed by an ``AsyncWeb3`` connection whose provider holds
    the account (a local dev node, a wallet RPC). Signing goes through
    ``eth_signTypedData_v4``; no key material is held here.
    """

    def __init__(self, w3: Any, address: str) -> None:
        self._w3 = w3
        self._address = address

    @classmethod
    async def from_web3(cls, w3: Any, account_index: int = 0) -> "Web3ClientSigner":
        """Use one of the accounts the provider manages."""
        accounts = await w3.eth.accounts
        if not accounts:
            raise SignatureCreationError("Web3 provider exposes no accounts")
        return cls(w3, accounts[account_index])

    def get_address(self) -> str:
        return self._address

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        primary_type: str,
    ) -> str:
        typed_data = to_json_typed_data(build_typed_data(domain, types, message, primary_type))
        try:
            signature = await self._w3.eth.sign_typed_data(self._address, typed_data)
        except Exception as e:
            raise SignatureCreationError(f"Wallet failed to sign typed data: {e}") from e
        return "0x" + bytes(signature).hex()
