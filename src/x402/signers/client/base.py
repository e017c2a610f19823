"""
Client signer base interface
"""

from abc import ABC, abstractmethod
from typing import Any


class ClientSigner(ABC):
    """
    Abstract base class for client signers.

    A signer owns (or fronts) the payer's key and produces EIP-712
    signatures; the mechanisms never see key material.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Get the payer's account address"""
        pass

    @abstractmethod
    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        primary_type: str,
    ) -> str:
        """
        Sign EIP-712 typed data.

        Args:
            domain: EIP-712 domain
            types: Type definitions (without EIP712Domain)
            message: Message to sign
            primary_type: Primary type name

        Returns:
            0x-prefixed 65-byte signature

        Raises:
            SignatureCreationError: If signing fails
        """
        pass
