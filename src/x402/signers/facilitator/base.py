"""
Facilitator chain capability interfaces
"""

from abc import ABC, abstractmethod
from typing import Any

from x402.types import Eip712Domain


class ChainReader(ABC):
    """
    Read-only chain capability used for verification.

    Responsible for signature recovery, balance lookups and reading a token's
    signing domain. Chain failures are raised as ``ChainError``.
    """

    @abstractmethod
    async def verify_typed_data(
        self,
        address: str,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        signature: str,
        primary_type: str,
    ) -> bool:
        """
        Verify EIP-712 typed data signature.

        Args:
            address: Expected signer address
            domain: EIP-712 domain
            types: Type definitions (without EIP712Domain)
            message: Signed message
            signature: Signature to verify
            primary_type: Primary type name

        Returns:
            True if the signature recovers to *address*
        """
        pass

    @abstractmethod
    async def get_balance(self, network: str, asset: str, owner: str) -> int:
        """Get the ERC20 balance of *owner* in atomic units"""
        pass

    @abstractmethod
    async def get_token_domain(self, network: str, asset: str) -> Eip712Domain:
        """Read the token contract's EIP-712 domain name and version"""
        pass


class FacilitatorSigner(ChainReader):
    """
    Write-capable chain capability used for settlement.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Get the facilitator's account address"""
        pass

    @abstractmethod
    async def write_contract(
        self,
        contract_address: str,
        abi: str,
        method: str,
        args: list[Any],
        network: str,
    ) -> str | None:
        """
        Execute a contract write transaction.

        Args:
            contract_address: Contract address
            abi: Contract ABI (JSON string)
            method: Method name
            args: Method arguments
            network: Network identifier (e.g. "base-sepolia")

        Returns:
            Transaction hash, or None if submission failed
        """
        pass

    @abstractmethod
    async def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: int = 120,
        network: str = "",
    ) -> dict[str, Any]:
        """
        Wait for transaction confirmation.

        Returns:
            Receipt dict with ``hash``, ``blockNumber`` and ``status``
            ("confirmed" or "failed")

        Raises:
            TransactionError: If the receipt cannot be obtained in time
        """
        pass
