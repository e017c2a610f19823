"""
Client mechanism base interface
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from x402.types import PaymentPayload, PaymentRequirements, UnsignedPaymentPayload

if TYPE_CHECKING:
    from x402.signers.client.base import ClientSigner


class ClientMechanism(ABC):
    """
    Abstract base class for client payment mechanisms.

    Responsible for creating payment payloads for a scheme on one network family.
    Preparation is pure; signing needs the mechanism's signer.
    """

    @abstractmethod
    def scheme(self) -> str:
        """Get the payment scheme name"""
        pass

    @abstractmethod
    def get_signer(self) -> "ClientSigner":
        """Return the signer used by this mechanism."""
        pass

    @abstractmethod
    def prepare_payment_payload(
        self,
        from_address: str,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> UnsignedPaymentPayload:
        """Build the unsigned payload for *requirements*"""
        pass

    @abstractmethod
    async def sign_payment_payload(
        self,
        requirements: PaymentRequirements,
        unsigned: UnsignedPaymentPayload,
    ) -> PaymentPayload:
        """Sign a prepared payload"""
        pass

    async def create_payment_payload(
        self,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> PaymentPayload:
        """Prepare and sign in one step."""
        unsigned = self.prepare_payment_payload(
            self.get_signer().get_address(), x402_version, requirements
        )
        return await self.sign_payment_payload(requirements, unsigned)
