"""
Facilitator mechanism base interface
"""

from abc import ABC, abstractmethod

from x402.types import PaymentPayload, PaymentRequirements, SettleResponse, VerifyResponse


class FacilitatorMechanism(ABC):
    """
    Abstract base class for facilitator payment mechanisms.

    Responsible for verifying payloads and settling them on-chain.
    Payment failures are reported in the response, never raised.
    """

    @abstractmethod
    def scheme(self) -> str:
        """Get the payment scheme name"""
        pass

    @abstractmethod
    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """Verify payment payload against requirements"""
        pass

    @abstractmethod
    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        """Execute payment settlement"""
        pass
