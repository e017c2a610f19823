"""
Server mechanism base interface
"""

from abc import ABC, abstractmethod

from x402.types import AtomicAmount, PaymentRequirements, Price, TokenAsset


class ServerMechanism(ABC):
    """
    Abstract base class for resource-server payment mechanisms.

    Responsible for pricing and for the scheme-specific parts of the
    requirements a server advertises.
    """

    @abstractmethod
    def scheme(self) -> str:
        """Get the payment scheme name"""
        pass

    @abstractmethod
    def parse_price(self, price: Price, network: str) -> AtomicAmount:
        """Resolve *price* to an atomic amount and asset"""
        pass

    @abstractmethod
    def enhance_payment_requirements(
        self,
        requirements: PaymentRequirements,
        asset: TokenAsset,
    ) -> PaymentRequirements:
        """Return requirements with scheme metadata added"""
        pass

    @abstractmethod
    def validate_payment_requirements(self, requirements: PaymentRequirements) -> bool:
        """Validate payment requirements"""
        pass
