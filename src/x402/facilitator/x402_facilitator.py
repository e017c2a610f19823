"""
X402Facilitator - Core payment processor for x402 protocol
"""

import logging

from x402.mechanisms._base.facilitator import FacilitatorMechanism
from x402.types import (
    X402_VERSION,
    ErrorReason,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedKind,
    SupportedResponse,
    VerifyResponse,
)

logger = logging.getLogger(__name__)


class X402Facilitator:
    """
    Core payment processor for x402 protocol.

    Manages payment mechanisms and coordinates verification/settlement.
    """

    def __init__(self) -> None:
        self._mechanisms: dict[str, dict[str, FacilitatorMechanism]] = {}

    def register(
        self,
        networks: list[str],
        mechanism: FacilitatorMechanism,
    ) -> "X402Facilitator":
        """
        Register a payment mechanism for multiple networks.

        Args:
            networks: List of network identifiers
            mechanism: Facilitator mechanism instance

        Returns:
            self for method chaining
        """
        scheme = mechanism.scheme()
        for network in networks:
            self._mechanisms.setdefault(network, {})[scheme] = mechanism
            logger.info("Facilitator mechanism registered: scheme=%s, network=%s", scheme, network)
        return self

    def supported(self) -> SupportedResponse:
        """Return supported network/scheme combinations."""
        kinds = [
            SupportedKind(x402Version=X402_VERSION, scheme=scheme, network=network)
            for network, schemes in self._mechanisms.items()
            for scheme in schemes
        ]
        return SupportedResponse(kinds=kinds)

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """
        Verify payment signature and validity.

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            VerifyResponse
        """
        mechanism = self._find_mechanism(requirements.network, requirements.scheme)
        if mechanism is None:
            return VerifyResponse(
                isValid=False,
                invalidReason=self._unsupported_reason(requirements),
                payer=payload.payload.authorization.from_address,
            )
        return await mechanism.verify(payload, requirements)

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        """
        Execute payment settlement.

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            SettleResponse with the transaction hash
        """
        mechanism = self._find_mechanism(requirements.network, requirements.scheme)
        if mechanism is None:
            return SettleResponse(
                success=False,
                errorReason=self._unsupported_reason(requirements),
                network=requirements.network,
                payer=payload.payload.authorization.from_address,
            )
        return await mechanism.settle(payload, requirements)

    def _unsupported_reason(self, requirements: PaymentRequirements) -> str:
        if requirements.network in self._mechanisms:
            return ErrorReason.INVALID_SCHEME
        return ErrorReason.INVALID_NETWORK

    def _find_mechanism(self, network: str, scheme: str) -> FacilitatorMechanism | None:
        """Find mechanism for network and scheme"""
        return self._mechanisms.get(network, {}).get(scheme)
