"""
X402Server - Core payment server for x402 protocol
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from x402.config import NetworkConfig
from x402.exceptions import ConfigurationError, UnsupportedSchemeError
from x402.mechanisms._base.server import ServerMechanism
from x402.mechanisms._exact_base.types import SCHEME_EXACT
from x402.types import (
    X402_VERSION,
    PaymentPayload,
    PaymentRequiredResponse,
    PaymentRequirements,
    Price,
    SettleResponse,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/json"
DEFAULT_MAX_TIMEOUT_SECONDS = 300


class Facilitator(Protocol):
    """Anything that verifies and settles: a FacilitatorClient or a local X402Facilitator"""

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse: ...

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse: ...


@dataclass
class PaymentMiddlewareConfig:
    """Per-route options for the advertised requirements"""

    description: str = ""
    mime_type: str = DEFAULT_MIME_TYPE
    max_timeout_seconds: int = DEFAULT_MAX_TIMEOUT_SECONDS
    output_schema: dict[str, Any] | None = None
    custom_paywall_html: str | None = None
    resource: str | None = None
    # Release the response before settling; settlement failures are only logged
    settle_after_response: bool = False


@dataclass
class RouteConfig:
    """Resource payment configuration"""

    price: Price
    network: str = NetworkConfig.DEFAULT_NETWORK
    config: PaymentMiddlewareConfig = field(default_factory=PaymentMiddlewareConfig)
    scheme: str = SCHEME_EXACT


RoutesConfig = dict[str, Union[Price, RouteConfig]]


class X402Server:
    """
    Core payment server for x402 protocol.

    Manages server mechanisms and the facilitator, builds requirements and
    forwards verification/settlement.
    """

    def __init__(
        self,
        pay_to: str,
        facilitator: Facilitator,
        auto_register_evm: bool = True,
    ) -> None:
        """
        Initialize X402Server.

        Args:
            pay_to: Recipient address for every route
            facilitator: Facilitator used for verify/settle
            auto_register_evm: Register the EVM exact mechanism
        """
        self._pay_to = pay_to
        self._facilitator = facilitator
        self._mechanisms: dict[tuple[str, str], ServerMechanism] = {}

        if auto_register_evm:
            from x402.mechanisms.evm.exact import ExactEvmServerMechanism

            self.register(NetworkConfig.EVM_FAMILY, ExactEvmServerMechanism())

    @property
    def pay_to(self) -> str:
        return self._pay_to

    def register(self, network_family: str, mechanism: ServerMechanism) -> "X402Server":
        """
        Register a payment mechanism for a network family.

        Returns:
            self for method chaining
        """
        self._mechanisms[(mechanism.scheme(), network_family)] = mechanism
        return self

    def get_mechanism(self, scheme: str, network: str) -> ServerMechanism:
        """
        Raises:
            UnsupportedNetworkError: Unknown network
            UnsupportedSchemeError: No mechanism for the scheme on that network family
        """
        family = NetworkConfig.get_family(network)
        mechanism = self._mechanisms.get((scheme, family))
        if mechanism is None:
            raise UnsupportedSchemeError(f"No mechanism registered for {scheme} on {network}")
        return mechanism

    def build_payment_requirements(
        self,
        route: RouteConfig,
        resource_url: str,
    ) -> PaymentRequirements:
        """Build payment requirements for one request to a priced route.

        Args:
            route: Route configuration
            resource_url: URL of the request, used unless the route overrides it
        """
        mechanism = self.get_mechanism(route.scheme, route.network)
        atomic = mechanism.parse_price(route.price, route.network)
        options = route.config

        requirements = PaymentRequirements(
            scheme=route.scheme,
            network=route.network,
            maxAmountRequired=atomic.max_amount_required,
            resource=options.resource or resource_url,
            description=options.description,
            mimeType=options.mime_type,
            payTo=self._pay_to,
            maxTimeoutSeconds=options.max_timeout_seconds,
            asset=atomic.asset.address,
            outputSchema=options.output_schema,
        )
        requirements = mechanism.enhance_payment_requirements(requirements, atomic.asset)
        if not mechanism.validate_payment_requirements(requirements):
            raise ConfigurationError(
                f"Invalid payment requirements for {route.scheme} on {route.network}"
            )
        return requirements

    def create_payment_required_response(
        self,
        requirements: list[PaymentRequirements],
        error: str,
        payer: str | None = None,
    ) -> PaymentRequiredResponse:
        """Create the 402 Payment Required body."""
        return PaymentRequiredResponse(
            x402Version=X402_VERSION,
            error=error,
            accepts=requirements,
            payer=payer,
        )

    async def verify_payment(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """Verify payment through the facilitator."""
        logger.info(
            "Verifying payment: network=%s, payer=%s",
            payload.network,
            payload.payload.authorization.from_address,
        )
        return await self._facilitator.verify(payload, requirements)

    async def settle_payment(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        """Settle payment through the facilitator."""
        logger.info(
            "Settling payment: network=%s, payer=%s",
            payload.network,
            payload.payload.authorization.from_address,
        )
        return await self._facilitator.settle(payload, requirements)
