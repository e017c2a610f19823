"""
X402Client - Core payment client for x402 protocol
"""

import logging
from typing import Callable

from x402.config import NetworkConfig
from x402.encoding import encode_payment
from x402.exceptions import UnsupportedNetworkError
from x402.mechanisms._base.client import ClientMechanism
from x402.mechanisms._exact_base.types import SCHEME_EXACT
from x402.tokens import TokenRegistry
from x402.types import PaymentPayload, PaymentRequirements, UnsignedPaymentPayload

logger = logging.getLogger(__name__)


PaymentRequirementsSelector = Callable[[list[PaymentRequirements]], PaymentRequirements]


class X402Client:
    """
    Core payment client for x402 protocol.

    Keeps a registry of mechanisms keyed by (scheme, network family) and
    coordinates selecting, preparing and signing payments.
    """

    def __init__(self, preferred_network: str | None = None) -> None:
        """
        Initialize X402Client.

        Args:
            preferred_network: Network to prefer when several are accepted
        """
        self._mechanisms: dict[tuple[str, str], ClientMechanism] = {}
        self._preferred_network = preferred_network

    def register(self, network_family: str, mechanism: ClientMechanism) -> "X402Client":
        """
        Register a payment mechanism for a network family.

        Args:
            network_family: Network family (e.g., NetworkConfig.EVM_FAMILY)
            mechanism: Payment mechanism instance

        Returns:
            self for method chaining
        """
        logger.info(
            "Registering %s mechanism for network family '%s'", mechanism.scheme(), network_family
        )
        self._mechanisms[(mechanism.scheme(), network_family)] = mechanism
        return self

    def select_payment_requirements(
        self,
        accepts: list[PaymentRequirements],
        network: str | None = None,
        scheme: str = SCHEME_EXACT,
    ) -> PaymentRequirements:
        """
        Select payment requirements from available options.

        Keeps options with a registered mechanism for *scheme*, prefers the
        requested network (or the client's preferred network), then prefers
        the network's default stablecoin, else takes the first.

        Raises:
            UnsupportedNetworkError: No supported payment requirements found
        """
        logger.info("Selecting payment requirements from %d options", len(accepts))

        candidates = [
            r
            for r in accepts
            if r.scheme == scheme and self._find_mechanism(r.scheme, r.network) is not None
        ]
        if not candidates:
            logger.error("No supported payment requirements found")
            raise UnsupportedNetworkError("No supported payment requirements found")

        preferred_network = network or self._preferred_network
        if preferred_network:
            candidates = [r for r in candidates if r.network == preferred_network] or candidates

        stable = [r for r in candidates if TokenRegistry.is_default_asset(r.network, r.asset)]
        selected = (stable or candidates)[0]

        logger.info(
            "Selected payment requirement: network=%s, scheme=%s, amount=%s",
            selected.network,
            selected.scheme,
            selected.max_amount_required,
        )
        return selected

    def prepare_payment_payload(
        self,
        from_address: str,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> UnsignedPaymentPayload:
        """Build an unsigned payload without touching the signer."""
        return self._require_mechanism(requirements).prepare_payment_payload(
            from_address, x402_version, requirements
        )

    async def sign_payment_payload(
        self,
        requirements: PaymentRequirements,
        unsigned: UnsignedPaymentPayload,
    ) -> PaymentPayload:
        """Sign a prepared payload with the mechanism's signer."""
        return await self._require_mechanism(requirements).sign_payment_payload(
            requirements, unsigned
        )

    async def create_payment_payload(
        self,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> PaymentPayload:
        """
        Create payment payload for given requirements.

        Args:
            x402_version: Protocol version announced by the server
            requirements: Selected payment requirements

        Returns:
            Signed payment payload
        """
        logger.info(
            "Creating payment payload for scheme=%s, network=%s, resource=%s",
            requirements.scheme,
            requirements.network,
            requirements.resource,
        )
        mechanism = self._require_mechanism(requirements)
        logger.debug("Using mechanism: %s", mechanism.__class__.__name__)
        return await mechanism.create_payment_payload(x402_version, requirements)

    async def create_payment_header(
        self,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> str:
        """Prepare, sign and encode a payment as an X-PAYMENT header value."""
        payload = await self.create_payment_payload(x402_version, requirements)
        return encode_payment(payload)

    def _require_mechanism(self, requirements: PaymentRequirements) -> ClientMechanism:
        mechanism = self._find_mechanism(requirements.scheme, requirements.network)
        if mechanism is None:
            logger.error(
                "No mechanism registered for scheme=%s, network=%s",
                requirements.scheme,
                requirements.network,
            )
            raise UnsupportedNetworkError(
                f"No mechanism registered for scheme={requirements.scheme}, "
                f"network={requirements.network}"
            )
        return mechanism

    def _find_mechanism(self, scheme: str, network: str) -> ClientMechanism | None:
        """Find mechanism for scheme and network"""
        try:
            family = NetworkConfig.get_family(network)
        except UnsupportedNetworkError:
            return None
        return self._mechanisms.get((scheme, family))
