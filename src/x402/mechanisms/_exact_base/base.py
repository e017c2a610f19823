"""
Base classes for exact mechanism.

Provides ChainAdapter ABC and base Client/Facilitator/Server mechanisms
that delegate chain-specific operations to the adapter.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from x402.abi import TRANSFER_WITH_AUTHORIZATION_ABI, get_abi_json
from x402.exceptions import UnsupportedNetworkError, X402Error
from x402.mechanisms._base.client import ClientMechanism
from x402.mechanisms._base.facilitator import FacilitatorMechanism
from x402.mechanisms._base.server import ServerMechanism
from x402.mechanisms._exact_base.types import (
    SCHEME_EXACT,
    TRANSFER_AUTH_EIP712_TYPES,
    TRANSFER_AUTH_PRIMARY_TYPE,
    VALID_BEFORE_BUFFER_SECONDS,
    build_eip712_domain,
    build_eip712_message,
    create_nonce,
    create_validity_window,
    split_signature,
)
from x402.tokens import TokenRegistry, process_price_to_atomic_amount
from x402.tokens.version_cache import TokenVersionCache
from x402.types import (
    AtomicAmount,
    Eip712Domain,
    ErrorReason,
    ExactEvmAuthorization,
    ExactEvmPayload,
    PaymentPayload,
    PaymentRequirements,
    Price,
    SettleResponse,
    TokenAsset,
    UnsignedExactEvmPayload,
    UnsignedPaymentPayload,
    VerifyResponse,
)

if TYPE_CHECKING:
    from x402.signers.client import ClientSigner
    from x402.signers.facilitator import ChainReader, FacilitatorSigner

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Chain adapter interface
# ---------------------------------------------------------------------------


class ChainAdapter(ABC):
    """Encapsulates chain-family differences for exact."""

    @abstractmethod
    def parse_chain_id(self, network: str) -> int:
        """Extract chain ID from a network string."""

    @abstractmethod
    def validate_network(self, network: str) -> bool:
        """Return True if *network* belongs to this chain family."""

    @abstractmethod
    def validate_address(self, address: str) -> bool:
        """Return True if *address* has the correct format for this chain."""

    @abstractmethod
    def normalize_address(self, address: str) -> str:
        """Normalize *address* for case-insensitive comparison."""

    @abstractmethod
    def to_signing_address(self, address: str) -> str:
        """Convert *address* to the form passed to contracts and signers."""


# ---------------------------------------------------------------------------
# Signing domain resolution
# ---------------------------------------------------------------------------


class SigningDomainResolver:
    """
    Resolves a token's EIP-712 name/version for a set of requirements.

    Lookup order: ``requirements.extra``, the version cache, the chain
    reader, then the token registry.
    """

    def __init__(
        self,
        reader: "ChainReader | None" = None,
        cache: TokenVersionCache | None = None,
    ) -> None:
        self._reader = reader
        self._cache = cache

    async def resolve(self, requirements: PaymentRequirements) -> Eip712Domain:
        extra = requirements.extra or {}
        name = extra.get("name")
        version = extra.get("version")
        if name and version:
            return Eip712Domain(name=name, version=version)

        domain = await self._lookup(requirements.network, requirements.asset)
        return Eip712Domain(name=name or domain.name, version=version or domain.version)

    async def _lookup(self, network: str, asset: str) -> Eip712Domain:
        if self._cache is not None:
            cached = self._cache.get(network, asset)
            if cached is not None:
                return cached

        if self._reader is not None:
            domain = await self._reader.get_token_domain(network, asset)
            if self._cache is not None:
                self._cache.set(network, asset, domain)
            return domain

        token = TokenRegistry.find_by_address(network, asset)
        if token is None:
            raise UnsupportedNetworkError(
                f"Cannot resolve signing domain for asset {asset} on {network}"
            )
        return Eip712Domain(name=token.name, version=token.version)


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class ExactBaseClientMechanism(ClientMechanism):
    """Base TransferWithAuthorization client mechanism."""

    def __init__(
        self,
        signer: "ClientSigner",
        adapter: ChainAdapter,
        chain_reader: "ChainReader | None" = None,
        version_cache: TokenVersionCache | None = None,
    ) -> None:
        self._signer = signer
        self._adapter = adapter
        self._domains = SigningDomainResolver(chain_reader, version_cache)

    def scheme(self) -> str:
        return SCHEME_EXACT

    def get_signer(self) -> "ClientSigner":
        return self._signer

    def prepare_payment_payload(
        self,
        from_address: str,
        x402_version: int,
        requirements: PaymentRequirements,
    ) -> UnsignedPaymentPayload:
        valid_after, valid_before = create_validity_window(requirements.max_timeout_seconds)
        authorization = ExactEvmAuthorization(
            **{
                "from": from_address,
                "to": requirements.pay_to,
                "value": requirements.max_amount_required,
                "validAfter": str(valid_after),
                "validBefore": str(valid_before),
                "nonce": create_nonce(),
            }
        )
        return UnsignedPaymentPayload(
            x402Version=x402_version,
            scheme=requirements.scheme,
            network=requirements.network,
            payload=UnsignedExactEvmPayload(authorization=authorization),
        )

    async def sign_payment_payload(
        self,
        requirements: PaymentRequirements,
        unsigned: UnsignedPaymentPayload,
    ) -> PaymentPayload:
        adapter = self._adapter
        authorization = unsigned.payload.authorization

        token = await self._domains.resolve(requirements)
        domain = build_eip712_domain(
            token.name,
            token.version,
            adapter.parse_chain_id(requirements.network),
            adapter.to_signing_address(requirements.asset),
        )

        logger.info(
            "[EXACT] Signing TransferWithAuthorization: from=%s, to=%s, value=%s, token=%s",
            authorization.from_address,
            authorization.to,
            authorization.value,
            requirements.asset,
        )

        signature = await self._signer.sign_typed_data(
            domain=domain,
            types=TRANSFER_AUTH_EIP712_TYPES,
            message=build_eip712_message(authorization),
            primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        )

        return PaymentPayload(
            x402Version=unsigned.x402_version,
            scheme=unsigned.scheme,
            network=unsigned.network,
            payload=ExactEvmPayload(signature=signature, authorization=authorization),
        )


# ---------------------------------------------------------------------------
# Base facilitator
# ---------------------------------------------------------------------------


class ExactBaseFacilitatorMechanism(FacilitatorMechanism):
    """Base TransferWithAuthorization facilitator mechanism.

    Verification reads through *reader* (defaults to the signer); settlement
    writes through *signer*.
    """

    def __init__(
        self,
        signer: "FacilitatorSigner",
        adapter: ChainAdapter,
        reader: "ChainReader | None" = None,
        version_cache: TokenVersionCache | None = None,
        receipt_timeout: int = 120,
    ) -> None:
        self._signer = signer
        self._reader = reader if reader is not None else signer
        self._adapter = adapter
        self._domains = SigningDomainResolver(self._reader, version_cache)
        self._receipt_timeout = receipt_timeout

    def scheme(self) -> str:
        return SCHEME_EXACT

    # ------------------------------------------------------------------
    # verify
    # ------------------------------------------------------------------

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        adapter = self._adapter
        auth = payload.payload.authorization
        payer = auth.from_address

        if payload.scheme != SCHEME_EXACT or requirements.scheme != SCHEME_EXACT:
            return self._invalid(ErrorReason.INVALID_SCHEME, payer)

        if (
            not adapter.validate_network(requirements.network)
            or payload.network != requirements.network
        ):
            return self._invalid(ErrorReason.INVALID_NETWORK, payer)

        try:
            token = await self._domains.resolve(requirements)
            chain_id = adapter.parse_chain_id(requirements.network)
        except X402Error as e:
            logger.warning("[EXACT] Signing domain unavailable: %s", e)
            return self._invalid(ErrorReason.INVALID_NETWORK, payer)

        domain = build_eip712_domain(
            token.name,
            token.version,
            chain_id,
            adapter.to_signing_address(requirements.asset),
        )
        signature_ok = await self._reader.verify_typed_data(
            address=payer,
            domain=domain,
            types=TRANSFER_AUTH_EIP712_TYPES,
            message=build_eip712_message(auth),
            signature=payload.payload.signature,
            primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        )
        if not signature_ok:
            return self._invalid(ErrorReason.INVALID_SIGNATURE, payer)

        now = int(time.time())
        if int(auth.valid_before) < now + VALID_BEFORE_BUFFER_SECONDS:
            return self._invalid(ErrorReason.INVALID_VALID_BEFORE, payer)
        if int(auth.valid_after) > now:
            return self._invalid(ErrorReason.INVALID_VALID_AFTER, payer)

        required = int(requirements.max_amount_required)
        try:
            balance = await self._reader.get_balance(requirements.network, requirements.asset, payer)
        except X402Error as e:
            logger.warning("[EXACT] Balance lookup failed for %s: %s", payer, e, exc_info=True)
            return self._invalid(ErrorReason.UNEXPECTED_VERIFY_ERROR, payer)
        if balance < required:
            return self._invalid(ErrorReason.INSUFFICIENT_FUNDS, payer)

        if int(auth.value) < required:
            return self._invalid(ErrorReason.INVALID_VALUE, payer)

        if adapter.normalize_address(auth.to) != adapter.normalize_address(requirements.pay_to):
            return self._invalid(ErrorReason.RECIPIENT_MISMATCH, payer)

        return VerifyResponse(isValid=True, payer=payer)

    # ------------------------------------------------------------------
    # settle
    # ------------------------------------------------------------------

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        network = requirements.network
        verify_result = await self.verify(payload, requirements)
        if not verify_result.is_valid:
            return SettleResponse(
                success=False,
                errorReason=verify_result.invalid_reason,
                network=network,
                payer=verify_result.payer,
            )

        adapter = self._adapter
        auth = payload.payload.authorization
        payer = auth.from_address
        v, r, s = split_signature(payload.payload.signature)

        args = [
            adapter.to_signing_address(auth.from_address),
            adapter.to_signing_address(auth.to),
            int(auth.value),
            int(auth.valid_after),
            int(auth.valid_before),
            build_eip712_message(auth)["nonce"],
            v,
            r,
            s,
        ]

        logger.info(
            "[EXACT] Calling transferWithAuthorization on token=%s, network=%s",
            requirements.asset,
            network,
        )

        tx_hash = await self._signer.write_contract(
            contract_address=requirements.asset,
            abi=get_abi_json(TRANSFER_WITH_AUTHORIZATION_ABI),
            method="transferWithAuthorization",
            args=args,
            network=network,
        )
        if tx_hash is None:
            return SettleResponse(
                success=False,
                errorReason=ErrorReason.UNEXPECTED_SETTLE_ERROR,
                network=network,
                payer=payer,
            )

        try:
            receipt = await self._signer.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout, network=network
            )
        except X402Error as e:
            logger.error("[EXACT] Settlement receipt unavailable for tx=%s: %s", tx_hash, e)
            return self._failed_transaction(tx_hash, network, payer)

        raw_status = receipt.get("status")
        tx_status = raw_status.lower() if isinstance(raw_status, str) else raw_status
        if tx_status in ("failed", "0", 0):
            logger.error("[EXACT] Settlement transaction failed on-chain: tx=%s", tx_hash)
            return self._failed_transaction(tx_hash, network, payer)

        logger.info("[EXACT] Settled tx=%s payer=%s", tx_hash, payer)
        return SettleResponse(success=True, transaction=tx_hash, network=network, payer=payer)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _invalid(reason: str, payer: str) -> VerifyResponse:
        return VerifyResponse(isValid=False, invalidReason=reason, payer=payer)

    @staticmethod
    def _failed_transaction(tx_hash: str, network: str, payer: str) -> SettleResponse:
        return SettleResponse(
            success=False,
            errorReason=ErrorReason.TRANSACTION_FAILED,
            transaction=tx_hash,
            network=network,
            payer=payer,
        )


# ---------------------------------------------------------------------------
# Base server
# ---------------------------------------------------------------------------


class ExactBaseServerMechanism(ServerMechanism):
    """Base TransferWithAuthorization server mechanism."""

    def __init__(self, adapter: ChainAdapter) -> None:
        self._adapter = adapter

    def scheme(self) -> str:
        return SCHEME_EXACT

    def parse_price(self, price: Price, network: str) -> AtomicAmount:
        return process_price_to_atomic_amount(price, network)

    def enhance_payment_requirements(
        self,
        requirements: PaymentRequirements,
        asset: TokenAsset,
    ) -> PaymentRequirements:
        extra = dict(requirements.extra or {})
        extra.setdefault("name", asset.eip712.name)
        extra.setdefault("version", asset.eip712.version)
        return requirements.model_copy(update={"extra": extra})

    def validate_payment_requirements(self, requirements: PaymentRequirements) -> bool:
        adapter = self._adapter
        if not adapter.validate_network(requirements.network):
            return False
        if not adapter.validate_address(requirements.asset):
            return False
        if not adapter.validate_address(requirements.pay_to):
            return False
        # validBefore = now + maxTimeoutSeconds must clear the verifier buffer
        if requirements.max_timeout_seconds <= VALID_BEFORE_BUFFER_SECONDS:
            return False
        return int(requirements.max_amount_required) > 0
