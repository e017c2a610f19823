"""
Framework-neutral payment flow for priced routes
"""

import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Awaitable, Callable, Coroutine, Generic, Mapping, TypeVar

from x402.config import NetworkConfig
from x402.encoding import decode_payment, settle_response_header
from x402.exceptions import PaymentDecodeError
from x402.paywall import PaywallConfig, is_browser_request, render_paywall_html
from x402.server.routes import (
    RoutePattern,
    compute_route_patterns,
    find_matching_payment_requirements,
    find_matching_route,
)
from x402.server.x402_server import RoutesConfig, X402Server
from x402.tokens import TokenRegistry
from x402.types import PaymentPayload, PaymentRequirements, SettleResponse

logger = logging.getLogger(__name__)

PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"
EXPOSE_HEADERS_HEADER = "Access-Control-Expose-Headers"

MISSING_PAYMENT_ERROR = "X-PAYMENT header is required"
NO_MATCHING_REQUIREMENTS_ERROR = "Unable to find matching payment requirements"
VERIFY_FAILED_ERROR = "Payment verification failed"
SETTLE_FAILED_ERROR = "Payment settlement failed"

R = TypeVar("R")


class PaymentState(str, enum.Enum):
    """Where a request stopped in the payment flow"""

    UNMATCHED = "unmatched"
    NO_PAYMENT = "no_payment"
    DECODING = "decoding"
    REQUIREMENT_MISMATCH = "requirement_mismatch"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    SETTLEMENT_FAILED = "settlement_failed"
    SETTLED = "settled"


@dataclass(frozen=True)
class PaymentRequest:
    """The parts of an HTTP request the payment flow reads"""

    method: str
    path: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass
class PaymentResult(Generic[R]):
    """Outcome of the payment flow for one request.

    Exactly one of ``response`` (the handler ran and its response is served),
    ``html`` or ``body`` (a 402 to render) is set.
    """

    state: PaymentState
    status_code: int = 200
    body: dict[str, Any] | None = None
    html: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    response: R | None = None
    settlement: Coroutine[Any, Any, SettleResponse | None] | None = None


class PaymentFlow(Generic[R]):
    """
    Payment state machine shared by framework adapters.

    ``call_next`` runs the protected handler; ``status_of`` reads the status
    code from whatever response type the framework uses.
    """

    def __init__(
        self,
        server: X402Server,
        routes: RoutesConfig,
        paywall: PaywallConfig | None = None,
        status_of: Callable[[R], int] = lambda response: response.status_code,
    ) -> None:
        self._server = server
        self._patterns = compute_route_patterns(routes)
        self._paywall = paywall
        self._status_of = status_of

        # Fail at startup on unknown networks, schemes or prices
        for pattern in self._patterns:
            self._server.build_payment_requirements(pattern.config, "http://localhost/")

    @property
    def patterns(self) -> list[RoutePattern]:
        return self._patterns

    def match(self, request: PaymentRequest) -> RoutePattern | None:
        """Priced route for the request, or None when it passes through"""
        return find_matching_route(self._patterns, request.path, request.method)

    async def handle(
        self,
        request: PaymentRequest,
        call_next: Callable[[], Awaitable[R]],
    ) -> PaymentResult[R]:
        route = self.match(request)
        if route is None:
            return PaymentResult(state=PaymentState.UNMATCHED, response=await call_next())

        requirements = self._server.build_payment_requirements(route.config, request.url)
        accepts = [requirements]

        header = request.header(PAYMENT_HEADER)
        if not header:
            return self._payment_required(request, route, accepts)

        try:
            payload = decode_payment(header)
        except PaymentDecodeError as e:
            logger.warning("Rejected X-PAYMENT header: %s", e)
            return self._reject(PaymentState.DECODING, str(e), accepts)

        selected = find_matching_payment_requirements(accepts, payload)
        if selected is None:
            return self._reject(
                PaymentState.REQUIREMENT_MISMATCH, NO_MATCHING_REQUIREMENTS_ERROR, accepts
            )

        payer = payload.payload.authorization.from_address
        try:
            verification = await self._server.verify_payment(payload, selected)
        except Exception as e:
            logger.exception("Payment verification failed: %s", e)
            return self._reject(PaymentState.VERIFYING, VERIFY_FAILED_ERROR, accepts, payer)

        if not verification.is_valid:
            logger.info("Payment invalid: reason=%s, payer=%s", verification.invalid_reason, payer)
            return self._reject(
                PaymentState.VERIFYING,
                verification.invalid_reason or "invalid_payment",
                accepts,
                verification.payer or payer,
            )

        response = await call_next()
        if self._status_of(response) >= 400:
            return PaymentResult(
                state=PaymentState.VERIFIED,
                status_code=self._status_of(response),
                response=response,
            )

        if route.config.config.settle_after_response:
            return PaymentResult(
                state=PaymentState.VERIFIED,
                status_code=self._status_of(response),
                response=response,
                settlement=self._settle_in_background(payload, selected),
            )

        try:
            settlement = await self._server.settle_payment(payload, selected)
        except Exception as e:
            logger.exception("Payment settlement failed: %s", e)
            return self._reject(PaymentState.SETTLEMENT_FAILED, SETTLE_FAILED_ERROR, accepts, payer)

        if not settlement.success:
            logger.warning(
                "Settlement unsuccessful: reason=%s, transaction=%s",
                settlement.error_reason,
                settlement.transaction,
            )
            return self._reject(
                PaymentState.SETTLEMENT_FAILED,
                settlement.error_reason or "settlement_failed",
                accepts,
                settlement.payer or payer,
            )

        logger.info("Payment settled: transaction=%s", settlement.transaction)
        return PaymentResult(
            state=PaymentState.SETTLED,
            status_code=self._status_of(response),
            response=response,
            headers={
                PAYMENT_RESPONSE_HEADER: settle_response_header(settlement),
                EXPOSE_HEADERS_HEADER: PAYMENT_RESPONSE_HEADER,
            },
        )

    async def _settle_in_background(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse | None:
        try:
            settlement = await self._server.settle_payment(payload, requirements)
        except Exception as e:
            logger.exception("Deferred settlement failed: %s", e)
            return None
        if settlement.success:
            logger.info("Deferred settlement done: transaction=%s", settlement.transaction)
        else:
            logger.error(
                "Deferred settlement unsuccessful, response already sent: reason=%s, payer=%s",
                settlement.error_reason,
                settlement.payer,
            )
        return settlement

    def _payment_required(
        self,
        request: PaymentRequest,
        route: RoutePattern,
        accepts: list[PaymentRequirements],
    ) -> PaymentResult[R]:
        if is_browser_request(request.header("Accept"), request.header("User-Agent")):
            requirements = accepts[0]
            token = TokenRegistry.find_by_address(requirements.network, requirements.asset)
            decimals = token.decimals if token else 6
            amount = Decimal(requirements.max_amount_required).scaleb(-decimals)
            return PaymentResult(
                state=PaymentState.NO_PAYMENT,
                status_code=402,
                html=render_paywall_html(
                    amount,
                    accepts,
                    request.url,
                    NetworkConfig.is_testnet(requirements.network),
                    config=self._paywall,
                    custom_html=route.config.config.custom_paywall_html,
                ),
            )
        return self._reject(PaymentState.NO_PAYMENT, MISSING_PAYMENT_ERROR, accepts)

    def _reject(
        self,
        state: PaymentState,
        error: str,
        accepts: list[PaymentRequirements],
        payer: str | None = None,
    ) -> PaymentResult[R]:
        body = self._server.create_payment_required_response(accepts, error, payer)
        return PaymentResult(
            state=state,
            status_code=402,
            body=body.model_dump(by_alias=True, exclude_none=True),
        )
