"""
X402HttpClient - HTTP client adapter with automatic 402 payment handling
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
import pydantic

from x402.clients.x402_client import PaymentRequirementsSelector, X402Client
from x402.exceptions import PaymentAmountExceededError, PaymentRetryError
from x402.types import PaymentRequiredResponse

logger = logging.getLogger(__name__)


PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"
EXPOSE_HEADERS_HEADER = "Access-Control-Expose-Headers"


@dataclass(frozen=True)
class PaymentAttempt:
    """Where a request is in the pay-and-retry cycle."""

    payment_header: str | None = None

    @property
    def retried(self) -> bool:
        return self.payment_header is not None

    def with_payment(self, payment_header: str) -> "PaymentAttempt":
        return PaymentAttempt(payment_header=payment_header)


class X402HttpClient:
    """
    HTTP client adapter with automatic 402 payment handling.

    Wraps httpx.AsyncClient: a 402 carrying payment requirements is paid and
    the request is retried exactly once. A second 402 raises PaymentRetryError.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        x402_client: X402Client,
        selector: PaymentRequirementsSelector | None = None,
        max_value: int | None = None,
    ) -> None:
        """
        Initialize HTTP client adapter.

        Args:
            http_client: httpx.AsyncClient instance
            x402_client: X402Client instance
            selector: Custom payment requirements selector (optional)
            max_value: Largest maxAmountRequired (atomic units) the client will pay
        """
        self._http_client = http_client
        self._x402_client = x402_client
        self._selector = selector
        self._max_value = max_value

    async def request_with_payment(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make HTTP request with automatic 402 payment handling.

        Flow:
            1. Send original request
            2. If 402, parse the payment requirements from the body
            3. Select requirements and create the X-PAYMENT header
            4. Retry once with the header
        """
        return await self._send(method, url, PaymentAttempt(), kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET request with payment handling"""
        return await self.request_with_payment("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """POST request with payment handling"""
        return await self.request_with_payment("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """PUT request with payment handling"""
        return await self.request_with_payment("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """DELETE request with payment handling"""
        return await self.request_with_payment("DELETE", url, **kwargs)

    async def _send(
        self,
        method: str,
        url: str,
        attempt: PaymentAttempt,
        kwargs: dict[str, Any],
    ) -> httpx.Response:
        request_kwargs = dict(kwargs)
        if attempt.payment_header is not None:
            headers = dict(kwargs.get("headers") or {})
            headers[PAYMENT_HEADER] = attempt.payment_header
            headers[EXPOSE_HEADERS_HEADER] = PAYMENT_RESPONSE_HEADER
            request_kwargs["headers"] = headers

        logger.info("Making %s request to %s (paid=%s)", method, url, attempt.retried)
        response = await self._http_client.request(method, url, **request_kwargs)
        logger.info("Received response: status=%s", response.status_code)

        if response.status_code != 402:
            return response

        if attempt.retried:
            logger.error("Payment retry rejected with body: %s", response.text[:500])
            raise PaymentRetryError(response)

        payment_required = self._parse_payment_required(response)
        if payment_required is None:
            logger.error("Failed to parse payment requirements from 402 response")
            return response

        logger.info("Received 402 with %d payment options", len(payment_required.accepts))
        if self._selector:
            requirements = self._selector(payment_required.accepts)
        else:
            requirements = self._x402_client.select_payment_requirements(payment_required.accepts)

        amount = int(requirements.max_amount_required)
        if self._max_value is not None and amount > self._max_value:
            raise PaymentAmountExceededError(amount, self._max_value)

        payment_header = await self._x402_client.create_payment_header(
            payment_required.x402_version, requirements
        )
        logger.info("Payment header created, retrying request with payment")
        return await self._send(method, url, attempt.with_payment(payment_header), kwargs)

    @staticmethod
    def _parse_payment_required(response: httpx.Response) -> PaymentRequiredResponse | None:
        """Parse the 402 body, or None if it does not describe a payment"""
        try:
            body = response.json()
        except ValueError:
            logger.warning("402 response body is not JSON")
            return None

        if not isinstance(body, dict) or "x402Version" not in body or "accepts" not in body:
            logger.warning("402 response body does not contain x402Version/accepts")
            return None

        try:
            return PaymentRequiredResponse.model_validate(body)
        except pydantic.ValidationError as e:
            logger.warning("Invalid payment requirements in 402 body: %s", e)
            return None
