"""
FacilitatorClient - Client for communicating with facilitator service
"""

import logging
from typing import Awaitable, Callable

import httpx

from x402.config import DEFAULT_FACILITATOR_URL
from x402.exceptions import FacilitatorError
from x402.types import (
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedResponse,
    VerifyRequest,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

# Returns per-endpoint headers, e.g. {"verify": {...}, "settle": {...}, "supported": {...}}
CreateAuthHeaders = Callable[[], Awaitable[dict[str, dict[str, str]]]]


class FacilitatorClient:
    """
    Client for communicating with facilitator service.

    Handles verify, settle and supported queries.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FACILITATOR_URL,
        headers: dict[str, str] | None = None,
        create_auth_headers: CreateAuthHeaders | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize facilitator client.

        Args:
            base_url: Facilitator service base URL
            headers: Custom HTTP headers sent with every request
            create_auth_headers: Async callback producing per-endpoint auth headers
            http_client: Pre-configured httpx client (its base_url is used as-is)
            timeout: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._create_auth_headers = create_auth_headers
        self._timeout = timeout
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "FacilitatorClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def supported(self) -> SupportedResponse:
        """
        Query facilitator supported capabilities.

        Returns:
            SupportedResponse with supported networks/schemes
        """
        data = await self._request("GET", "/supported", "supported")
        return SupportedResponse.model_validate(data)

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """
        Verify payment (without executing on-chain transaction).

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            VerifyResponse
        """
        data = await self._request("POST", "/verify", "verify", self._body(payload, requirements))
        return VerifyResponse.model_validate(data)

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        """
        Execute payment settlement (on-chain transaction).

        Args:
            payload: Payment payload from client
            requirements: Payment requirements

        Returns:
            SettleResponse with the transaction hash
        """
        data = await self._request("POST", "/settle", "settle", self._body(payload, requirements))
        return SettleResponse.model_validate(data)

    @staticmethod
    def _body(payload: PaymentPayload, requirements: PaymentRequirements) -> dict:
        request = VerifyRequest(
            x402Version=payload.x402_version,
            paymentPayload=payload,
            paymentRequirements=requirements,
        )
        return request.model_dump(by_alias=True, exclude_none=True)

    async def _request(
        self,
        method: str,
        path: str,
        endpoint: str,
        json_body: dict | None = None,
    ) -> dict:
        client = await self._get_client()
        headers: dict[str, str] = {}
        if self._create_auth_headers is not None:
            auth_headers = await self._create_auth_headers()
            headers.update(auth_headers.get(endpoint, {}))

        try:
            response = await client.request(method, path, json=json_body, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Facilitator %s failed: status=%s body=%s",
                endpoint,
                e.response.status_code,
                e.response.text[:500],
            )
            raise FacilitatorError(
                f"Facilitator {endpoint} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Facilitator %s request failed: %s", endpoint, e)
            raise FacilitatorError(f"Facilitator {endpoint} request failed: {e}") from e
