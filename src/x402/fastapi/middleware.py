"""
FastAPI middleware for x402 payment handling
"""

from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from fastapi import Request, Response
from fastapi.responses import HTMLResponse, JSONResponse

from x402.paywall import PaywallConfig
from x402.server.middleware import PaymentFlow, PaymentRequest
from x402.server.x402_server import RoutesConfig, X402Server


class X402Middleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for automatic 402 payment handling.

    Usage:
        app = FastAPI()
        server = X402Server(pay_to="0x...", facilitator=FacilitatorClient())
        app.add_middleware(
            X402Middleware,
            server=server,
            routes={"GET /weather": "$0.001"},
        )

    Protected handler responses are buffered so a failed settlement can
    still replace them with a 402.
    """

    def __init__(
        self,
        app: ASGIApp,
        server: X402Server,
        routes: RoutesConfig,
        paywall: PaywallConfig | None = None,
    ) -> None:
        super().__init__(app)
        self._flow: PaymentFlow[Response] = PaymentFlow(server, routes, paywall)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        payment_request = PaymentRequest(
            method=request.method,
            path=request.url.path,
            url=str(request.url),
            headers=dict(request.headers),
        )
        # Unpriced routes stream straight through
        if self._flow.match(payment_request) is None:
            return await call_next(request)

        async def run_handler() -> Response:
            return await _buffered(await call_next(request))

        result = await self._flow.handle(payment_request, run_handler)

        if result.html is not None:
            return HTMLResponse(content=result.html, status_code=result.status_code)
        if result.body is not None:
            return JSONResponse(content=result.body, status_code=result.status_code)

        response = result.response
        for name, value in result.headers.items():
            response.headers[name] = value
        if result.settlement is not None:
            response.background = BackgroundTask(_await, result.settlement)
        return response


async def _await(coroutine) -> None:
    await coroutine


async def _buffered(response: Response) -> Response:
    """Read a streaming handler response fully into memory"""
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is None:
        return response
    body = b"".join([chunk async for chunk in body_iterator])
    buffered = Response(content=body, status_code=response.status_code)
    # Repeated headers such as Set-Cookie survive only in the raw list
    buffered.raw_headers = list(response.raw_headers)
    return buffered
