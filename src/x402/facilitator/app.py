"""
Facilitator HTTP service
Exposes an X402Facilitator over POST /verify, POST /settle and GET /supported.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from x402.facilitator.x402_facilitator import X402Facilitator
from x402.types import SettleRequest, VerifyRequest

logger = logging.getLogger(__name__)


def create_facilitator_app(facilitator: X402Facilitator) -> FastAPI:
    """Build the FastAPI application serving *facilitator*."""
    app = FastAPI(
        title="X402 Facilitator",
        description="Facilitator service for the x402 exact payment scheme",
        version="1.0.0",
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected malformed %s body: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.get("/supported")
    async def supported() -> JSONResponse:
        """Get supported capabilities"""
        return JSONResponse(facilitator.supported().model_dump(by_alias=True))

    @app.post("/verify")
    async def verify(verify_request: VerifyRequest) -> JSONResponse:
        """Verify payment payload"""
        try:
            result = await facilitator.verify(
                verify_request.payment_payload, verify_request.payment_requirements
            )
        except Exception:
            logger.exception("Verify failed")
            raise HTTPException(status_code=500, detail="Internal server error")
        return JSONResponse(result.model_dump(by_alias=True, exclude_none=True))

    @app.post("/settle")
    async def settle(settle_request: SettleRequest) -> JSONResponse:
        """Settle payment on-chain"""
        try:
            result = await facilitator.settle(
                settle_request.payment_payload, settle_request.payment_requirements
            )
        except Exception:
            logger.exception("Settle failed")
            raise HTTPException(status_code=500, detail="Internal server error")
        logger.info(
            "Settlement %s: network=%s tx=%s",
            "succeeded" if result.success else "failed",
            result.network,
            result.transaction,
        )
        return JSONResponse(result.model_dump(by_alias=True, exclude_none=True))

    return app
