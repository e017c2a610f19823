"""
Encoding utilities for x402 headers
"""

import base64
import binascii
import json
from typing import Any

import pydantic

from x402.exceptions import PaymentDecodeError
from x402.types import PaymentPayload, SettleResponse


def encode_base64(data: str | bytes) -> str:
    """Encode data to base64"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("utf-8")


def decode_base64(data: str) -> str:
    """Decode strict base64 to a UTF-8 string"""
    return base64.b64decode(data, validate=True).decode("utf-8")


def encode_payment_payload(payload: Any) -> str:
    """Encode a model (or plain dict) to base64 JSON for an HTTP header"""
    if isinstance(payload, pydantic.BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_none=True)
    return encode_base64(json.dumps(payload, separators=(",", ":")))


def encode_payment(payload: PaymentPayload) -> str:
    """Encode a payment payload as the X-PAYMENT header value"""
    return encode_payment_payload(payload)


def decode_payment(header: str) -> PaymentPayload:
    """Decode an X-PAYMENT header value.

    Raises:
        PaymentDecodeError: If the value is not base64 JSON of a valid payment payload
    """
    try:
        data = json.loads(decode_base64(header.strip()))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PaymentDecodeError(f"Invalid or malformed payment header: {e}") from e

    try:
        return PaymentPayload.model_validate(data)
    except pydantic.ValidationError as e:
        raise PaymentDecodeError(
            f"Invalid payment payload: {e.error_count()} validation error(s): "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
        ) from e


def settle_response_header(response: SettleResponse) -> str:
    """Encode a settlement result as the X-PAYMENT-RESPONSE header value"""
    return encode_payment_payload(response)


def decode_x_payment_response(header: str) -> SettleResponse:
    """Decode an X-PAYMENT-RESPONSE header value into a SettleResponse"""
    return SettleResponse.model_validate(json.loads(decode_base64(header)))
