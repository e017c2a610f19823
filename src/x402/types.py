"""
Type definitions for x402 protocol
"""

import re
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

X402_VERSION = 1

MAX_ATOMIC_AMOUNT_DIGITS = 18

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_MIXED_ADDRESS = re.compile(r"^(0x[a-fA-F0-9]{40}|[A-Za-z0-9][A-Za-z0-9-]{0,34}[A-Za-z0-9])$")
_HEX_32 = re.compile(r"^0x[0-9a-fA-F]{64}$")
_HEX_SIGNATURE = re.compile(r"^0x[0-9a-fA-F]{130}$")
_UINT = re.compile(r"^[0-9]+$")
_ABSOLUTE_URL = re.compile(r"^[^:]+://.+$")


class ErrorReason:
    """Verification and settlement reason codes, one per distinct check"""

    INVALID_SCHEME = "invalid_scheme"
    INVALID_NETWORK = "invalid_network"
    INVALID_SIGNATURE = "invalid_exact_evm_payload_signature"
    INVALID_VALID_BEFORE = "invalid_exact_evm_payload_authorization_valid_before"
    INVALID_VALID_AFTER = "invalid_exact_evm_payload_authorization_valid_after"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_VALUE = "invalid_exact_evm_payload_authorization_value"
    RECIPIENT_MISMATCH = "invalid_exact_evm_payload_recipient_mismatch"
    UNEXPECTED_VERIFY_ERROR = "unexpected_verify_error"
    TRANSACTION_FAILED = "transaction_failed"
    UNEXPECTED_SETTLE_ERROR = "unexpected_settle_error"


def _check_uint(value: str, field: str, max_digits: int | None = None) -> str:
    if not _UINT.match(value):
        raise ValueError(f"{field} must be a non-negative base-10 integer string")
    if max_digits is not None and len(value.lstrip("0") or "0") > max_digits:
        raise ValueError(f"{field} must fit in {max_digits} digits")
    return value


def _check_pattern(pattern: re.Pattern[str], value: str, field: str) -> str:
    if not pattern.match(value):
        raise ValueError(f"invalid {field}: {value!r}")
    return value


class PaymentRequirements(BaseModel):
    """Payment requirements for one resource"""

    scheme: str
    network: str
    max_amount_required: str = Field(alias="maxAmountRequired")
    resource: str
    description: str = ""
    mime_type: str = Field("", alias="mimeType")
    pay_to: str = Field(alias="payTo")
    max_timeout_seconds: int = Field(alias="maxTimeoutSeconds")
    asset: str
    output_schema: Optional[dict[str, Any]] = Field(None, alias="outputSchema")
    extra: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("max_amount_required")
    @classmethod
    def _validate_amount(cls, v: str) -> str:
        return _check_uint(v, "maxAmountRequired", MAX_ATOMIC_AMOUNT_DIGITS)

    @field_validator("resource")
    @classmethod
    def _validate_resource(cls, v: str) -> str:
        return _check_pattern(_ABSOLUTE_URL, v, "resource URL")

    @field_validator("pay_to", "asset")
    @classmethod
    def _validate_address(cls, v: str) -> str:
        return _check_pattern(_MIXED_ADDRESS, v, "address")


class ExactEvmAuthorization(BaseModel):
    """EIP-3009 TransferWithAuthorization parameters"""

    from_address: str = Field(alias="from")
    to: str
    value: str
    valid_after: str = Field(alias="validAfter")
    valid_before: str = Field(alias="validBefore")
    nonce: str

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("from_address", "to")
    @classmethod
    def _validate_address(cls, v: str) -> str:
        return _check_pattern(_EVM_ADDRESS, v, "EVM address")

    @field_validator("value")
    @classmethod
    def _validate_value(cls, v: str) -> str:
        return _check_uint(v, "value", MAX_ATOMIC_AMOUNT_DIGITS)

    @field_validator("valid_after", "valid_before")
    @classmethod
    def _validate_timestamp(cls, v: str) -> str:
        return _check_uint(v, "timestamp")

    @field_validator("nonce")
    @classmethod
    def _validate_nonce(cls, v: str) -> str:
        return _check_pattern(_HEX_32, v, "nonce")

    @model_validator(mode="after")
    def _validate_window(self) -> "ExactEvmAuthorization":
        if int(self.valid_after) >= int(self.valid_before):
            raise ValueError("validAfter must be earlier than validBefore")
        return self


class ExactEvmPayload(BaseModel):
    """Signed exact payload"""

    signature: str
    authorization: ExactEvmAuthorization

    class Config:
        frozen = True

    @field_validator("signature")
    @classmethod
    def _validate_signature(cls, v: str) -> str:
        return _check_pattern(_HEX_SIGNATURE, v, "signature")


class UnsignedExactEvmPayload(BaseModel):
    """Exact payload awaiting a signature"""

    signature: None = None
    authorization: ExactEvmAuthorization

    class Config:
        frozen = True


class PaymentPayload(BaseModel):
    """Payment payload sent by client in the X-PAYMENT header"""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: ExactEvmPayload

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("x402_version")
    @classmethod
    def _validate_version(cls, v: int) -> int:
        if v != X402_VERSION:
            raise ValueError(f"unsupported x402Version: {v}")
        return v


class UnsignedPaymentPayload(BaseModel):
    """Payment payload produced by prepare, before signing"""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: UnsignedExactEvmPayload

    class Config:
        populate_by_name = True
        frozen = True


class VerifyResponse(BaseModel):
    """Verification response from facilitator"""

    is_valid: bool = Field(alias="isValid")
    invalid_reason: Optional[str] = Field(None, alias="invalidReason")
    payer: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True


class SettleResponse(BaseModel):
    """Settlement response from facilitator"""

    success: bool
    error_reason: Optional[str] = Field(None, alias="errorReason")
    transaction: str = ""
    network: str = ""
    payer: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True


class PaymentRequiredResponse(BaseModel):
    """Payment required response body (402)"""

    x402_version: int = Field(X402_VERSION, alias="x402Version")
    error: str
    accepts: list[PaymentRequirements]
    payer: Optional[str] = None

    class Config:
        populate_by_name = True


class SupportedKind(BaseModel):
    """Supported payment kind"""

    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str

    class Config:
        populate_by_name = True


class SupportedResponse(BaseModel):
    """Supported response from facilitator"""

    kinds: list[SupportedKind]


class VerifyRequest(BaseModel):
    """Facilitator /verify request body"""

    x402_version: int = Field(X402_VERSION, alias="x402Version")
    payment_payload: PaymentPayload = Field(alias="paymentPayload")
    payment_requirements: PaymentRequirements = Field(alias="paymentRequirements")

    class Config:
        populate_by_name = True


class SettleRequest(VerifyRequest):
    """Facilitator /settle request body"""


class Eip712Domain(BaseModel):
    """Token signing-domain name and version"""

    name: str
    version: str

    class Config:
        frozen = True


class TokenAsset(BaseModel):
    """Token contract address plus the metadata needed to price and sign"""

    address: str
    decimals: int
    eip712: Eip712Domain

    class Config:
        frozen = True


class TokenAmount(BaseModel):
    """Explicit atomic amount of a specific token"""

    amount: str
    asset: TokenAsset

    class Config:
        frozen = True

    @field_validator("amount")
    @classmethod
    def _validate_amount(cls, v: str) -> str:
        return _check_uint(v, "amount", MAX_ATOMIC_AMOUNT_DIGITS)


class AtomicAmount(BaseModel):
    """Price resolved to atomic units"""

    max_amount_required: str
    asset: TokenAsset

    class Config:
        frozen = True


Money = Union[str, int, float, Decimal]
Price = Union[Money, TokenAmount]
