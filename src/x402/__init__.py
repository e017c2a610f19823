"""
x402 - Payment Protocol SDK for Python

"exact" scheme payments on EVM networks: Client, Server, and Facilitator.
"""

__version__ = "0.1.0"

from x402.types import (
    X402_VERSION,
    ErrorReason,
    ExactEvmAuthorization,
    ExactEvmPayload,
    PaymentPayload,
    PaymentRequiredResponse,
    PaymentRequirements,
    SettleResponse,
    SupportedResponse,
    VerifyResponse,
)
from x402.exceptions import (
    X402Error,
    SignatureError,
    SignatureCreationError,
    ChainError,
    TransactionError,
    ValidationError,
    PaymentDecodeError,
    InvalidPriceError,
    ConfigurationError,
    UnsupportedNetworkError,
    UnsupportedSchemeError,
    UnknownTokenError,
    FacilitatorError,
    PaymentError,
    PaymentRetryError,
    PaymentAmountExceededError,
)
from x402.encoding import decode_payment, decode_x_payment_response, encode_payment
from x402.config import NetworkConfig, X402Settings
from x402.tokens import TokenInfo, TokenRegistry, TokenVersionCache, process_price_to_atomic_amount

__all__ = [
    "__version__",
    "X402_VERSION",
    # Types
    "ErrorReason",
    "ExactEvmAuthorization",
    "ExactEvmPayload",
    "PaymentPayload",
    "PaymentRequirements",
    "PaymentRequiredResponse",
    "VerifyResponse",
    "SettleResponse",
    "SupportedResponse",
    # Exceptions
    "X402Error",
    "SignatureError",
    "SignatureCreationError",
    "ChainError",
    "TransactionError",
    "ValidationError",
    "PaymentDecodeError",
    "InvalidPriceError",
    "ConfigurationError",
    "UnsupportedNetworkError",
    "UnsupportedSchemeError",
    "UnknownTokenError",
    "FacilitatorError",
    "PaymentError",
    "PaymentRetryError",
    "PaymentAmountExceededError",
    # Encoding
    "encode_payment",
    "decode_payment",
    "decode_x_payment_response",
    # Configuration
    "NetworkConfig",
    "X402Settings",
    # Tokens
    "TokenInfo",
    "TokenRegistry",
    "TokenVersionCache",
    "process_price_to_atomic_amount",
]
