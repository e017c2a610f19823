"""
x402 custom exception hierarchy
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class X402Error(Exception):
    """x402 base exception"""

    pass


class SignatureError(X402Error):
    """Signature-related error"""

    pass


class SignatureCreationError(SignatureError):
    """Signature creation failed"""

    pass


class ChainError(X402Error):
    """Chain read failed (RPC unavailable, contract call reverted)"""

    pass


class TransactionError(ChainError):
    """Transaction submission or confirmation failed"""

    def __init__(self, message: str, tx_hash: str | None = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class ValidationError(X402Error):
    """Validation-related error"""

    pass


class PaymentDecodeError(ValidationError):
    """X-PAYMENT header is not valid base64 JSON of a payment payload"""

    pass


class InvalidPriceError(ValidationError):
    """Price is malformed or outside the accepted range"""

    pass


class ConfigurationError(X402Error):
    """Configuration-related error"""

    pass


class UnsupportedNetworkError(ConfigurationError):
    """Unsupported network"""

    pass


class UnsupportedSchemeError(ConfigurationError):
    """No mechanism registered for the scheme"""

    pass


class UnknownTokenError(ConfigurationError):
    """Unknown token"""

    pass


class FacilitatorError(X402Error):
    """Facilitator service request failed"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PaymentError(X402Error):
    """Client-side payment flow error"""

    pass


class PaymentRetryError(PaymentError):
    """Server still answered 402 after a paid retry"""

    def __init__(self, response: "httpx.Response"):
        self.response = response
        super().__init__(
            f"Payment was not accepted for {response.request.method} {response.request.url}"
        )


class PaymentAmountExceededError(PaymentError):
    """Requested amount exceeds the client's configured ceiling"""

    def __init__(self, amount: int, max_value: int):
        self.amount = amount
        self.max_value = max_value
        super().__init__(f"Payment amount {amount} exceeds maximum allowed value {max_value}")
