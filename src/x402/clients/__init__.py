"""
x402 Client SDK
"""

from x402.clients.x402_client import PaymentRequirementsSelector, X402Client
from x402.clients.x402_http_client import PaymentAttempt, X402HttpClient
from x402.encoding import decode_x_payment_response

__all__ = [
    "PaymentAttempt",
    "PaymentRequirementsSelector",
    "X402Client",
    "X402HttpClient",
    "decode_x_payment_response",
]
