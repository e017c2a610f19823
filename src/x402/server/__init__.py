"""
x402 Server SDK
"""

from x402.server.middleware import (
    PaymentFlow,
    PaymentRequest,
    PaymentResult,
    PaymentState,
)
from x402.server.routes import (
    RoutePattern,
    compute_route_patterns,
    find_matching_payment_requirements,
    find_matching_route,
)
from x402.server.x402_server import (
    PaymentMiddlewareConfig,
    RouteConfig,
    RoutesConfig,
    X402Server,
)

__all__ = [
    "X402Server",
    "RouteConfig",
    "RoutesConfig",
    "PaymentMiddlewareConfig",
    "PaymentFlow",
    "PaymentRequest",
    "PaymentResult",
    "PaymentState",
    "RoutePattern",
    "compute_route_patterns",
    "find_matching_route",
    "find_matching_payment_requirements",
]
