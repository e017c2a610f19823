"""
FastAPI integration for x402
"""

from x402.fastapi.middleware import X402Middleware

__all__ = ["X402Middleware"]
