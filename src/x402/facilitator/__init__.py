"""
x402 Facilitator SDK
"""

from x402.facilitator.app import create_facilitator_app
from x402.facilitator.facilitator_client import FacilitatorClient
from x402.facilitator.x402_facilitator import X402Facilitator

__all__ = ["X402Facilitator", "FacilitatorClient", "create_facilitator_app"]
