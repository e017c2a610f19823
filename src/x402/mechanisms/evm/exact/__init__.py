"""
EVM "exact" payment scheme mechanisms.
"""

from x402.mechanisms.evm.exact.client import ExactEvmClientMechanism
from x402.mechanisms.evm.exact.facilitator import ExactEvmFacilitatorMechanism
from x402.mechanisms.evm.exact.server import ExactEvmServerMechanism

__all__ = [
    "ExactEvmClientMechanism",
    "ExactEvmFacilitatorMechanism",
    "ExactEvmServerMechanism",
]
