"""
EVM mechanism implementations.
"""

from x402.mechanisms.evm.exact import (
    ExactEvmClientMechanism,
    ExactEvmFacilitatorMechanism,
    ExactEvmServerMechanism,
)

__all__ = [
    "ExactEvmClientMechanism",
    "ExactEvmFacilitatorMechanism",
    "ExactEvmServerMechanism",
]
