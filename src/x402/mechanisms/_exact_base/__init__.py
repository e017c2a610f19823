"""
Shared base classes for the "exact" scheme
"""

from x402.mechanisms._exact_base.base import (
    ChainAdapter,
    ExactBaseClientMechanism,
    ExactBaseFacilitatorMechanism,
    ExactBaseServerMechanism,
    SigningDomainResolver,
)
from x402.mechanisms._exact_base.types import SCHEME_EXACT

__all__ = [
    "SCHEME_EXACT",
    "ChainAdapter",
    "ExactBaseClientMechanism",
    "ExactBaseFacilitatorMechanism",
    "ExactBaseServerMechanism",
    "SigningDomainResolver",
]
