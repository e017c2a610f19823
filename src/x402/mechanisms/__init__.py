"""
x402 Mechanisms - Payment mechanisms per scheme and network family

Structure:
    _base/          - ABC interfaces (ClientMechanism, FacilitatorMechanism, ServerMechanism)
    _exact_base/    - Shared base classes for "exact" scheme
    evm/            - EVM chain implementations
        exact/      - exact scheme (adapter, client, facilitator, server)
"""

from x402.mechanisms import evm
from x402.mechanisms._base import ClientMechanism, FacilitatorMechanism, ServerMechanism
from x402.mechanisms._exact_base import (
    SCHEME_EXACT,
    ChainAdapter,
    ExactBaseClientMechanism,
    ExactBaseFacilitatorMechanism,
    ExactBaseServerMechanism,
)
from x402.mechanisms.evm import (
    ExactEvmClientMechanism,
    ExactEvmFacilitatorMechanism,
    ExactEvmServerMechanism,
)

__all__ = [
    "SCHEME_EXACT",
    # Base interfaces
    "ClientMechanism",
    "FacilitatorMechanism",
    "ServerMechanism",
    # Exact base
    "ChainAdapter",
    "ExactBaseClientMechanism",
    "ExactBaseFacilitatorMechanism",
    "ExactBaseServerMechanism",
    # EVM
    "ExactEvmClientMechanism",
    "ExactEvmFacilitatorMechanism",
    "ExactEvmServerMechanism",
    # Subpackages
    "evm",
]
