"""
Facilitator Signers
"""

from x402.signers.facilitator.base import ChainReader, FacilitatorSigner
from x402.signers.facilitator.evm_signer import EvmChainReader, EvmFacilitatorSigner

__all__ = ["ChainReader", "FacilitatorSigner", "EvmChainReader", "EvmFacilitatorSigner"]
