"""
ExactEvmFacilitatorMechanism - exact facilitator mechanism for EVM.
"""

from typing import TYPE_CHECKING

from x402.mechanisms._exact_base.base import ExactBaseFacilitatorMechanism
from x402.mechanisms.evm.exact.adapter import EvmChainAdapter
from x402.tokens.version_cache import TokenVersionCache

if TYPE_CHECKING:
    from x402.signers.facilitator import ChainReader, FacilitatorSigner


class ExactEvmFacilitatorMechanism(ExactBaseFacilitatorMechanism):
    """TransferWithAuthorization facilitator mechanism for EVM."""

    def __init__(
        self,
        signer: "FacilitatorSigner",
        reader: "ChainReader | None" = None,
        version_cache: TokenVersionCache | None = None,
        receipt_timeout: int = 120,
    ) -> None:
        super().__init__(signer, EvmChainAdapter(), reader, version_cache, receipt_timeout)
