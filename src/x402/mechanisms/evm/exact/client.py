"""
ExactEvmClientMechanism - exact client mechanism for EVM.
"""

from typing import TYPE_CHECKING

from x402.mechanisms._exact_base.base import ExactBaseClientMechanism
from x402.mechanisms.evm.exact.adapter import EvmChainAdapter
from x402.tokens.version_cache import TokenVersionCache

if TYPE_CHECKING:
    from x402.signers.client import ClientSigner
    from x402.signers.facilitator import ChainReader


class ExactEvmClientMechanism(ExactBaseClientMechanism):
    """TransferWithAuthorization client mechanism for EVM."""

    def __init__(
        self,
        signer: "ClientSigner",
        chain_reader: "ChainReader | None" = None,
        version_cache: TokenVersionCache | None = None,
    ) -> None:
        super().__init__(signer, EvmChainAdapter(), chain_reader, version_cache)
