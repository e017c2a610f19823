"""
Client Signers
"""

from x402.signers.client.base import ClientSigner
from x402.signers.client.evm_signer import EvmClientSigner
from x402.signers.client.web3_signer import Web3ClientSigner

__all__ = ["ClientSigner", "EvmClientSigner", "Web3ClientSigner"]
