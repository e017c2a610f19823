"""
EVM chain capabilities - web3.py reader and facilitator signer
"""

import json
import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data
from web3 import Web3

from x402.abi import ERC20_ABI
from x402.exceptions import ChainError, TransactionError
from x402.signers.facilitator.base import ChainReader, FacilitatorSigner
from x402.signers.utils import build_typed_data, create_async_web3
from x402.types import Eip712Domain

logger = logging.getLogger(__name__)


class EvmChainReader(ChainReader):
    """Read-only EVM chain capability using web3.py"""

    def __init__(self) -> None:
        self._async_web3_clients: dict[str, Any] = {}

    def _ensure_async_web3_client(self, network: str) -> Any:
        """Lazy initialize async web3 client for the given network."""
        if network not in self._async_web3_clients:
            self._async_web3_clients[network] = create_async_web3(network)
        return self._async_web3_clients[network]

    def _token_contract(self, network: str, asset: str) -> Any:
        w3 = self._ensure_async_web3_client(network)
        return w3.eth.contract(address=Web3.to_checksum_address(asset), abi=ERC20_ABI)

    async def verify_typed_data(
        self,
        address: str,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        signature: str,
        primary_type: str,
    ) -> bool:
        try:
            signable = encode_typed_data(
                full_message=build_typed_data(domain, types, message, primary_type)
            )
            sig_bytes = bytes.fromhex(signature[2:] if signature.startswith("0x") else signature)
            recovered = Account.recover_message(signable, signature=sig_bytes)
            return recovered.lower() == address.lower()
        except Exception as e:
            logger.warning("Signature verification failed", extra={"error": str(e)})
            return False

    async def get_balance(self, network: str, asset: str, owner: str) -> int:
        try:
            contract = self._token_contract(network, asset)
            return await contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()
        except Exception as e:
            raise ChainError(f"Failed to read balance of {owner} on {network}: {e}") from e

    async def get_token_domain(self, network: str, asset: str) -> Eip712Domain:
        try:
            contract = self._token_contract(network, asset)
            name = await contract.functions.name().call()
            version = await contract.functions.version().call()
        except Exception as e:
            raise ChainError(f"Failed to read signing domain of {asset} on {network}: {e}") from e
        return Eip712Domain(name=name, version=version)


class EvmFacilitatorSigner(EvmChainReader, FacilitatorSigner):
    """EVM facilitator signer implementation using web3.py"""

    def __init__(self, private_key: str) -> None:
        super().__init__()
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        self._private_key = private_key
        self._address = Account.from_key(private_key).address
        logger.debug("EvmFacilitatorSigner initialized", extra={"address": self._address})

    @classmethod
    def from_private_key(cls, private_key: str) -> "EvmFacilitatorSigner":
        """Create signer from private key"""
        return cls(private_key)

    def get_address(self) -> str:
        return self._address

    async def write_contract(
        self,
        contract_address: str,
        abi: Any,
        method: str,
        args: list[Any],
        network: str,
    ) -> str | None:
        try:
            w3 = self._ensure_async_web3_client(network)
            abi_list = json.loads(abi) if isinstance(abi, str) else abi
            contract = w3.eth.contract(
                address=Web3.to_checksum_address(contract_address), abi=abi_list
            )
            func = getattr(contract.functions, method)

            tx = await func(*args).build_transaction(
                {
                    "from": self._address,
                    "nonce": await w3.eth.get_transaction_count(self._address),
                    "chainId": await w3.eth.chain_id,
                }
            )

            signed_tx = w3.eth.account.sign_transaction(tx, private_key=self._private_key)
            tx_hash = await w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            return "0x" + bytes(tx_hash).hex()
        except Exception as e:
            logger.error(
                "Contract write failed: %s",
                e,
                exc_info=True,
                extra={"method": method, "contract": contract_address},
            )
            return None

    async def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: int = 120,
        network: str = "",
    ) -> dict[str, Any]:
        w3 = self._ensure_async_web3_client(network)
        try:
            receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except Exception as e:
            raise TransactionError(f"No receipt for {tx_hash}: {e}", tx_hash=tx_hash) from e
        return {
            "hash": tx_hash,
            "blockNumber": str(receipt["blockNumber"]),
            "status": "confirmed" if receipt["status"] == 1 else "failed",
        }
