"""
Tests for ExactEvmClientMechanism and the client signers.
"""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from x402.exceptions import SignatureCreationError, UnsupportedNetworkError
from x402.mechanisms._exact_base.types import (
    TRANSFER_AUTH_EIP712_TYPES,
    TRANSFER_AUTH_PRIMARY_TYPE,
    VALID_AFTER_SKEW_SECONDS,
    build_eip712_domain,
    build_eip712_message,
)
from x402.mechanisms.evm.exact import ExactEvmClientMechanism
from x402.signers.client import EvmClientSigner, Web3ClientSigner
from x402.signers.utils import build_typed_data
from x402.tokens import TokenVersionCache
from x402.types import Eip712Domain

PAYER = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"


def _recover(payload, requirements, name="USDC", version="2"):
    typed_data = build_typed_data(
        build_eip712_domain(name, version, 84532, requirements.asset),
        TRANSFER_AUTH_EIP712_TYPES,
        build_eip712_message(payload.payload.authorization),
        TRANSFER_AUTH_PRIMARY_TYPE,
    )
    return Account.recover_message(
        encode_typed_data(full_message=typed_data),
        signature=bytes.fromhex(payload.payload.signature[2:]),
    )


class TestEvmClientSigner:
    def test_address_from_key(self, mock_evm_private_key):
        assert EvmClientSigner(mock_evm_private_key).get_address() == PAYER

    def test_accepts_key_without_prefix(self, mock_evm_private_key):
        assert EvmClientSigner.from_private_key(mock_evm_private_key[2:]).get_address() == PAYER

    @pytest.mark.anyio
    async def test_bad_typed_data_raises(self, mock_evm_private_key):
        signer = EvmClientSigner(mock_evm_private_key)
        with pytest.raises(SignatureCreationError):
            await signer.sign_typed_data(
                domain={"name": "USDC"},
                types=TRANSFER_AUTH_EIP712_TYPES,
                message={"from": "not an address"},
                primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
            )


class TestWeb3ClientSigner:
    @pytest.mark.anyio
    async def test_signs_through_provider(self):
        w3 = MagicMock()
        w3.eth.sign_typed_data = AsyncMock(return_value=bytes(65))
        signer = Web3ClientSigner(w3, PAYER)

        signature = await signer.sign_typed_data(
            domain={"name": "USDC", "version": "2", "chainId": 84532},
            types=TRANSFER_AUTH_EIP712_TYPES,
            message={"nonce": b"\x01" * 32},
            primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        )

        assert signature == "0x" + "00" * 65
        address, typed_data = w3.eth.sign_typed_data.await_args.args
        assert address == PAYER
        assert typed_data["message"]["nonce"] == "0x" + "01" * 32
        assert [f["name"] for f in typed_data["types"]["EIP712Domain"]] == ["name", "version", "chainId"]

    @pytest.mark.anyio
    async def test_provider_error(self):
        w3 = MagicMock()
        w3.eth.sign_typed_data = AsyncMock(side_effect=RuntimeError("locked"))
        with pytest.raises(SignatureCreationError):
            await Web3ClientSigner(w3, PAYER).sign_typed_data({}, {}, {}, TRANSFER_AUTH_PRIMARY_TYPE)


class TestPreparePaymentPayload:
    def test_authorization_fields(self, mock_evm_private_key, base_sepolia_requirements):
        mechanism = ExactEvmClientMechanism(EvmClientSigner(mock_evm_private_key))
        before = int(time.time())
        unsigned = mechanism.prepare_payment_payload(PAYER, 1, base_sepolia_requirements)

        authorization = unsigned.payload.authorization
        assert unsigned.payload.signature is None
        assert unsigned.scheme == "exact"
        assert unsigned.network == "base-sepolia"
        assert authorization.from_address == PAYER
        assert authorization.to == base_sepolia_requirements.pay_to
        assert authorization.value == "10000"
        assert before - VALID_AFTER_SKEW_SECONDS <= int(authorization.valid_after) <= before
        assert int(authorization.valid_before) - int(authorization.valid_after) == 300 + VALID_AFTER_SKEW_SECONDS

    def test_nonces_are_unique(self, mock_evm_private_key, base_sepolia_requirements):
        mechanism = ExactEvmClientMechanism(EvmClientSigner(mock_evm_private_key))
        nonces = {
            mechanism.prepare_payment_payload(PAYER, 1, base_sepolia_requirements).payload.authorization.nonce
            for _ in range(10)
        }
        assert len(nonces) == 10


class TestCreatePaymentPayload:
    @pytest.mark.anyio
    async def test_signature_recovers_payer(self, mock_evm_private_key, base_sepolia_requirements):
        mechanism = ExactEvmClientMechanism(EvmClientSigner(mock_evm_private_key))
        payload = await mechanism.create_payment_payload(1, base_sepolia_requirements)
        assert payload.x402_version == 1
        assert _recover(payload, base_sepolia_requirements) == PAYER

    @pytest.mark.anyio
    async def test_domain_from_registry_without_extra(self, mock_evm_private_key, base_sepolia_requirements):
        requirements = base_sepolia_requirements.model_copy(update={"extra": None})
        mechanism = ExactEvmClientMechanism(EvmClientSigner(mock_evm_private_key))
        payload = await mechanism.create_payment_payload(1, requirements)
        assert _recover(payload, requirements) == PAYER

    @pytest.mark.anyio
    async def test_domain_from_chain_reader(self, mock_evm_private_key, base_sepolia_requirements):
        requirements = base_sepolia_requirements.model_copy(update={"extra": None})
        reader = MagicMock()
        reader.get_token_domain = AsyncMock(return_value=Eip712Domain(name="Bridged USDC", version="1"))
        cache = TokenVersionCache()
        mechanism = ExactEvmClientMechanism(
            EvmClientSigner(mock_evm_private_key), chain_reader=reader, version_cache=cache
        )

        payload = await mechanism.create_payment_payload(1, requirements)
        await mechanism.create_payment_payload(1, requirements)

        assert _recover(payload, requirements, name="Bridged USDC", version="1") == PAYER
        reader.get_token_domain.assert_awaited_once_with("base-sepolia", requirements.asset)

    @pytest.mark.anyio
    async def test_unknown_asset_without_extra(self, mock_evm_private_key, base_sepolia_requirements):
        requirements = base_sepolia_requirements.model_copy(
            update={"extra": None, "asset": "0x4444444444444444444444444444444444444444"}
        )
        mechanism = ExactEvmClientMechanism(EvmClientSigner(mock_evm_private_key))
        with pytest.raises(UnsupportedNetworkError):
            await mechanism.create_payment_payload(1, requirements)
