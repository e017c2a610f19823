"""
Tests for ExactEvmFacilitatorMechanism.

Payloads are signed for real with eth_account; only chain reads and writes
are mocked.
"""

import time
from unittest.mock import AsyncMock

import pytest

from x402.exceptions import ChainError, TransactionError
from x402.mechanisms._exact_base.types import SCHEME_EXACT
from x402.mechanisms.evm.exact import ExactEvmFacilitatorMechanism
from x402.signers.facilitator import EvmFacilitatorSigner
from x402.tokens import TokenVersionCache
from x402.types import Eip712Domain, ErrorReason, ExactEvmPayload

FACILITATOR_KEY = "0x" + "11" * 32
PAYER = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"
TX_HASH = "0x" + "ef" * 32


@pytest.fixture
def facilitator_signer():
    signer = EvmFacilitatorSigner(FACILITATOR_KEY)
    signer.get_balance = AsyncMock(return_value=10**12)
    signer.get_token_domain = AsyncMock(return_value=Eip712Domain(name="USDC", version="2"))
    signer.write_contract = AsyncMock(return_value=TX_HASH)
    signer.wait_for_transaction_receipt = AsyncMock(
        return_value={"hash": TX_HASH, "blockNumber": "1", "status": "confirmed"}
    )
    return signer


@pytest.fixture
def mechanism(facilitator_signer):
    return ExactEvmFacilitatorMechanism(facilitator_signer)


class TestScheme:
    def test_scheme(self, mechanism):
        assert mechanism.scheme() == SCHEME_EXACT


class TestVerify:
    @pytest.mark.anyio
    async def test_valid_payload(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.is_valid is True
        assert result.invalid_reason is None
        assert result.payer == PAYER

    @pytest.mark.anyio
    async def test_wrong_scheme(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = (await sign_payment(base_sepolia_requirements)).model_copy(update={"scheme": "upto"})
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_SCHEME
        assert result.payer == PAYER

    @pytest.mark.anyio
    async def test_network_mismatch(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = (await sign_payment(base_sepolia_requirements)).model_copy(update={"network": "base"})
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_NETWORK

    @pytest.mark.anyio
    async def test_unknown_network(self, mechanism, base_sepolia_requirements, sign_payment):
        requirements = base_sepolia_requirements.model_copy(update={"network": "polygon"})
        payload = (await sign_payment(base_sepolia_requirements)).model_copy(update={"network": "polygon"})
        result = await mechanism.verify(payload, requirements)
        assert result.invalid_reason == ErrorReason.INVALID_NETWORK

    @pytest.mark.anyio
    async def test_corrupted_signature(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        signature = payload.payload.signature
        corrupted = signature[:10] + ("0" if signature[10] != "0" else "1") + signature[11:]
        payload = payload.model_copy(
            update={"payload": ExactEvmPayload(signature=corrupted, authorization=payload.payload.authorization)}
        )
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.is_valid is False
        assert result.invalid_reason == ErrorReason.INVALID_SIGNATURE

    @pytest.mark.anyio
    async def test_signature_from_other_key(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements, private_key="0x" + "22" * 32, **{"from": PAYER})
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_SIGNATURE

    @pytest.mark.anyio
    async def test_tampered_amount_breaks_signature(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        authorization = payload.payload.authorization.model_copy(update={"value": "20000"})
        payload = payload.model_copy(
            update={"payload": ExactEvmPayload(signature=payload.payload.signature, authorization=authorization)}
        )
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_SIGNATURE

    @pytest.mark.anyio
    async def test_valid_before_too_close(self, mechanism, base_sepolia_requirements, sign_payment):
        now = int(time.time())
        payload = await sign_payment(base_sepolia_requirements, validBefore=str(now + 1))
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_VALID_BEFORE

    @pytest.mark.anyio
    async def test_not_yet_valid(self, mechanism, base_sepolia_requirements, sign_payment):
        now = int(time.time())
        payload = await sign_payment(
            base_sepolia_requirements, validAfter=str(now + 600), validBefore=str(now + 1200)
        )
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_VALID_AFTER

    @pytest.mark.anyio
    async def test_insufficient_funds(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.get_balance.return_value = 9999
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INSUFFICIENT_FUNDS
        facilitator_signer.get_balance.assert_awaited_once_with(
            "base-sepolia", base_sepolia_requirements.asset, PAYER
        )

    @pytest.mark.anyio
    async def test_balance_lookup_failure(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.get_balance.side_effect = ChainError("rpc down")
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.UNEXPECTED_VERIFY_ERROR

    @pytest.mark.anyio
    async def test_value_below_required(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements, value="9999")
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.INVALID_VALUE

    @pytest.mark.anyio
    async def test_overpayment_accepted(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements, value="20000")
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.is_valid is True

    @pytest.mark.anyio
    async def test_recipient_mismatch(self, mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements, to="0x3333333333333333333333333333333333333333")
        result = await mechanism.verify(payload, base_sepolia_requirements)
        assert result.invalid_reason == ErrorReason.RECIPIENT_MISMATCH


class TestSigningDomain:
    @pytest.mark.anyio
    async def test_extra_wins_over_chain(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        await mechanism.verify(payload, base_sepolia_requirements)
        facilitator_signer.get_token_domain.assert_not_awaited()

    @pytest.mark.anyio
    async def test_domain_read_from_chain_and_cached(self, facilitator_signer, base_sepolia_requirements, sign_payment):
        cache = TokenVersionCache()
        mechanism = ExactEvmFacilitatorMechanism(facilitator_signer, version_cache=cache)
        payload = await sign_payment(base_sepolia_requirements)
        requirements = base_sepolia_requirements.model_copy(update={"extra": None})

        assert (await mechanism.verify(payload, requirements)).is_valid is True
        assert (await mechanism.verify(payload, requirements)).is_valid is True
        facilitator_signer.get_token_domain.assert_awaited_once()
        assert cache.get("base-sepolia", requirements.asset) == Eip712Domain(name="USDC", version="2")

    @pytest.mark.anyio
    async def test_domain_unavailable(self, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.get_token_domain.side_effect = ChainError("not a token")
        mechanism = ExactEvmFacilitatorMechanism(facilitator_signer)
        payload = await sign_payment(base_sepolia_requirements)
        requirements = base_sepolia_requirements.model_copy(update={"extra": None})
        result = await mechanism.verify(payload, requirements)
        assert result.invalid_reason == ErrorReason.INVALID_NETWORK


class TestSettle:
    @pytest.mark.anyio
    async def test_success(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.settle(payload, base_sepolia_requirements)

        assert result.success is True
        assert result.transaction == TX_HASH
        assert result.network == "base-sepolia"
        assert result.payer == PAYER

        kwargs = facilitator_signer.write_contract.await_args.kwargs
        assert kwargs["method"] == "transferWithAuthorization"
        assert kwargs["contract_address"] == base_sepolia_requirements.asset
        assert kwargs["network"] == "base-sepolia"
        args = kwargs["args"]
        authorization = payload.payload.authorization
        assert args[0] == PAYER
        assert args[2] == 10000
        assert args[3] == int(authorization.valid_after)
        assert args[5] == bytes.fromhex(authorization.nonce[2:])
        assert args[6] in (27, 28)
        assert len(args[7]) == 32 and len(args[8]) == 32

    @pytest.mark.anyio
    async def test_reverifies_before_submitting(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        now = int(time.time())
        payload = await sign_payment(base_sepolia_requirements, validBefore=str(now + 2))
        result = await mechanism.settle(payload, base_sepolia_requirements)

        assert result.success is False
        assert result.error_reason == ErrorReason.INVALID_VALID_BEFORE
        assert result.transaction == ""
        assert result.payer == PAYER
        facilitator_signer.write_contract.assert_not_awaited()

    @pytest.mark.anyio
    async def test_submission_failure(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.write_contract.return_value = None
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.settle(payload, base_sepolia_requirements)
        assert result.success is False
        assert result.error_reason == ErrorReason.UNEXPECTED_SETTLE_ERROR
        facilitator_signer.wait_for_transaction_receipt.assert_not_awaited()

    @pytest.mark.anyio
    async def test_reverted_transaction(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.wait_for_transaction_receipt.return_value = {"hash": TX_HASH, "status": "failed"}
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.settle(payload, base_sepolia_requirements)
        assert result.success is False
        assert result.error_reason == ErrorReason.TRANSACTION_FAILED
        assert result.transaction == TX_HASH

    @pytest.mark.anyio
    async def test_receipt_timeout(self, mechanism, facilitator_signer, base_sepolia_requirements, sign_payment):
        facilitator_signer.wait_for_transaction_receipt.side_effect = TransactionError("timeout", tx_hash=TX_HASH)
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.settle(payload, base_sepolia_requirements)
        assert result.error_reason == ErrorReason.TRANSACTION_FAILED
        assert result.transaction == TX_HASH

    @pytest.mark.anyio
    async def test_separate_reader(self, facilitator_signer, base_sepolia_requirements, sign_payment):
        reader = EvmFacilitatorSigner(FACILITATOR_KEY)
        reader.get_balance = AsyncMock(return_value=0)
        mechanism = ExactEvmFacilitatorMechanism(facilitator_signer, reader=reader)
        payload = await sign_payment(base_sepolia_requirements)
        result = await mechanism.settle(payload, base_sepolia_requirements)
        assert result.error_reason == ErrorReason.INSUFFICIENT_FUNDS
        facilitator_signer.get_balance.assert_not_awaited()
