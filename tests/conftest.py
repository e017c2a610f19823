"""
Pytest configuration and test fixtures
"""

import time

import pytest

from x402.mechanisms._exact_base.types import (
    TRANSFER_AUTH_EIP712_TYPES,
    TRANSFER_AUTH_PRIMARY_TYPE,
    build_eip712_domain,
    build_eip712_message,
    create_nonce,
)
from x402.signers.client import EvmClientSigner
from x402.types import (
    ExactEvmAuthorization,
    ExactEvmPayload,
    PaymentPayload,
    PaymentRequirements,
)

TEST_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_PAYER = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"
BASE_SEPOLIA_USDC = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
MERCHANT = "0x1111111111111111111111111111111111111111"
BASE_SEPOLIA_CHAIN_ID = 84532


@pytest.fixture
def mock_evm_private_key():
    """Private key of the test payer"""
    return TEST_PRIVATE_KEY


@pytest.fixture
def base_sepolia_requirements():
    """0.01 USDC on base-sepolia"""
    return PaymentRequirements(
        scheme="exact",
        network="base-sepolia",
        maxAmountRequired="10000",
        resource="https://api.example.com/weather",
        description="Weather report",
        mimeType="application/json",
        payTo=MERCHANT,
        maxTimeoutSeconds=300,
        asset=BASE_SEPOLIA_USDC,
        extra={"name": "USDC", "version": "2"},
    )


@pytest.fixture
def sign_payment():
    """Build and sign an exact payload, overriding any authorization field"""

    async def _sign(requirements, private_key=TEST_PRIVATE_KEY, **overrides):
        signer = EvmClientSigner(private_key)
        now = int(time.time())
        fields = {
            "from": signer.get_address(),
            "to": requirements.pay_to,
            "value": requirements.max_amount_required,
            "validAfter": str(now - 60),
            "validBefore": str(now + requirements.max_timeout_seconds),
            "nonce": create_nonce(),
        }
        fields.update(overrides)
        authorization = ExactEvmAuthorization(**fields)
        extra = requirements.extra or {}
        signature = await signer.sign_typed_data(
            domain=build_eip712_domain(
                extra.get("name", "USDC"),
                extra.get("version", "2"),
                BASE_SEPOLIA_CHAIN_ID,
                requirements.asset,
            ),
            types=TRANSFER_AUTH_EIP712_TYPES,
            message=build_eip712_message(authorization),
            primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        )
        return PaymentPayload(
            x402Version=1,
            scheme=requirements.scheme,
            network=requirements.network,
            payload=ExactEvmPayload(signature=signature, authorization=authorization),
        )

    return _sign
