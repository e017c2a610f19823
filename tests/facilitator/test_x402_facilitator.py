"""
Tests for X402Facilitator dispatch and the facilitator HTTP app
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from x402.facilitator import X402Facilitator, create_facilitator_app
from x402.types import ErrorReason, SettleResponse, VerifyResponse

PAYER = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"
TX_HASH = "0x" + "ef" * 32


@pytest.fixture
def mock_mechanism():
    mechanism = MagicMock()
    mechanism.scheme.return_value = "exact"
    mechanism.verify = AsyncMock(return_value=VerifyResponse(isValid=True, payer=PAYER))
    mechanism.settle = AsyncMock(
        return_value=SettleResponse(success=True, transaction=TX_HASH, network="base-sepolia", payer=PAYER)
    )
    return mechanism


@pytest.fixture
def facilitator(mock_mechanism):
    return X402Facilitator().register(["base-sepolia", "base"], mock_mechanism)


class TestX402Facilitator:
    def test_supported(self, facilitator):
        kinds = facilitator.supported().kinds
        assert {(k.scheme, k.network) for k in kinds} == {("exact", "base-sepolia"), ("exact", "base")}
        assert all(k.x402_version == 1 for k in kinds)

    @pytest.mark.anyio
    async def test_verify_dispatches(self, facilitator, mock_mechanism, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        result = await facilitator.verify(payload, base_sepolia_requirements)
        assert result.is_valid is True
        mock_mechanism.verify.assert_awaited_once_with(payload, base_sepolia_requirements)

    @pytest.mark.anyio
    async def test_unregistered_network(self, facilitator, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        requirements = base_sepolia_requirements.model_copy(update={"network": "avalanche"})
        result = await facilitator.verify(payload, requirements)
        assert result.is_valid is False
        assert result.invalid_reason == ErrorReason.INVALID_NETWORK
        assert result.payer == PAYER

    @pytest.mark.anyio
    async def test_unregistered_scheme(self, facilitator, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        requirements = base_sepolia_requirements.model_copy(update={"scheme": "upto"})
        result = await facilitator.settle(payload, requirements)
        assert result.success is False
        assert result.error_reason == ErrorReason.INVALID_SCHEME
        assert result.network == "base-sepolia"


def _body(payload, requirements):
    return {
        "x402Version": 1,
        "paymentPayload": payload.model_dump(by_alias=True, exclude_none=True),
        "paymentRequirements": requirements.model_dump(by_alias=True, exclude_none=True),
    }


@pytest.fixture
def app_client(facilitator):
    transport = httpx.ASGITransport(app=create_facilitator_app(facilitator))
    return httpx.AsyncClient(transport=transport, base_url="http://facilitator")


class TestFacilitatorApp:
    @pytest.mark.anyio
    async def test_supported(self, app_client):
        async with app_client:
            response = await app_client.get("/supported")
        assert response.status_code == 200
        assert {"x402Version": 1, "scheme": "exact", "network": "base"} in response.json()["kinds"]

    @pytest.mark.anyio
    async def test_verify(self, app_client, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        async with app_client:
            response = await app_client.post("/verify", json=_body(payload, base_sepolia_requirements))
        assert response.status_code == 200
        assert response.json() == {"isValid": True, "payer": PAYER}

    @pytest.mark.anyio
    async def test_settle(self, app_client, base_sepolia_requirements, sign_payment):
        payload = await sign_payment(base_sepolia_requirements)
        async with app_client:
            response = await app_client.post("/settle", json=_body(payload, base_sepolia_requirements))
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["transaction"] == TX_HASH
        assert "errorReason" not in data

    @pytest.mark.anyio
    async def test_malformed_body(self, app_client):
        async with app_client:
            response = await app_client.post("/verify", json={"paymentPayload": {}})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request"}

    @pytest.mark.anyio
    async def test_mechanism_exception(self, app_client, mock_mechanism, base_sepolia_requirements, sign_payment):
        mock_mechanism.settle.side_effect = RuntimeError("boom")
        payload = await sign_payment(base_sepolia_requirements)
        async with app_client:
            response = await app_client.post("/settle", json=_body(payload, base_sepolia_requirements))
        assert response.status_code == 500
