"""
EIP-712 definitions and helpers for the exact mechanism.
"""

import secrets
import time
from typing import Any

from x402.types import ExactEvmAuthorization

SCHEME_EXACT = "exact"

# Clock-skew tolerance applied to validAfter
VALID_AFTER_SKEW_SECONDS = 60

# validBefore must leave at least this much time for settlement
VALID_BEFORE_BUFFER_SECONDS = 6

TRANSFER_AUTH_PRIMARY_TYPE = "TransferWithAuthorization"

TRANSFER_AUTH_EIP712_TYPES = {
    "TransferWithAuthorization": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def build_eip712_message(auth: ExactEvmAuthorization) -> dict[str, Any]:
    """Build EIP-712 message dict from authorization."""
    return {
        "from": auth.from_address,
        "to": auth.to,
        "value": int(auth.value),
        "validAfter": int(auth.valid_after),
        "validBefore": int(auth.valid_before),
        "nonce": bytes.fromhex(_strip_0x(auth.nonce)),
    }


def build_eip712_domain(
    token_name: str,
    token_version: str,
    chain_id: int,
    verifying_contract: str,
) -> dict[str, Any]:
    """Build EIP-712 domain dict for exact."""
    return {
        "name": token_name,
        "version": token_version,
        "chainId": chain_id,
        "verifyingContract": verifying_contract,
    }


def create_nonce() -> str:
    """Generate a random 32-byte nonce (0x-prefixed hex)."""
    return "0x" + secrets.token_hex(32)


def create_validity_window(
    max_timeout_seconds: int,
    now: int | None = None,
) -> tuple[int, int]:
    """Create (validAfter, validBefore) timestamps.

    validAfter is backdated by VALID_AFTER_SKEW_SECONDS for block timestamp drift.
    """
    if now is None:
        now = int(time.time())
    return now - VALID_AFTER_SKEW_SECONDS, now + max_timeout_seconds


def split_signature(signature: str) -> tuple[int, bytes, bytes]:
    """Split a 65-byte signature into (v, r, s), normalizing v to 27/28."""
    sig_bytes = bytes.fromhex(_strip_0x(signature))
    if len(sig_bytes) != 65:
        raise ValueError(f"signature must be 65 bytes, got {len(sig_bytes)}")
    r = sig_bytes[:32]
    s = sig_bytes[32:64]
    v = sig_bytes[64]
    if v < 27:
        v += 27
    return v, r, s
