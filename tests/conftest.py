"""Shared fixtures: a real Ed25519 key pair and request signing."""

import json

import pytest
from nacl.signing import SigningKey


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def public_key_hex(signing_key: SigningKey) -> str:
    return signing_key.verify_key.encode().hex()


@pytest.fixture
def sign(signing_key: SigningKey):
    """Return a helper producing ``(headers, body)`` for a payload."""

    def _sign(payload, timestamp: str = "1700000000") -> tuple[dict[str, str], bytes]:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        signature = signing_key.sign(timestamp.encode("utf-8") + body).signature.hex()
        headers = {
            "X-Signature-Ed25519": signature,
            "X-Signature-Timestamp": timestamp,
        }
        return headers, body

    return _sign
