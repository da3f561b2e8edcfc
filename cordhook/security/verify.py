"""Ed25519 verification of inbound interaction requests.

The platform signs ``timestamp || body`` with its private key and sends the
hex-encoded signature alongside the timestamp. Verification must run over
the exact bytes received, before any JSON parsing.
"""

from __future__ import annotations

from typing import Mapping

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return value or ""


class PublicKeyVerifier:
    """Verifies request signatures against one application public key.

    The key is decoded once here and reused for every request.
    """

    def __init__(self, public_key: str):
        try:
            self._key = VerifyKey(bytes.fromhex(public_key))
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Invalid Ed25519 public key: {exc}") from exc

    def verify(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        """Return True only if the signature covers ``timestamp || raw_body``."""
        timestamp = _header(headers, TIMESTAMP_HEADER)
        signature = _header(headers, SIGNATURE_HEADER)
        if not timestamp or not signature:
            return False

        try:
            signature_bytes = bytes.fromhex(signature)
            self._key.verify(timestamp.encode("utf-8") + raw_body, signature_bytes)
        except (BadSignatureError, ValueError, TypeError):
            return False
        return True
