"""Request authentication for inbound interaction webhooks."""

from cordhook.security.verify import PublicKeyVerifier

__all__ = ["PublicKeyVerifier"]
