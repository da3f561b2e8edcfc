"""Exception types raised across cordhook.

Verification and routing errors are normally converted into responses by
the dispatcher. ``RemoteAPIError``, ``ConfigurationError`` and
``RegistryValidationRejected`` (strict manifest checks) reach callers.
"""

from __future__ import annotations


class CordhookError(Exception):
    """Base class for all cordhook errors."""


class ConfigurationError(CordhookError):
    """Required settings are missing or invalid."""


class MalformedInteraction(CordhookError):
    """The interaction body could not be parsed."""


class HandlerNotFound(CordhookError):
    """No command or component is registered for the lookup key."""

    def __init__(self, key: str):
        super().__init__(f"No handler registered for {key!r}")
        self.key = key


class HandlerExecutionError(CordhookError):
    """A handler raised, or returned something that is not a response."""


class ResponseAlreadySent(CordhookError):
    """``respond()`` was called more than once for one interaction."""


class RegistryValidationRejected(CordhookError):
    """A command or component definition failed structural validation."""


class RemoteAPIError(CordhookError):
    """The remote API answered with a non-success status."""

    def __init__(self, method: str, endpoint: str, status_code: int, text: str):
        super().__init__(
            f"Received unexpected status code {status_code} "
            f"from {method} {endpoint} - {text}"
        )
        self.method = method
        self.endpoint = endpoint
        self.status_code = status_code
        self.text = text
