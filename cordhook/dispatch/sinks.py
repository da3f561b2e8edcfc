"""External error sinks for handler failures."""

from __future__ import annotations

from typing import Any, Protocol

import sentry_sdk


class ErrorSink(Protocol):
    def capture(self, error: BaseException, kind: str, name: str, payload: dict[str, Any]) -> None: ...


class SentryErrorSink:
    """Forwards handler failures to Sentry.

    Each capture gets its own scope tagged with the handler kind and name,
    and carries the interaction payload as context. ``sentry_sdk.init`` must
    already have been called by the host.
    """

    def capture(self, error: BaseException, kind: str, name: str, payload: dict[str, Any]) -> None:
        with sentry_sdk.new_scope() as scope:
            scope.set_transaction_name(f"{kind}: {name}")
            scope.set_tag(kind, name)
            scope.set_context("interaction", _redacted(payload))
            scope.capture_exception(error)


def _redacted(payload: dict[str, Any]) -> dict[str, Any]:
    # Interaction tokens authorise follow-ups for 15 minutes
    return {k: ("[redacted]" if k == "token" else v) for k, v in payload.items()}
