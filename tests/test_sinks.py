"""Tests for the Sentry error sink."""

import contextlib

from cordhook.dispatch import sinks
from cordhook.dispatch.sinks import SentryErrorSink


class _FakeScope:
    def __init__(self):
        self.transaction = None
        self.tags = {}
        self.contexts = {}
        self.captured = []

    def set_transaction_name(self, name):
        self.transaction = name

    def set_tag(self, key, value):
        self.tags[key] = value

    def set_context(self, key, value):
        self.contexts[key] = value

    def capture_exception(self, error):
        self.captured.append(error)


def _patch_scope(monkeypatch):
    scope = _FakeScope()

    @contextlib.contextmanager
    def new_scope():
        yield scope

    monkeypatch.setattr(sinks.sentry_sdk, "new_scope", new_scope)
    return scope


def test_capture_sets_scope_and_reports(monkeypatch):
    scope = _patch_scope(monkeypatch)
    error = RuntimeError("boom")

    SentryErrorSink().capture(error, "command", "ping", {"id": "i1", "type": 2})

    assert scope.transaction == "command: ping"
    assert scope.tags == {"command": "ping"}
    assert scope.contexts["interaction"] == {"id": "i1", "type": 2}
    assert scope.captured == [error]


def test_capture_redacts_interaction_token(monkeypatch):
    scope = _patch_scope(monkeypatch)
    payload = {"id": "i1", "token": "secret"}

    SentryErrorSink().capture(RuntimeError("boom"), "component", "btn", payload)

    assert scope.contexts["interaction"]["token"] == "[redacted]"
    assert payload["token"] == "secret"
