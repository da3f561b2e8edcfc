"""Interaction dispatch: parse verified payloads and route them to handlers."""

from cordhook.dispatch.background import (
    AsyncioBackgroundExecutor,
    BackgroundExecutor,
    CollectingExecutor,
    StarletteBackgroundExecutor,
)
from cordhook.dispatch.context import DispatchResult, ExecutionContext
from cordhook.dispatch.handler import InteractionApp, create_application, dispatch
from cordhook.dispatch.interactions import RawRequest, parse_interaction

__all__ = [
    "AsyncioBackgroundExecutor",
    "BackgroundExecutor",
    "CollectingExecutor",
    "DispatchResult",
    "ExecutionContext",
    "InteractionApp",
    "RawRequest",
    "StarletteBackgroundExecutor",
    "create_application",
    "dispatch",
    "parse_interaction",
]
