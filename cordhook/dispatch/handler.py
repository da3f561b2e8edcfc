"""Interaction dispatch.

One inbound call moves through ``Received -> Verified -> Parsed -> Routed``
and ends ``Completed`` or ``Rejected``:

- a request that fails verification is rejected with 401 and never parsed;
- a ping is answered with a pong, without touching the handler indexes;
- commands are looked up by ``(name, type)``, components by ``custom_id``;
  an unknown key is rejected with 404;
- handlers run behind a boundary that returns a result instead of raising,
  so one failing handler only ever affects its own response.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel

from cordhook.api.client import InteractionWebhookClient
from cordhook.dispatch.background import BackgroundExecutor, CollectingExecutor
from cordhook.dispatch.context import DispatchResult, ExecutionContext
from cordhook.dispatch.interactions import (
    ApplicationCommandInteraction,
    MessageComponentInteraction,
    PingInteraction,
    RawRequest,
    parse_interaction,
)
from cordhook.dispatch.sinks import ErrorSink
from cordhook.errors import HandlerExecutionError, HandlerNotFound, MalformedInteraction
from cordhook.models.responses import message, pong
from cordhook.registry.index import HandlerIndex, build_command_index, build_component_index
from cordhook.security.verify import PublicKeyVerifier

logger = logging.getLogger(__name__)

COMMAND_ERROR_MESSAGE = "An unexpected error occurred when executing the command."


@dataclass(frozen=True)
class InteractionApp:
    """Immutable configuration shared by every dispatched call."""

    verifier: PublicKeyVerifier
    commands: HandlerIndex
    components: HandlerIndex
    webhooks: InteractionWebhookClient
    error_sink: Optional[ErrorSink] = None


def create_application(
    commands: Iterable[Any],
    components: Iterable[Any],
    public_key: str,
    warn: bool = False,
    webhooks: Optional[InteractionWebhookClient] = None,
    error_sink: Optional[ErrorSink] = None,
) -> InteractionApp:
    """Validate handlers, decode the public key, and freeze the result."""
    return InteractionApp(
        verifier=PublicKeyVerifier(public_key),
        commands=build_command_index(commands, warn=warn),
        components=build_component_index(components, warn=warn),
        webhooks=webhooks or InteractionWebhookClient(),
        error_sink=error_sink,
    )


# ---------------------------------------------------------------------------
# Handler boundary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HandlerSucceeded:
    response: DispatchResult


@dataclass(frozen=True)
class HandlerFailed:
    error: BaseException


HandlerOutcome = Union[HandlerSucceeded, HandlerFailed]


def _as_response(value: Any) -> DispatchResult:
    if isinstance(value, DispatchResult):
        return value
    if isinstance(value, (Mapping, BaseModel)):
        return DispatchResult.json(value)
    raise HandlerExecutionError(
        f"Handler returned {type(value).__name__}, expected a response"
    )


async def run_handler(execute: Any, context: ExecutionContext) -> HandlerOutcome:
    """Invoke a handler, converting anything it raises into ``HandlerFailed``."""
    try:
        value = execute(context)
        if inspect.isawaitable(value):
            value = await value
        return HandlerSucceeded(_as_response(value))
    except Exception as exc:
        return HandlerFailed(exc)


def _report(app: InteractionApp, kind: str, name: str, payload: dict[str, Any], error: BaseException) -> None:
    logger.error(
        "Unhandled error in %s %r; interaction: %s",
        kind,
        name,
        json.dumps(payload, default=str),
        exc_info=error,
    )
    if app.error_sink is None:
        return
    try:
        app.error_sink.capture(error, kind, name, payload)
    except Exception:
        logger.exception("Error sink failed while reporting %s %r", kind, name)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


async def _handle_command(
    app: InteractionApp,
    interaction: ApplicationCommandInteraction,
    executor: BackgroundExecutor,
) -> DispatchResult:
    command = app.commands.get(interaction.key)
    if command is None:
        logger.info("%s", HandlerNotFound(interaction.key))
        return DispatchResult.empty(404)

    context = ExecutionContext(interaction, executor, app.webhooks, commands=app.commands)
    outcome = await run_handler(command.execute, context)
    if isinstance(outcome, HandlerSucceeded):
        return outcome.response

    _report(app, "command", interaction.command_name, interaction.raw, outcome.error)
    return DispatchResult.json(message(COMMAND_ERROR_MESSAGE, ephemeral=True))


async def _handle_component(
    app: InteractionApp,
    interaction: MessageComponentInteraction,
    executor: BackgroundExecutor,
) -> DispatchResult:
    component = app.components.get(interaction.key)
    if component is None:
        logger.info("%s", HandlerNotFound(interaction.key))
        return DispatchResult.empty(404)

    context = ExecutionContext(interaction, executor, app.webhooks)
    outcome = await run_handler(component.execute, context)
    if isinstance(outcome, HandlerSucceeded):
        return outcome.response

    _report(app, "component", interaction.custom_id, interaction.raw, outcome.error)
    return DispatchResult.empty(500)


async def dispatch(
    app: InteractionApp,
    request: RawRequest,
    executor: BackgroundExecutor,
) -> DispatchResult:
    """Verify, parse, and route one inbound interaction request."""
    if not app.verifier.verify(request.headers, request.body):
        return DispatchResult.empty(401)

    try:
        interaction = parse_interaction(request.body)
    except MalformedInteraction as exc:
        logger.warning("Rejecting interaction: %s", exc)
        return DispatchResult.empty(400)

    if isinstance(interaction, PingInteraction):
        return DispatchResult.json(pong())

    # Deferred work reaches the executor only once the response exists
    held = CollectingExecutor()
    try:
        if isinstance(interaction, ApplicationCommandInteraction):
            return await _handle_command(app, interaction, held)

        if isinstance(interaction, MessageComponentInteraction):
            return await _handle_component(app, interaction, held)
    finally:
        held.release_into(executor)

    logger.info("Unsupported interaction type %r", interaction.type)
    return DispatchResult.empty(501)
