"""Execution context handed to command and component handlers."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import BaseModel

from cordhook.api.client import InteractionWebhookClient
from cordhook.dispatch.background import BackgroundExecutor, Task
from cordhook.dispatch.interactions import AnyInteraction
from cordhook.errors import ResponseAlreadySent

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class DispatchResult:
    """Transport-neutral response: status, optional JSON body, headers."""

    status: int
    body: Optional[dict[str, Any]] = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: Union[Mapping, BaseModel], status: int = 200) -> DispatchResult:
        return cls(status=status, body=_payload_dict(payload), headers=dict(JSON_HEADERS))

    @classmethod
    def empty(cls, status: int) -> DispatchResult:
        return cls(status=status)

    def encode(self) -> bytes:
        return b"" if self.body is None else json.dumps(self.body).encode("utf-8")


Payload = Union[Mapping, BaseModel]


def _payload_dict(payload: Payload) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True, exclude_unset=True)
    return dict(payload)


class ExecutionContext:
    """Everything a handler can do while answering one interaction.

    ``respond`` builds the synchronous reply and may be called once. Work
    that must outlive the reply goes through ``defer_background``; from
    there ``edit_original_message`` and ``send_followup_message`` can update
    the conversation after the reply has been delivered.
    """

    def __init__(
        self,
        interaction: AnyInteraction,
        executor: BackgroundExecutor,
        webhooks: InteractionWebhookClient,
        commands: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.interaction = interaction
        self.commands = commands
        self._executor = executor
        self._webhooks = webhooks
        self._response: Optional[DispatchResult] = None

    def respond(self, payload: Payload) -> DispatchResult:
        if self._response is not None:
            raise ResponseAlreadySent("respond() may only be called once per interaction")
        self._response = DispatchResult.json(payload)
        return self._response

    def defer_background(self, task: Task) -> None:
        """Schedule fire-and-forget work; completion is not guaranteed."""
        self._executor.spawn(task)

    async def edit_original_message(self, payload: Payload) -> dict[str, Any]:
        return await self._webhooks.edit_original_response(
            self.interaction.application_id,
            self.interaction.token,
            _payload_dict(payload),
            message_id=self.interaction.message_id,
        )

    async def send_followup_message(self, payload: Payload) -> dict[str, Any]:
        return await self._webhooks.send_followup_message(
            self.interaction.application_id,
            self.interaction.token,
            _payload_dict(payload),
        )
