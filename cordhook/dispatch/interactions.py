"""Interaction payload parsing.

Turns a verified, loosely-typed JSON body into one of a small set of
interaction variants. Only the fields routing and follow-ups rely on are
lifted out; the full payload stays available as ``raw``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Union

from cordhook.errors import MalformedInteraction
from cordhook.registry.models import CommandType, command_key


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


@dataclass(frozen=True)
class RawRequest:
    """Headers and the exact body bytes of one inbound call."""

    headers: dict[str, str]
    body: bytes


@dataclass
class Interaction:
    """Fields common to every interaction variant."""

    type: int
    id: str = ""
    application_id: str = ""
    token: str = ""
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    message: Optional[dict[str, Any]] = None  # Source message, for components
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def message_id(self) -> str:
        """Message to target for edits; ``@original`` unless there is a source message."""
        if self.message and self.message.get("id"):
            return str(self.message["id"])
        return "@original"


@dataclass
class PingInteraction(Interaction):
    pass


@dataclass
class ApplicationCommandInteraction(Interaction):
    command_name: str = ""
    command_type: CommandType = CommandType.CHAT_INPUT
    command_id: str = ""
    options: list[dict[str, Any]] = field(default_factory=list)
    target_id: Optional[str] = None  # User or message targeted by a context menu

    @property
    def key(self) -> str:
        return command_key(self.command_name, self.command_type)

    def option(self, name: str, default: Any = None) -> Any:
        """Return the value of a top-level option by name."""
        for opt in self.options:
            if opt.get("name") == name:
                return opt.get("value", default)
        return default


@dataclass
class MessageComponentInteraction(Interaction):
    custom_id: str = ""
    component_type: int = 0
    values: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.custom_id


@dataclass
class UnknownInteraction(Interaction):
    pass


AnyInteraction = Union[
    PingInteraction,
    ApplicationCommandInteraction,
    MessageComponentInteraction,
    UnknownInteraction,
]


def _common(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": payload.get("type"),
        "id": str(payload.get("id", "")),
        "application_id": str(payload.get("application_id", "")),
        "token": payload.get("token", ""),
        "guild_id": payload.get("guild_id"),
        "channel_id": payload.get("channel_id"),
        "message": payload.get("message"),
        "raw": payload,
    }


def interaction_from_dict(payload: dict[str, Any]) -> AnyInteraction:
    """Build the interaction variant matching ``payload["type"]``."""
    common = _common(payload)
    kind = payload.get("type")
    if kind == InteractionType.PING:
        return PingInteraction(**common)

    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise MalformedInteraction("Interaction data must be an object")

    if kind == InteractionType.APPLICATION_COMMAND:
        try:
            command_type = CommandType(data.get("type") or CommandType.CHAT_INPUT)
        except ValueError as exc:
            raise MalformedInteraction(f"Unknown command type {data.get('type')!r}") from exc
        return ApplicationCommandInteraction(
            **common,
            command_name=data.get("name", ""),
            command_type=command_type,
            command_id=str(data.get("id", "")),
            options=list(data.get("options") or []),
            target_id=data.get("target_id"),
        )

    if kind == InteractionType.MESSAGE_COMPONENT:
        return MessageComponentInteraction(
            **common,
            custom_id=data.get("custom_id", ""),
            component_type=data.get("component_type", 0),
            values=list(data.get("values") or []),
        )

    return UnknownInteraction(**common)


def parse_interaction(body: Union[bytes, str]) -> AnyInteraction:
    """Parse a raw request body into an interaction.

    Raises ``MalformedInteraction`` when the body is not a JSON object.
    """
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedInteraction(f"Invalid interaction JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedInteraction("Interaction payload must be a JSON object")
    return interaction_from_dict(payload)
