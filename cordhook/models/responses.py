"""Pydantic models for interaction response envelopes.

Handlers may pass either these models or plain dicts to ``respond()``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7


class MessageFlags(IntEnum):
    EPHEMERAL = 1 << 6


class MessageData(BaseModel):
    """Message body for message-producing response types."""

    content: Optional[str] = None
    embeds: list[dict[str, Any]] = Field(default_factory=list)
    components: list[dict[str, Any]] = Field(default_factory=list)
    flags: Optional[int] = None


class InteractionResponse(BaseModel):
    """Top-level interaction response envelope."""

    type: InteractionResponseType
    data: Optional[MessageData] = None


def pong() -> InteractionResponse:
    return InteractionResponse(type=InteractionResponseType.PONG)


def message(content: str, ephemeral: bool = False) -> InteractionResponse:
    return InteractionResponse(
        type=InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
        data=MessageData(
            content=content,
            flags=MessageFlags.EPHEMERAL if ephemeral else None,
        ),
    )


def deferred(ephemeral: bool = False) -> InteractionResponse:
    """Acknowledge now and edit the original message later."""
    return InteractionResponse(
        type=InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        data=MessageData(flags=MessageFlags.EPHEMERAL) if ephemeral else None,
    )
