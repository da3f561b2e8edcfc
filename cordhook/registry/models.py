"""Registry data models: command specs, handlers, and command enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional


class CommandType(IntEnum):
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3
    PRIMARY_ENTRY_POINT = 4


class IntegrationType(IntEnum):
    """Installation surfaces a command is available on."""

    GUILD_INSTALL = 0
    USER_INSTALL = 1


class InteractionContextType(IntEnum):
    """Interaction surfaces a command can be used in."""

    GUILD = 0
    BOT_DM = 1
    PRIVATE_CHANNEL = 2


# Types that must carry a description
DESCRIBED_TYPES = {CommandType.CHAT_INPUT, CommandType.PRIMARY_ENTRY_POINT}
# Context-menu types: no description, no options
CONTEXT_MENU_TYPES = {CommandType.USER, CommandType.MESSAGE}


def command_key(name: str, type: int = CommandType.CHAT_INPUT) -> str:
    """Identity key for a command: commands are unique per ``(name, type)``."""
    return f"{name}:{int(type)}"


@dataclass
class CommandSpec:
    """Declarative definition of a remotely-registered command."""

    name: str
    type: CommandType = CommandType.CHAT_INPUT
    description: Optional[str] = None
    options: list[dict[str, Any]] = field(default_factory=list)
    integration_types: Optional[list[IntegrationType]] = None  # Installation contexts
    contexts: Optional[list[InteractionContextType]] = None  # Interaction contexts

    @property
    def key(self) -> str:
        return command_key(self.name, self.type)

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the JSON body the registry API accepts."""
        payload: dict[str, Any] = {"name": self.name, "type": int(self.type)}
        if self.description is not None:
            payload["description"] = self.description
        if self.options:
            payload["options"] = self.options
        if self.integration_types is not None:
            payload["integration_types"] = [int(t) for t in self.integration_types]
        if self.contexts is not None:
            payload["contexts"] = [int(c) for c in self.contexts]
        return payload

    def spec(self) -> CommandSpec:
        """Return the bare declarative part of this definition."""
        return CommandSpec(
            name=self.name,
            type=self.type,
            description=self.description,
            options=list(self.options),
            integration_types=self.integration_types,
            contexts=self.contexts,
        )


@dataclass
class Command(CommandSpec):
    """A command definition together with the handler that executes it."""

    execute: Optional[Callable[..., Any]] = None


@dataclass
class Component:
    """A message component handler, keyed by the component's ``custom_id``."""

    name: str
    execute: Optional[Callable[..., Any]] = None

    @property
    def key(self) -> str:
        return self.name
