"""Validation and indexing of caller-supplied commands and components.

Validation is pure: each candidate produces either ``Accepted`` (holding a
normalised ``Command``/``Component``) or ``Rejected`` (holding a structured
reason). Indexing folds those results into an immutable ``HandlerIndex``,
keeping the first definition for any key and recording everything dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Union

from cordhook.errors import RegistryValidationRejected
from cordhook.registry.models import (
    CONTEXT_MENU_TYPES,
    DESCRIBED_TYPES,
    Command,
    CommandSpec,
    CommandType,
    Component,
    IntegrationType,
    InteractionContextType,
    command_key,
)

logger = logging.getLogger(__name__)


class RejectionReason(Enum):
    NOT_A_RECORD = "not_a_record"
    MISSING_NAME = "missing_name"
    INVALID_TYPE = "invalid_type"
    INVALID_CONTEXTS = "invalid_contexts"
    MISSING_DESCRIPTION = "missing_description"
    DESCRIPTION_NOT_ALLOWED = "description_not_allowed"
    OPTIONS_NOT_ALLOWED = "options_not_allowed"
    MISSING_EXECUTE = "missing_execute"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Accepted:
    value: Any
    ok = True


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str
    index: int = -1  # Position in the input sequence, when known
    ok = False

    def as_error(self) -> RegistryValidationRejected:
        err = RegistryValidationRejected(self.message)
        err.reason = self.reason
        return err


ValidationResult = Union[Accepted, Rejected]


def _get(candidate: Any, name: str, default: Any = None) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(name, default)
    return getattr(candidate, name, default)


def _is_record(candidate: Any) -> bool:
    return isinstance(candidate, (Mapping, CommandSpec, Component))


def _has_name(candidate: Any) -> bool:
    name = _get(candidate, "name")
    return isinstance(name, str) and len(name) > 0


def validate_command(candidate: Any, require_execute: bool = True) -> ValidationResult:
    """Validate one command definition.

    Accepts a mapping or a ``CommandSpec``/``Command`` instance. With
    ``require_execute=False`` a bare declarative spec is enough, which is
    what registry sync needs.
    """
    if not _is_record(candidate):
        return Rejected(RejectionReason.NOT_A_RECORD, "Expected command to be an object")

    if not _has_name(candidate):
        return Rejected(RejectionReason.MISSING_NAME, "Expected command to have a name")
    name = _get(candidate, "name")

    raw_type = _get(candidate, "type")
    try:
        cmd_type = CommandType(raw_type) if raw_type is not None else CommandType.CHAT_INPUT
    except ValueError:
        return Rejected(
            RejectionReason.INVALID_TYPE,
            f"Command {name} has an unknown type {raw_type!r}",
        )

    description = _get(candidate, "description")
    options = _get(candidate, "options")

    if cmd_type in DESCRIBED_TYPES:
        if not isinstance(description, str) or not description:
            return Rejected(
                RejectionReason.MISSING_DESCRIPTION,
                f"Expected command {name} to have a description",
            )
    elif cmd_type in CONTEXT_MENU_TYPES:
        if description is not None:
            return Rejected(
                RejectionReason.DESCRIPTION_NOT_ALLOWED,
                f"Context menu command {name} must not have a description",
            )
        if options:
            return Rejected(
                RejectionReason.OPTIONS_NOT_ALLOWED,
                f"Context menu command {name} must not have options",
            )

    execute = _get(candidate, "execute")
    if require_execute and not callable(execute):
        return Rejected(
            RejectionReason.MISSING_EXECUTE,
            f"Expected command {name} to have an execute function",
        )

    integration_types = _get(candidate, "integration_types")
    contexts = _get(candidate, "contexts")
    try:
        if integration_types is not None:
            integration_types = [IntegrationType(t) for t in integration_types]
        if contexts is not None:
            contexts = [InteractionContextType(c) for c in contexts]
    except (TypeError, ValueError) as exc:
        return Rejected(
            RejectionReason.INVALID_CONTEXTS,
            f"Command {name} has invalid contexts: {exc}",
        )

    return Accepted(
        Command(
            name=name,
            type=cmd_type,
            description=description,
            options=list(options or []),
            integration_types=integration_types,
            contexts=contexts,
            execute=execute if callable(execute) else None,
        )
    )


def validate_component(candidate: Any) -> ValidationResult:
    """Validate one component definition."""
    if not _is_record(candidate):
        return Rejected(RejectionReason.NOT_A_RECORD, "Expected component to be an object")

    if not _has_name(candidate):
        return Rejected(RejectionReason.MISSING_NAME, "Expected component to have a name")
    name = _get(candidate, "name")

    execute = _get(candidate, "execute")
    if not callable(execute):
        return Rejected(
            RejectionReason.MISSING_EXECUTE,
            f"Expected component {name} to have an execute function",
        )

    return Accepted(Component(name=name, execute=execute))


class HandlerIndex(Mapping):
    """Read-only mapping of lookup key to handler definition.

    ``rejections`` lists every input entry that did not make it into the
    index, in input order.
    """

    def __init__(self, entries: dict[str, Any], rejections: Iterable[Rejected] = ()):
        self._entries = dict(entries)
        self.rejections: tuple[Rejected, ...] = tuple(rejections)

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HandlerIndex({list(self._entries)!r}, rejected={len(self.rejections)})"

    def raise_on_rejection(self) -> None:
        """Raise the first rejection as ``RegistryValidationRejected``."""
        if self.rejections:
            raise self.rejections[0].as_error()


@dataclass
class _IndexBuilder:
    kind: str
    warn: bool
    entries: dict[str, Any] = field(default_factory=dict)
    rejections: list[Rejected] = field(default_factory=list)

    def add(self, position: int, result: ValidationResult) -> None:
        if isinstance(result, Rejected):
            self._reject(Rejected(result.reason, result.message, position))
            return

        key = result.value.key
        if key in self.entries:
            self._reject(
                Rejected(
                    RejectionReason.DUPLICATE,
                    f"{self.kind.capitalize()} {result.value.name} already exists",
                    position,
                )
            )
            return
        self.entries[key] = result.value

    def _reject(self, rejection: Rejected) -> None:
        self.rejections.append(rejection)
        if self.warn:
            logger.warning("Skipping %s #%d: %s", self.kind, rejection.index, rejection.message)

    def build(self) -> HandlerIndex:
        return HandlerIndex(self.entries, self.rejections)


def build_command_index(
    entries: Iterable[Any],
    warn: bool = False,
    require_execute: bool = True,
) -> HandlerIndex:
    """Validate *entries* and index the accepted commands by ``(name, type)``."""
    builder = _IndexBuilder("command", warn)
    for position, candidate in enumerate(entries):
        builder.add(position, validate_command(candidate, require_execute=require_execute))
    return builder.build()


def build_component_index(entries: Iterable[Any], warn: bool = False) -> HandlerIndex:
    """Validate *entries* and index the accepted components by ``custom_id``."""
    builder = _IndexBuilder("component", warn)
    for position, candidate in enumerate(entries):
        builder.add(position, validate_component(candidate))
    return builder.build()


def find_command(index: Mapping[str, Command], name: str, type: Optional[int] = None) -> Optional[Command]:
    """Look up a command by name and type (type defaults to chat-input)."""
    return index.get(command_key(name, type if type is not None else CommandType.CHAT_INPUT))
