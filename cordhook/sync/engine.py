"""Command registry sync: reconcile remote commands with a local list.

A run has four ordered steps:

1. Fetch: exchange client credentials for a token and list remote commands.
2. Remove: delete remote commands with no desired ``(name, type)`` match.
3. Reconcile: patch matched commands whose diff is non-empty.
4. Create: register desired commands with no remote match.

Mutating calls are issued one at a time and paced in fixed batches. The
pacing is a fixed delay; a server-supplied retry window is not honoured, so
heavy churn can still hit the rate limit and fail the run. Any remote error
aborts the run without rolling back calls that already succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Optional, Protocol, Sequence, TypeVar

from cordhook.api.client import BearerToken, DiscordRestClient
from cordhook.registry.index import build_command_index
from cordhook.registry.models import Command, CommandSpec, command_key
from cordhook.sync.diff import CommandDiff, build_patch, diff_command, merge_command_record

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Platform quota: 5 command mutations per 20 seconds per scope
RATE_LIMIT_BATCH = 5
RATE_LIMIT_WINDOW = 20.0


class CommandTransport(Protocol):
    """The REST operations sync depends on."""

    async def exchange_credentials_for_token(self, client_id: str, client_secret: str) -> BearerToken: ...

    async def list_commands(
        self, application_id: str, token: BearerToken, guild_id: Optional[str] = None
    ) -> list[dict[str, Any]]: ...

    async def create_command(
        self, application_id: str, token: BearerToken, payload: dict[str, Any], guild_id: Optional[str] = None
    ) -> dict[str, Any]: ...

    async def patch_command(
        self,
        application_id: str,
        token: BearerToken,
        command_id: str,
        payload: dict[str, Any],
        guild_id: Optional[str] = None,
    ) -> dict[str, Any]: ...

    async def delete_command(
        self, application_id: str, token: BearerToken, command_id: str, guild_id: Optional[str] = None
    ) -> None: ...


class SyncAction:
    UNCHANGED = "unchanged"
    PATCHED = "patched"
    CREATED = "created"


@dataclass
class RegisteredCommand:
    """A desired command together with its reconciled remote record."""

    spec: CommandSpec
    record: dict[str, Any]
    action: str = SyncAction.UNCHANGED
    changed_fields: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return str(self.record.get("id", ""))

    @property
    def key(self) -> str:
        return self.spec.key


@dataclass
class Pacer:
    """Fixed-window pacing for sequential remote calls within one phase."""

    batch_size: int = RATE_LIMIT_BATCH
    window: float = RATE_LIMIT_WINDOW
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    async def paced(self, items: Sequence[T]) -> AsyncIterator[T]:
        """Yield *items*, pausing for ``window`` after every full batch."""
        for i, item in enumerate(items):
            if i and i % self.batch_size == 0:
                logger.debug("Pausing %.1fs after %d calls", self.window, i)
                await self.sleep(self.window)
            yield item


def remote_key(record: dict[str, Any]) -> str:
    return command_key(record.get("name", ""), record.get("type") or 1)


def _desired_specs(commands: Iterable[Any], warn: bool) -> list[Command]:
    index = build_command_index(commands, warn=warn, require_execute=False)
    return list(index.values())


async def sync_commands(
    client_id: str,
    client_secret: str,
    commands: Iterable[Any],
    *,
    guild_id: Optional[str] = None,
    transport: Optional[CommandTransport] = None,
    warn: bool = False,
    pacer: Optional[Pacer] = None,
) -> list[RegisteredCommand]:
    """Make the remote command registry match *commands*.

    *commands* may be ``Command``/``CommandSpec`` instances or mappings;
    invalid entries are dropped the same way the handler registry drops
    them. Returns one ``RegisteredCommand`` per desired command, in the order
    unchanged/patched first, then created.
    """
    transport = transport or DiscordRestClient()
    pacer = pacer or Pacer()
    desired = _desired_specs(commands, warn)
    scope = f"guild {guild_id}" if guild_id else "global"

    # Fetch
    token = await transport.exchange_credentials_for_token(client_id, client_secret)
    remote = await transport.list_commands(client_id, token, guild_id)
    remote_by_key = {remote_key(r): r for r in remote}
    desired_keys = {cmd.key for cmd in desired}
    logger.info(
        "Syncing %d desired command(s) against %d remote (%s)",
        len(desired), len(remote), scope,
    )

    # Remove
    to_remove = [r for r in remote if remote_key(r) not in desired_keys]
    async for record in pacer.paced(to_remove):
        logger.debug("Deleting command %s (%s)", record.get("name"), record.get("id"))
        await transport.delete_command(client_id, token, record["id"], guild_id)

    results: list[RegisteredCommand] = []

    # Reconcile
    to_patch: list[tuple[Command, dict[str, Any], CommandDiff]] = []
    for cmd in desired:
        existing = remote_by_key.get(cmd.key)
        if existing is None:
            continue
        diff = diff_command(existing, cmd)
        if not diff.changed:
            results.append(RegisteredCommand(cmd.spec(), merge_command_record(existing, cmd)))
            continue
        to_patch.append((cmd, existing, diff))

    async for cmd, existing, diff in pacer.paced(to_patch):
        patch = build_patch(cmd, diff)
        logger.debug("Patching command %s fields %s", cmd.name, diff.changed_fields())
        data = await transport.patch_command(client_id, token, existing["id"], patch, guild_id)
        results.append(
            RegisteredCommand(
                cmd.spec(),
                merge_command_record(data, cmd),
                action=SyncAction.PATCHED,
                changed_fields=diff.changed_fields(),
            )
        )

    # Create
    to_create = [cmd for cmd in desired if cmd.key not in remote_by_key]
    async for cmd in pacer.paced(to_create):
        logger.debug("Creating command %s", cmd.name)
        data = await transport.create_command(client_id, token, cmd.to_payload(), guild_id)
        results.append(
            RegisteredCommand(cmd.spec(), merge_command_record(data, cmd), action=SyncAction.CREATED)
        )

    logger.info(
        "Sync complete (%s): %d removed, %d patched, %d created",
        scope, len(to_remove), len(to_patch), len(to_create),
    )
    return results
