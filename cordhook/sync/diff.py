"""Command diffing: detect divergence between a remote command and its spec.

Options are normalised before comparison so that a missing ``required``,
``choices`` or nested ``options`` key compares equal to its default.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional

from cordhook.registry.models import CommandSpec, CommandType

# Fields the platform assigns; never taken from the desired spec
SERVER_FIELDS = (
    "id",
    "application_id",
    "guild_id",
    "version",
    "default_member_permissions",
    "nsfw",
)


@dataclass
class CommandDiff:
    """Which top-level fields of a command differ from the desired spec."""

    name: bool = False
    description: bool = False
    options: bool = False
    type: bool = False
    integration_types: bool = False  # Installation contexts
    contexts: bool = False  # Interaction contexts

    @property
    def changed(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def changed_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]


def normalize_option(option: dict[str, Any]) -> dict[str, Any]:
    """Give an option node a consistent shape for deep comparison."""
    return {
        "type": option.get("type"),
        "name": option.get("name"),
        "description": option.get("description"),
        "required": bool(option.get("required", False)),
        "choices": option.get("choices") or [],
        "options": [normalize_option(o) for o in option.get("options") or []],
    }


def _normalize_options(options: Optional[list[dict[str, Any]]]) -> list[dict[str, Any]]:
    return [normalize_option(o) for o in options or []]


def _ints(values: Optional[list[Any]]) -> Optional[list[int]]:
    if values is None:
        return None
    return sorted(int(v) for v in values)


def diff_command(remote: dict[str, Any], desired: CommandSpec) -> CommandDiff:
    """Compare a remote command record against a desired spec.

    Installation and interaction contexts are only compared when the desired
    spec declares them.
    """
    remote_type = remote.get("type") or CommandType.CHAT_INPUT
    diff = CommandDiff(
        name=remote.get("name") != desired.name,
        description=(remote.get("description") or "") != (desired.description or ""),
        options=_normalize_options(remote.get("options")) != _normalize_options(desired.options),
        type=int(remote_type) != int(desired.type),
    )
    if desired.integration_types is not None:
        diff.integration_types = _ints(remote.get("integration_types")) != _ints(
            desired.integration_types
        )
    if desired.contexts is not None:
        diff.contexts = _ints(remote.get("contexts")) != _ints(desired.contexts)
    return diff


def build_patch(desired: CommandSpec, diff: CommandDiff) -> dict[str, Any]:
    """Return only the changed fields of the desired payload."""
    payload = desired.to_payload()
    patch = {}
    for name in diff.changed_fields():
        if name in payload:
            patch[name] = payload[name]
        elif name == "options":
            patch[name] = []
        elif name == "description":
            patch[name] = ""
    return patch


def merge_command_record(remote: dict[str, Any], desired: CommandSpec) -> dict[str, Any]:
    """Combine a remote record with its desired spec.

    Fields the desired spec declares win; everything else, including
    server-assigned fields such as ``id``, is carried over from *remote*.
    """
    merged = dict(remote)
    merged.update(desired.to_payload())
    for name in SERVER_FIELDS:
        if name in remote:
            merged[name] = remote[name]
    return merged
