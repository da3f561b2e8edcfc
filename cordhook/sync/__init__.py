"""Command registry sync: keep remote commands in line with local definitions.

This package provides the primitives for:
- Diffing: which top-level fields of a remote command differ from its spec
- Minimal patches: request bodies holding only the changed fields
- Paced reconciliation: delete, patch, then create, under a fixed rate budget
"""

from cordhook.sync.diff import CommandDiff, build_patch, diff_command, merge_command_record
from cordhook.sync.engine import Pacer, RegisteredCommand, sync_commands

__all__ = [
    "CommandDiff",
    "Pacer",
    "RegisteredCommand",
    "build_patch",
    "diff_command",
    "merge_command_record",
    "sync_commands",
]
