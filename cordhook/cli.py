"""cordhook CLI: validate and synchronise command manifests."""

import asyncio
import logging

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cordhook import __version__

console = Console()


def _load_manifest(path: str) -> list:
    """Read the ``commands`` list from a YAML manifest."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        raise click.ClickException(f"{path}: expected a mapping with a 'commands' list")
    commands = data.get("commands", [])
    if not isinstance(commands, list):
        raise click.ClickException(f"{path}: 'commands' must be a list")
    return commands


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """cordhook: interaction webhooks and command registry sync."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
def check(manifest: str):
    """Validate a command manifest without contacting the API."""
    from cordhook.registry.index import build_command_index

    console.print(f"\n[bold blue]cordhook[/] - Checking: {manifest}\n")

    try:
        entries = _load_manifest(manifest)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML: {e}")

    index = build_command_index(entries, require_execute=False)
    for cmd in index.values():
        console.print(f"  [green]v[/] {cmd.name} (type {int(cmd.type)})")
    for rejection in index.rejections:
        console.print(f"  [red]x[/] #{rejection.index} {escape(f'[{rejection.reason.value}]')} {escape(rejection.message)}")

    if index.rejections:
        raise click.ClickException(f"{len(index.rejections)} command(s) rejected")
    console.print("\n[green]Valid![/]")


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--guild", "guild_id", default=None, help="Sync to one guild instead of globally")
@click.option("--warn/--no-warn", default=True, help="Log commands dropped by validation")
@click.option("--strict", is_flag=True, help="Abort if any command fails validation")
def sync(manifest: str, guild_id: str | None, warn: bool, strict: bool):
    """Synchronise the remote command registry with MANIFEST.

    Credentials come from DISCORD_CLIENT_ID and DISCORD_CLIENT_SECRET.
    """
    from cordhook.api.client import DiscordRestClient
    from cordhook.config import load_settings
    from cordhook.errors import CordhookError
    from cordhook.registry.index import build_command_index
    from cordhook.sync.engine import sync_commands

    settings = load_settings()
    try:
        settings.require("client_id", "client_secret")
    except CordhookError as e:
        raise click.ClickException(str(e))

    entries = _load_manifest(manifest)
    if strict:
        try:
            build_command_index(entries, require_execute=False).raise_on_rejection()
        except CordhookError as e:
            raise click.ClickException(str(e))

    guild_id = guild_id or settings.guild_id or None
    scope = f"guild {guild_id}" if guild_id else "global"
    console.print(f"\n[bold blue]cordhook[/] - Syncing {manifest} ({scope})\n")

    try:
        results = asyncio.run(
            sync_commands(
                settings.client_id,
                settings.client_secret,
                entries,
                guild_id=guild_id,
                transport=DiscordRestClient(api_base=settings.api_base),
                warn=warn,
            )
        )
    except CordhookError as e:
        raise click.ClickException(str(e))

    table = Table(title=f"Commands ({len(results)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Type", justify="right")
    table.add_column("Action")
    table.add_column("Changed")

    for r in results:
        table.add_row(r.id, r.spec.name, str(int(r.spec.type)), r.action, ", ".join(r.changed_fields))

    console.print(table)
