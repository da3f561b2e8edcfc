"""Tests for the cordhook CLI."""

from pathlib import Path

import yaml
from click.testing import CliRunner

from cordhook.cli import main
from cordhook.registry.models import CommandSpec
from cordhook.sync.engine import RegisteredCommand, SyncAction


def _write_manifest(tmp_path: Path, commands) -> str:
    path = tmp_path / "commands.yaml"
    path.write_text(yaml.dump({"commands": commands}))
    return str(path)


def test_check_valid_manifest(tmp_path):
    manifest = _write_manifest(
        tmp_path,
        [
            {"name": "ping", "description": "Ping"},
            {"name": "Profile", "type": 2},
        ],
    )
    result = CliRunner().invoke(main, ["check", manifest])
    assert result.exit_code == 0, result.output
    assert "Valid!" in result.output


def test_check_reports_rejections(tmp_path):
    manifest = _write_manifest(
        tmp_path,
        [
            {"name": "ping"},
            {"name": "Report", "type": 3, "description": "Not allowed"},
        ],
    )
    result = CliRunner().invoke(main, ["check", manifest])
    assert result.exit_code != 0
    assert "missing_description" in result.output
    assert "description_not_allowed" in result.output


def test_sync_requires_credentials(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCORD_CLIENT_ID", raising=False)
    monkeypatch.delenv("DISCORD_CLIENT_SECRET", raising=False)
    manifest = _write_manifest(tmp_path, [{"name": "ping", "description": "Ping"}])
    result = CliRunner().invoke(main, ["sync", manifest])
    assert result.exit_code != 0
    assert "DISCORD_CLIENT_ID" in result.output


def test_sync_prints_results(tmp_path, monkeypatch):
    monkeypatch.setenv("DISCORD_CLIENT_ID", "app")
    monkeypatch.setenv("DISCORD_CLIENT_SECRET", "secret")
    seen = {}

    async def fake_sync(client_id, client_secret, commands, **kwargs):
        seen.update(client_id=client_id, commands=commands, guild_id=kwargs["guild_id"])
        return [
            RegisteredCommand(
                CommandSpec(name="ping", description="Ping"),
                {"id": "77", "name": "ping"},
                action=SyncAction.CREATED,
            )
        ]

    monkeypatch.setattr("cordhook.sync.engine.sync_commands", fake_sync)
    manifest = _write_manifest(tmp_path, [{"name": "ping", "description": "Ping"}])
    result = CliRunner().invoke(main, ["sync", manifest, "--guild", "g1"])

    assert result.exit_code == 0, result.output
    assert seen == {"client_id": "app", "commands": [{"name": "ping", "description": "Ping"}], "guild_id": "g1"}
    assert "77" in result.output
    assert "created" in result.output


def test_sync_strict_aborts_on_invalid(tmp_path, monkeypatch):
    monkeypatch.setenv("DISCORD_CLIENT_ID", "app")
    monkeypatch.setenv("DISCORD_CLIENT_SECRET", "secret")
    manifest = _write_manifest(tmp_path, [{"name": ""}])
    result = CliRunner().invoke(main, ["sync", manifest, "--strict"])
    assert result.exit_code != 0
    assert "name" in result.output
