"""Environment configuration for cordhook.

All settings come from environment variables. Missing values are empty
strings; callers that need a value should go through ``Settings.require``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from cordhook.errors import ConfigurationError

DEFAULT_API_BASE = "https://discord.com/api/v10"

# Settings field -> environment variable
ENV_VARS = {
    "public_key": "DISCORD_PUBLIC_KEY",
    "client_id": "DISCORD_CLIENT_ID",
    "client_secret": "DISCORD_CLIENT_SECRET",
    "guild_id": "DISCORD_GUILD_ID",
    "api_base": "DISCORD_API_BASE",
    "sentry_dsn": "SENTRY_DSN",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    public_key: str = ""
    client_id: str = ""
    client_secret: str = ""
    guild_id: str = ""
    api_base: str = DEFAULT_API_BASE
    sentry_dsn: str = ""
    warn: bool = False

    def require(self, *names: str) -> None:
        """Raise ``ConfigurationError`` naming every unset setting in *names*."""
        known = {f.name for f in fields(self)}
        missing = []
        for name in names:
            if name not in known:
                raise ValueError(f"Unknown setting: {name}")
            if not getattr(self, name):
                missing.append(ENV_VARS.get(name, name.upper()))
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    values = {name: env.get(var, "").strip() for name, var in ENV_VARS.items()}
    values["api_base"] = (values["api_base"] or DEFAULT_API_BASE).rstrip("/")
    return Settings(
        **values,
        warn=env.get("CORDHOOK_WARN", "").strip().lower() in _TRUTHY,
    )
