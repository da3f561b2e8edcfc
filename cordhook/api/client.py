"""HTTP clients for the platform's REST API.

``DiscordRestClient`` covers the application-command registry, authorised
with a client-credentials bearer token. ``InteractionWebhookClient`` covers
follow-up messages and original-response edits, which are authorised by the
interaction token embedded in the URL instead.

Every non-2xx answer raises ``RemoteAPIError`` carrying the method, endpoint,
status code and raw response text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from cordhook.config import DEFAULT_API_BASE
from cordhook.errors import RemoteAPIError

logger = logging.getLogger(__name__)

TOKEN_SCOPE = "applications.commands.update"


@dataclass(frozen=True)
class BearerToken:
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 0
    scope: str = ""

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"


# ---------------------------------------------------------------------------
# Route helpers
# ---------------------------------------------------------------------------


def commands_route(application_id: str, guild_id: Optional[str] = None) -> str:
    if guild_id:
        return f"/applications/{application_id}/guilds/{guild_id}/commands"
    return f"/applications/{application_id}/commands"


def command_route(application_id: str, command_id: str, guild_id: Optional[str] = None) -> str:
    return f"{commands_route(application_id, guild_id)}/{command_id}"


def webhook_route(application_id: str, interaction_token: str) -> str:
    return f"/webhooks/{application_id}/{interaction_token}"


class _BaseClient:
    """Shared request plumbing around an ``httpx.AsyncClient``."""

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self._http = http_client
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        token: Optional[BearerToken] = None,
        json: Any = None,
        data: Optional[dict[str, str]] = None,
        auth: Optional[tuple[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if token is not None:
            headers["Authorization"] = token.authorization

        url = f"{self.api_base}{endpoint}"
        logger.debug("%s %s", method, endpoint)

        if self._http is not None:
            resp = await self._http.request(
                method, url, headers=headers, json=json, data=data, auth=auth, params=params
            )
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method, url, headers=headers, json=json, data=data, auth=auth, params=params
                )

        if not resp.is_success:
            raise RemoteAPIError(method, endpoint, resp.status_code, resp.text)
        return resp


class DiscordRestClient(_BaseClient):
    """Application-command registry operations."""

    async def exchange_credentials_for_token(
        self, client_id: str, client_secret: str
    ) -> BearerToken:
        """Perform a client-credentials grant and return the bearer token."""
        resp = await self._request(
            "POST",
            "/oauth2/token",
            data={"grant_type": "client_credentials", "scope": TOKEN_SCOPE},
            auth=(client_id, client_secret),
        )
        body = resp.json()
        return BearerToken(
            access_token=body["access_token"],
            token_type=body.get("token_type", "Bearer"),
            expires_in=body.get("expires_in", 0),
            scope=body.get("scope", ""),
        )

    async def list_commands(
        self, application_id: str, token: BearerToken, guild_id: Optional[str] = None
    ) -> list[dict[str, Any]]:
        resp = await self._request("GET", commands_route(application_id, guild_id), token=token)
        return resp.json()

    async def create_command(
        self,
        application_id: str,
        token: BearerToken,
        payload: dict[str, Any],
        guild_id: Optional[str] = None,
    ) -> dict[str, Any]:
        resp = await self._request(
            "POST", commands_route(application_id, guild_id), token=token, json=payload
        )
        return resp.json()

    async def patch_command(
        self,
        application_id: str,
        token: BearerToken,
        command_id: str,
        payload: dict[str, Any],
        guild_id: Optional[str] = None,
    ) -> dict[str, Any]:
        resp = await self._request(
            "PATCH",
            command_route(application_id, command_id, guild_id),
            token=token,
            json=payload,
        )
        return resp.json()

    async def delete_command(
        self,
        application_id: str,
        token: BearerToken,
        command_id: str,
        guild_id: Optional[str] = None,
    ) -> None:
        await self._request(
            "DELETE", command_route(application_id, command_id, guild_id), token=token
        )


class InteractionWebhookClient(_BaseClient):
    """Follow-up and original-response operations for one interaction.

    Interaction tokens stay valid for 15 minutes and authorise these calls
    on their own; no bearer token is sent.
    """

    async def edit_original_response(
        self,
        application_id: str,
        interaction_token: str,
        payload: dict[str, Any],
        message_id: str = "@original",
    ) -> dict[str, Any]:
        resp = await self._request(
            "PATCH",
            f"{webhook_route(application_id, interaction_token)}/messages/{message_id}",
            json=payload,
            params={"wait": "true"},
        )
        return resp.json()

    async def send_followup_message(
        self,
        application_id: str,
        interaction_token: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        resp = await self._request(
            "POST",
            webhook_route(application_id, interaction_token),
            json=payload,
            params={"wait": "true"},
        )
        return resp.json()
