"""Tests for the REST transport clients, using httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from cordhook.api.client import BearerToken, DiscordRestClient, InteractionWebhookClient
from cordhook.errors import RemoteAPIError

API = "https://api.test/v10"


def _client(handler, cls=DiscordRestClient):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return cls(api_base=API, http_client=http)


@pytest.mark.asyncio
async def test_token_exchange_uses_basic_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.content.decode()
        return httpx.Response(200, json={"access_token": "abc", "token_type": "Bearer", "expires_in": 604800})

    token = await _client(handler).exchange_credentials_for_token("id", "secret")

    assert token == BearerToken(access_token="abc", token_type="Bearer", expires_in=604800)
    assert seen["url"] == f"{API}/oauth2/token"
    assert seen["auth"] == "Basic " + base64.b64encode(b"id:secret").decode()
    assert "grant_type=client_credentials" in seen["body"]
    assert "scope=applications.commands.update" in seen["body"]


@pytest.mark.asyncio
async def test_guild_and_global_routes():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append((request.method, request.url.path, request.headers.get("Authorization")))
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json=[] if request.method == "GET" else {"id": "1"})

    client = _client(handler)
    token = BearerToken(access_token="abc")
    await client.list_commands("app", token)
    await client.list_commands("app", token, guild_id="g")
    await client.create_command("app", token, {"name": "ping"}, guild_id="g")
    await client.patch_command("app", token, "1", {"description": "x"})
    await client.delete_command("app", token, "1", guild_id="g")

    assert paths == [
        ("GET", "/v10/applications/app/commands", "Bearer abc"),
        ("GET", "/v10/applications/app/guilds/g/commands", "Bearer abc"),
        ("POST", "/v10/applications/app/guilds/g/commands", "Bearer abc"),
        ("PATCH", "/v10/applications/app/commands/1", "Bearer abc"),
        ("DELETE", "/v10/applications/app/guilds/g/commands/1", "Bearer abc"),
    ]


@pytest.mark.asyncio
async def test_error_carries_status_and_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text='{"message": "You are being rate limited."}')

    with pytest.raises(RemoteAPIError) as excinfo:
        await _client(handler).create_command("app", BearerToken("t"), {"name": "ping"})

    err = excinfo.value
    assert err.method == "POST"
    assert err.endpoint == "/applications/app/commands"
    assert err.status_code == 429
    assert "rate limited" in err.text
    assert "429" in str(err)


@pytest.mark.asyncio
async def test_followups_use_interaction_token_only():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.url.params.get("wait"),
                     "Authorization" in request.headers, json.loads(request.content)))
        return httpx.Response(200, json={"id": "m"})

    client = _client(handler, InteractionWebhookClient)
    await client.edit_original_response("app", "tok", {"content": "a"})
    await client.edit_original_response("app", "tok", {"content": "b"}, message_id="m1")
    await client.send_followup_message("app", "tok", {"content": "c"})

    assert seen == [
        ("PATCH", "/v10/webhooks/app/tok/messages/@original", "true", False, {"content": "a"}),
        ("PATCH", "/v10/webhooks/app/tok/messages/m1", "true", False, {"content": "b"}),
        ("POST", "/v10/webhooks/app/tok", "true", False, {"content": "c"}),
    ]
