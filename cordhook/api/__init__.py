"""REST transport clients for the remote interactions platform."""

from cordhook.api.client import BearerToken, DiscordRestClient, InteractionWebhookClient

__all__ = ["BearerToken", "DiscordRestClient", "InteractionWebhookClient"]
