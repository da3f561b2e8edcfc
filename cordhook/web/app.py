"""FastAPI application exposing the interaction webhook.

Routes:
- ``POST /interactions``: signed interaction callbacks
- ``GET /health``: liveness probe
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import sentry_sdk
from fastapi import BackgroundTasks, FastAPI, Request, Response

from cordhook import __version__
from cordhook.api.client import InteractionWebhookClient
from cordhook.config import Settings, load_settings
from cordhook.dispatch.background import StarletteBackgroundExecutor
from cordhook.dispatch.handler import InteractionApp, create_application, dispatch
from cordhook.dispatch.interactions import RawRequest
from cordhook.dispatch.sinks import SentryErrorSink

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


def create_app(interaction_app: InteractionApp) -> FastAPI:
    """Build the HTTP app around an already-configured ``InteractionApp``."""
    app = FastAPI(
        title="cordhook",
        description="Signed interaction webhook endpoint.",
        version=__version__,
    )

    @app.post("/interactions", tags=["interactions"])
    async def interactions(request: Request, background_tasks: BackgroundTasks):
        """Verify and dispatch one interaction callback."""
        # Raw bytes must be read before anything parses the body
        body = await request.body()
        result = await dispatch(
            interaction_app,
            RawRequest(headers=dict(request.headers), body=body),
            StarletteBackgroundExecutor(background_tasks),
        )
        return Response(
            content=result.encode(),
            status_code=result.status,
            headers=result.headers,
            background=background_tasks,
        )

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return Response(content="OK", media_type="text/plain", headers=NO_STORE_HEADERS)

    return app


def create_app_from_settings(
    commands: Iterable[Any],
    components: Iterable[Any],
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the HTTP app from environment settings.

    Initialises Sentry and reports handler failures to it when
    ``SENTRY_DSN`` is set.
    """
    settings = settings or load_settings()
    settings.require("public_key")

    error_sink = None
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn)
        error_sink = SentryErrorSink()

    interaction_app = create_application(
        commands,
        components,
        settings.public_key,
        warn=settings.warn,
        webhooks=InteractionWebhookClient(api_base=settings.api_base),
        error_sink=error_sink,
    )
    return create_app(interaction_app)
