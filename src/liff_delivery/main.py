"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import deliveries, find, health, locations
from .config import Settings, settings
from .data.locations_repository import LocationRepository
from .db import create_supabase_client
from .persistence.deliveries import SupabaseDeliveryStore
from .services.locations import AddressHierarchyResolver
from .services.messages import LineMessagingClient
from .services.slips import SlipUploader

logger = logging.getLogger(__name__)


def _lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = create_supabase_client(config)
        http_client = httpx.Client(timeout=config.upload_timeout_seconds)

        app.state.delivery_store = (
            SupabaseDeliveryStore(client, table=config.deliveries_table) if client is not None else None
        )
        repository = LocationRepository(
            client,
            view=config.locations_view,
            source=config.locations_file,
            page_size=config.location_page_size,
        )
        app.state.location_repository = repository
        app.state.location_resolver = AddressHierarchyResolver(repository.rows)
        app.state.slip_uploader = SlipUploader(config.upload_image_api_url, http_client)
        app.state.line_client = LineMessagingClient(
            config.line_channel_access_token,
            http_client,
            base_url=config.line_api_base_url,
        )
        logger.info(f"{config.app_name} started (database configured: {client is not None})")
        try:
            yield
        finally:
            http_client.close()

    return lifespan


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings
    app = FastAPI(
        title=config.app_name,
        root_path="",
        lifespan=_lifespan(config),
    )
    app.state.settings = config
    if config.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": config.app_name,
            "status": "running",
            "api_prefix": config.api_prefix,
            "health": f"{config.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=config.api_prefix)
    app.include_router(deliveries.router, prefix=config.api_prefix)
    app.include_router(find.router, prefix=config.api_prefix)
    app.include_router(locations.router, prefix=config.api_prefix)
    return app


app = create_app()
