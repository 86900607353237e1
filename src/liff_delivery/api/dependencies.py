"""Request-scoped access to the collaborators opened by the application lifespan."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..config import Settings
from ..errors import (
    DeliveryNotFoundError,
    DeliveryValidationError,
    ServiceNotConfiguredError,
    UpstreamServiceError,
)
from ..persistence.deliveries import DeliveryStore
from ..services.locations import AddressHierarchyResolver
from ..services.messages import LineMessagingClient
from ..services.slips import SlipUploader


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_delivery_store(request: Request) -> DeliveryStore:
    store = getattr(request.app.state, "delivery_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Delivery store not configured. Set DLV_SUPABASE_URL and DLV_SUPABASE_KEY.",
        )
    return store


def get_slip_uploader(request: Request) -> SlipUploader | None:
    return getattr(request.app.state, "slip_uploader", None)


def get_location_resolver(request: Request) -> AddressHierarchyResolver:
    resolver = getattr(request.app.state, "location_resolver", None)
    if resolver is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reference location table not configured.",
        )
    return resolver


def get_line_client(request: Request) -> LineMessagingClient | None:
    return getattr(request.app.state, "line_client", None)


def to_http_exception(exc: Exception) -> HTTPException:
    """Map the service error taxonomy onto HTTP responses."""
    if isinstance(exc, DeliveryValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(exc), "field": exc.field},
        )
    if isinstance(exc, DeliveryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ServiceNotConfiguredError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, UpstreamServiceError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")
