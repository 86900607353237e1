"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(request: Request) -> dict:
    """Check the delivery table and the reference location table."""
    store = getattr(request.app.state, "delivery_store", None)
    if store is None:
        return {
            "configured": False,
            "message": "Supabase not configured. Set DLV_SUPABASE_URL and DLV_SUPABASE_KEY environment variables.",
            "deliveries_count": 0,
        }

    try:
        count = store.ping()
    except Exception as e:
        return {
            "configured": True,
            "connected": False,
            "error": str(e),
            "message": f"Database connection error: {e}",
        }

    result = {
        "configured": True,
        "connected": True,
        "deliveries_count": count,
        "message": f"Database connected. Found {count} deliveries.",
    }
    repository = getattr(request.app.state, "location_repository", None)
    if repository is not None:
        try:
            result["locations_count"] = len(repository.rows())
        except Exception as e:
            result["locations_count"] = 0
            result["locations_error"] = str(e)
    return result
