"""Look up a customer's deliveries by LINE user ID or phone."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ...errors import DeliveryNotFoundError, DeliveryValidationError, UpstreamServiceError
from ...persistence.deliveries import DeliveryStore
from ...schemas.deliveries import (
    DeliveryDetailResponse,
    DeliveryListResponse,
    DeliveryModel,
    FindDeliveryRequest,
)
from ...services.deliveries import find_deliveries, get_latest_delivery
from ..dependencies import get_delivery_store, to_http_exception

router = APIRouter(prefix="/find", tags=["delivery"])

NOT_FOUND_MESSAGE = "ไม่พบข้อมูล"


def _search(store: DeliveryStore, line_user_id: str | None, phone: str | None) -> DeliveryListResponse | JSONResponse:
    try:
        records = find_deliveries(store, line_user_id=line_user_id, phone=phone)
    except (DeliveryValidationError, UpstreamServiceError) as exc:
        raise to_http_exception(exc) from exc
    if not records:
        # Explicit empty result, distinct from a failure.
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": NOT_FOUND_MESSAGE, "data": []})
    return DeliveryListResponse(
        message="พบข้อมูล",
        count=len(records),
        data=[DeliveryModel.from_record(record) for record in records],
    )


@router.get("", response_model=DeliveryListResponse, status_code=status.HTTP_200_OK)
def find_by_query(
    line_user_id: str | None = Query(default=None, description="LINE user ID"),
    phone: str | None = Query(default=None, description="Phone number"),
    store: DeliveryStore = Depends(get_delivery_store),
):
    return _search(store, line_user_id, phone)


@router.post("", response_model=DeliveryListResponse, status_code=status.HTTP_200_OK)
def find_by_body(payload: FindDeliveryRequest, store: DeliveryStore = Depends(get_delivery_store)):
    return _search(store, payload.line_user_id, payload.phone)


@router.get("/latest", response_model=DeliveryDetailResponse, status_code=status.HTTP_200_OK)
def find_latest(
    line_user_id: str | None = Query(default=None, description="LINE user ID"),
    phone: str | None = Query(default=None, description="Phone number"),
    store: DeliveryStore = Depends(get_delivery_store),
) -> DeliveryDetailResponse:
    """The confirmation page's record: the most recent delivery for the user."""
    try:
        record = get_latest_delivery(store, line_user_id=line_user_id, phone=phone)
    except (DeliveryValidationError, DeliveryNotFoundError, UpstreamServiceError) as exc:
        raise to_http_exception(exc) from exc
    return DeliveryDetailResponse(message="พบข้อมูล", data=DeliveryModel.from_record(record))
