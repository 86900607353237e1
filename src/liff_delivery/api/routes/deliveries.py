"""Delivery registration endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError

from ...config import Settings
from ...errors import (
    DeliveryNotFoundError,
    DeliveryValidationError,
    ServiceNotConfiguredError,
    UpstreamServiceError,
)
from ...persistence.deliveries import DeliveryStore
from ...schemas.deliveries import (
    DeliveryCreatedResponse,
    DeliveryCreateRequest,
    DeliveryDetailResponse,
    DeliveryModel,
    DeliveryUpdateRequest,
    FlexMessageResponse,
    NotifyResponse,
)
from ...services.deliveries import (
    SlipAttachment,
    create_delivery,
    get_delivery,
    get_delivery_by_tracking_id,
    update_delivery,
)
from ...services.locations import AddressHierarchyResolver
from ...services.messages import LineMessagingClient, build_delivery_summary
from ...services.slips import SlipUploader
from ..dependencies import (
    get_delivery_store,
    get_line_client,
    get_location_resolver,
    get_settings,
    get_slip_uploader,
    to_http_exception,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["delivery"])

SERVICE_ERRORS = (DeliveryValidationError, DeliveryNotFoundError, ServiceNotConfiguredError, UpstreamServiceError)


def _parse_create_payload(data: str | None) -> DeliveryCreateRequest:
    if not data:
        raise DeliveryValidationError("Missing required field: data", field="data")
    try:
        return DeliveryCreateRequest.model_validate_json(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "data"
        raise DeliveryValidationError(f"Invalid value for {field}: {first.get('msg')}", field=field) from exc


@router.post("", response_model=DeliveryCreatedResponse, status_code=status.HTTP_201_CREATED)
def register_delivery(
    data: str | None = Form(default=None, description="JSON-encoded registration fields."),
    file: UploadFile | None = File(default=None, description="Optional payment slip (image or PDF)."),
    store: DeliveryStore = Depends(get_delivery_store),
    uploader: SlipUploader | None = Depends(get_slip_uploader),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
    config: Settings = Depends(get_settings),
) -> DeliveryCreatedResponse:
    attachment = None
    if file is not None and file.filename:
        attachment = SlipAttachment(
            # Read at most one byte past the limit.
            content=file.file.read(config.slip_max_bytes + 1),
            filename=file.filename,
            content_type=file.content_type,
        )
    try:
        payload = _parse_create_payload(data)
        record = create_delivery(
            store,
            payload,
            attachment=attachment,
            uploader=uploader,
            resolver=resolver,
            config=config,
        )
    except SERVICE_ERRORS as exc:
        if not isinstance(exc, DeliveryValidationError):
            logger.error(f"/api/delivery POST error: {exc}")
        raise to_http_exception(exc) from exc

    return DeliveryCreatedResponse(
        id=record.id or "",
        slipImageUrl=record.slip_image_url,
        trackingId=record.tracking_id,
        createdAt=record.created_at,
    )


@router.get("/tracking/{tracking_id}", response_model=DeliveryDetailResponse, status_code=status.HTTP_200_OK)
def read_delivery_by_tracking_id(
    tracking_id: str,
    store: DeliveryStore = Depends(get_delivery_store),
) -> DeliveryDetailResponse:
    try:
        record = get_delivery_by_tracking_id(store, tracking_id)
    except SERVICE_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return DeliveryDetailResponse(message="พบข้อมูล", data=DeliveryModel.from_record(record))


@router.get("/{delivery_id}", response_model=DeliveryDetailResponse, status_code=status.HTTP_200_OK)
def read_delivery(
    delivery_id: str,
    store: DeliveryStore = Depends(get_delivery_store),
) -> DeliveryDetailResponse:
    try:
        record = get_delivery(store, delivery_id)
    except SERVICE_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return DeliveryDetailResponse(message="พบข้อมูล", data=DeliveryModel.from_record(record))


@router.put("/{delivery_id}", response_model=DeliveryDetailResponse, status_code=status.HTTP_200_OK)
def edit_delivery(
    delivery_id: str,
    payload: DeliveryUpdateRequest,
    store: DeliveryStore = Depends(get_delivery_store),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
    config: Settings = Depends(get_settings),
) -> DeliveryDetailResponse:
    try:
        record = update_delivery(store, delivery_id, payload, resolver=resolver, config=config)
    except SERVICE_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return DeliveryDetailResponse(message="อัปเดตข้อมูลสำเร็จ", data=DeliveryModel.from_record(record))


@router.get("/{delivery_id}/message", response_model=FlexMessageResponse, status_code=status.HTTP_200_OK)
def delivery_summary_message(
    delivery_id: str,
    store: DeliveryStore = Depends(get_delivery_store),
    config: Settings = Depends(get_settings),
) -> FlexMessageResponse:
    """Flex summary for the LIFF client to send with ``liff.sendMessages``."""
    try:
        record = get_delivery(store, delivery_id)
    except SERVICE_ERRORS as exc:
        raise to_http_exception(exc) from exc
    message = build_delivery_summary(
        record,
        confirm_url=config.liff_confirm_url,
        store_pickup_label=config.store_pickup_label,
        tz_name=config.display_timezone,
    )
    return FlexMessageResponse(trackingId=record.tracking_id, messages=[message])


@router.post("/{delivery_id}/notify", response_model=NotifyResponse, status_code=status.HTTP_200_OK)
def notify_delivery_owner(
    delivery_id: str,
    store: DeliveryStore = Depends(get_delivery_store),
    line_client: LineMessagingClient | None = Depends(get_line_client),
    config: Settings = Depends(get_settings),
) -> NotifyResponse:
    """Push the summary into the owner's chat when the client cannot send it itself."""
    try:
        record = get_delivery(store, delivery_id)
        if not record.line_user_id:
            raise DeliveryValidationError("Delivery has no LINE user to notify", field="line_user_id")
        if line_client is None:
            raise ServiceNotConfiguredError("LINE messaging is not configured.")
        message = build_delivery_summary(
            record,
            confirm_url=config.liff_confirm_url,
            store_pickup_label=config.store_pickup_label,
            tz_name=config.display_timezone,
        )
        line_client.push(record.line_user_id, [message])
    except SERVICE_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return NotifyResponse(sent=True, to=record.line_user_id)
