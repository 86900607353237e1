"""Delivery registration use cases: create, look up and edit records."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ...config import Settings, settings
from ...errors import DeliveryNotFoundError, DeliveryValidationError, ServiceNotConfiguredError
from ...models.domain import ADDRESS_FIELDS, DeliveryRecord, DeliveryStatus, LocationType
from ...persistence.deliveries import DeliveryStore
from ...schemas.deliveries import DeliveryCreateRequest, DeliveryUpdateRequest
from ..locations import AddressForm, AddressHierarchyResolver, InvalidAddressTransition
from ..slips import SlipUploader, validate_slip
from ..tracking import generate_tracking_id, is_tracking_id

logger = logging.getLogger(__name__)

LINE_USER_ID_PATTERN = re.compile(r"^U[0-9a-f]{32}$")

# API field name -> record attribute, in the order missing fields are reported.
ADDRESS_FIELD_NAMES: dict[str, str] = {
    "addressDetails": "address_details",
    "subDistrict": "sub_district",
    "district": "district",
    "province": "province",
    "postalCode": "postal_code",
}
# Hierarchy order, highest first; postal code is resolved from the levels above it.
ADDRESS_LEVELS: tuple[tuple[str, str], ...] = (
    ("province", "province"),
    ("district", "district"),
    ("subDistrict", "sub_district"),
    ("postalCode", "postal_code"),
)
EDITABLE_FIELD_NAMES: dict[str, str] = {
    "customerName": "customer_name",
    "phone": "phone",
    **ADDRESS_FIELD_NAMES,
}


@dataclass(slots=True)
class SlipAttachment:
    content: bytes
    filename: str
    content_type: str | None


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _check_line_user_id(line_user_id: str) -> None:
    if not LINE_USER_ID_PATTERN.fullmatch(line_user_id):
        raise DeliveryValidationError("Malformed line_user_id", field="line_user_id")


def _check_cascade(changes: dict[str, Any]) -> None:
    """A changed address level must come with every level below it."""
    for index, (api_name, attribute) in enumerate(ADDRESS_LEVELS):
        if attribute not in changes:
            continue
        for lower_name, lower_attribute in ADDRESS_LEVELS[index + 1 :]:
            if lower_attribute not in changes:
                raise DeliveryValidationError(
                    f"Changing {api_name} requires {lower_name} in the same request", field=lower_name
                )
        return


def _check_address_tuple(
    resolver: AddressHierarchyResolver | None, province: str, district: str, sub_district: str, postal_code: str
) -> None:
    if resolver is None:
        raise ServiceNotConfiguredError("Strict address validation requires the reference location table.")
    try:
        AddressForm.from_names(
            resolver,
            province=province,
            district=district,
            sub_district=sub_district,
            postal_code=postal_code,
        )
    except InvalidAddressTransition as exc:
        raise DeliveryValidationError(str(exc), field="postalCode") from exc


def create_delivery(
    store: DeliveryStore,
    payload: DeliveryCreateRequest,
    *,
    attachment: SlipAttachment | None = None,
    uploader: SlipUploader | None = None,
    resolver: AddressHierarchyResolver | None = None,
    config: Settings = settings,
) -> DeliveryRecord:
    """Validate, upload the slip (home only), generate a tracking ID and insert the record.

    All validation runs before the upload and the insert, so a rejected request writes nothing.
    """
    customer_name = _clean(payload.customerName)
    phone = _clean(payload.phone)
    line_user_id = _clean(payload.line_user_id) or None

    if not customer_name:
        raise DeliveryValidationError("Missing required field: customerName", field="customerName")
    if not phone:
        raise DeliveryValidationError("Missing required field: phone", field="phone")
    if line_user_id:
        _check_line_user_id(line_user_id)
    if payload.locationType is None:
        raise DeliveryValidationError("Missing required field: locationType", field="locationType")

    location_type = LocationType(payload.locationType)
    address: dict[str, str | None] = {attribute: None for attribute in ADDRESS_FIELDS}

    if location_type is LocationType.HOME:
        for api_name, attribute in ADDRESS_FIELD_NAMES.items():
            value = _clean(getattr(payload, api_name))
            if not value:
                raise DeliveryValidationError(f"Missing required field: {api_name}", field=api_name)
            address[attribute] = value
        if config.strict_address_validation:
            _check_address_tuple(
                resolver, address["province"], address["district"], address["sub_district"], address["postal_code"]
            )
        if attachment is None and config.require_slip_for_home:
            raise DeliveryValidationError("Missing required field: file", field="file")
    elif attachment is not None:
        logger.debug("Ignoring slip attached to a store pickup registration")
        attachment = None

    slip_image_url: str | None = None
    if attachment is not None:
        content_type = validate_slip(
            attachment.content, attachment.content_type, attachment.filename, max_bytes=config.slip_max_bytes
        )
        if uploader is None:
            raise ServiceNotConfiguredError("Slip upload service is not configured.")
        slip_image_url = uploader.upload(
            attachment.content,
            attachment.filename or "slip",
            content_type,
            identifier=line_user_id or phone,
        )

    now = datetime.now(timezone.utc)
    record = DeliveryRecord(
        customer_name=customer_name,
        phone=phone,
        line_user_id=line_user_id,
        location_type=location_type,
        slip_image_url=slip_image_url,
        tracking_id=generate_tracking_id(),
        status=DeliveryStatus.PENDING,
        created_at=now,
        updated_at=now,
        **address,
    )
    record.id = store.insert(record)
    logger.info(f"Created {location_type.value} delivery {record.id} with tracking ID {record.tracking_id}")
    return record


def find_deliveries(
    store: DeliveryStore, line_user_id: str | None = None, phone: str | None = None
) -> list[DeliveryRecord]:
    """Records matching the LINE user ID or the phone, newest first (empty when none)."""
    line_user_id = _clean(line_user_id) or None
    phone = _clean(phone) or None
    if not line_user_id and not phone:
        raise DeliveryValidationError("Provide line_user_id or phone", field="line_user_id")
    if line_user_id:
        _check_line_user_id(line_user_id)
    records = store.find_by_identifier_or_phone(line_user_id=line_user_id, phone=phone)
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def get_latest_delivery(
    store: DeliveryStore, line_user_id: str | None = None, phone: str | None = None
) -> DeliveryRecord:
    """The current delivery for an identifier: the most recent record wins."""
    records = find_deliveries(store, line_user_id=line_user_id, phone=phone)
    if not records:
        raise DeliveryNotFoundError("No delivery found")
    return records[0]


def _check_delivery_id(delivery_id: str) -> str:
    try:
        return str(uuid.UUID(delivery_id))
    except (ValueError, AttributeError, TypeError) as exc:
        raise DeliveryValidationError("Invalid delivery ID format", field="id") from exc


def get_delivery(store: DeliveryStore, delivery_id: str) -> DeliveryRecord:
    record = store.find_by_id(_check_delivery_id(delivery_id))
    if record is None:
        raise DeliveryNotFoundError(f"Delivery {delivery_id} not found")
    return record


def get_delivery_by_tracking_id(store: DeliveryStore, tracking_id: str) -> DeliveryRecord:
    tracking_id = _clean(tracking_id).upper()
    if not is_tracking_id(tracking_id):
        raise DeliveryValidationError("Invalid tracking ID format", field="trackingId")
    records = store.find_by_tracking_id(tracking_id)
    if not records:
        raise DeliveryNotFoundError(f"Delivery {tracking_id} not found")
    if len(records) > 1:
        logger.warning(f"Tracking ID {tracking_id} is shared by {len(records)} deliveries; returning the newest")
    return max(records, key=lambda record: record.created_at)


def update_delivery(
    store: DeliveryStore,
    delivery_id: str,
    payload: DeliveryUpdateRequest,
    *,
    resolver: AddressHierarchyResolver | None = None,
    config: Settings = settings,
) -> DeliveryRecord:
    """Apply a partial edit; unlisted fields are ignored and ``updated_at`` is refreshed."""
    current = get_delivery(store, delivery_id)
    provided = payload.model_dump(exclude_unset=True)

    if current.location_type is LocationType.STORE:
        provided = {key: value for key, value in provided.items() if key not in ADDRESS_FIELD_NAMES}

    changes: dict[str, Any] = {}
    for api_name, attribute in EDITABLE_FIELD_NAMES.items():
        if api_name not in provided:
            continue
        value = _clean(provided[api_name])
        if not value:
            raise DeliveryValidationError(f"Field {api_name} must not be empty", field=api_name)
        changes[attribute] = value

    if not changes:
        raise DeliveryValidationError("No fields to update")

    _check_cascade(changes)

    if config.strict_address_validation and any(attribute in changes for attribute in ADDRESS_FIELDS):
        merged = {attribute: changes.get(attribute, getattr(current, attribute)) for attribute in ADDRESS_FIELDS}
        _check_address_tuple(
            resolver,
            merged["province"] or "",
            merged["district"] or "",
            merged["sub_district"] or "",
            merged["postal_code"] or "",
        )

    changes["updated_at"] = datetime.now(timezone.utc)
    updated = store.update_by_id(current.id or delivery_id, changes)
    if updated is None:
        raise DeliveryNotFoundError(f"Delivery {delivery_id} not found")
    logger.info(f"Updated delivery {updated.id}: {sorted(key for key in changes if key != 'updated_at')}")
    return updated
