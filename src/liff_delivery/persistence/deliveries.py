"""Delivery record persistence."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

from supabase import Client

from ..errors import UpstreamServiceError
from ..models.domain import DeliveryRecord, DeliveryStatus, LocationType

logger = logging.getLogger(__name__)

_COLUMNS: tuple[str, ...] = (
    "customer_name",
    "phone",
    "line_user_id",
    "location_type",
    "address_details",
    "sub_district",
    "district",
    "province",
    "postal_code",
    "slip_image_url",
    "tracking_id",
    "status",
    "created_at",
    "updated_at",
)


class DeliveryStore(Protocol):
    """Document collection keyed by an opaque store-assigned ID."""

    def insert(self, record: DeliveryRecord) -> str: ...

    def find_by_id(self, delivery_id: str) -> DeliveryRecord | None: ...

    def find_by_identifier_or_phone(
        self, line_user_id: str | None = None, phone: str | None = None
    ) -> list[DeliveryRecord]: ...

    def find_by_tracking_id(self, tracking_id: str) -> list[DeliveryRecord]: ...

    def update_by_id(self, delivery_id: str, fields: dict[str, Any]) -> DeliveryRecord | None: ...

    def ping(self) -> int: ...


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (LocationType, DeliveryStatus)):
        return value.value
    return value


def record_to_row(record: DeliveryRecord) -> dict[str, Any]:
    return {column: _serialize(getattr(record, column)) for column in _COLUMNS}


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def row_to_record(row: dict[str, Any]) -> DeliveryRecord:
    created_at = _parse_timestamp(row["created_at"])
    return DeliveryRecord(
        id=str(row["id"]),
        customer_name=row.get("customer_name") or "",
        phone=row.get("phone") or "",
        line_user_id=row.get("line_user_id"),
        location_type=LocationType(row.get("location_type") or LocationType.HOME.value),
        address_details=row.get("address_details"),
        sub_district=row.get("sub_district"),
        district=row.get("district"),
        province=row.get("province"),
        postal_code=row.get("postal_code"),
        slip_image_url=row.get("slip_image_url"),
        tracking_id=row.get("tracking_id") or "",
        status=DeliveryStatus(row.get("status") or DeliveryStatus.PENDING.value),
        created_at=created_at,
        updated_at=_parse_timestamp(row["updated_at"]) if row.get("updated_at") else created_at,
    )


def _quote(value: str) -> str:
    """Quote a value for a PostgREST ``or`` filter."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseDeliveryStore:
    """DeliveryStore backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Client, table: str = "item_delivery") -> None:
        self.client = client
        self.table = table

    def insert(self, record: DeliveryRecord) -> str:
        try:
            response = self.client.table(self.table).insert(record_to_row(record)).execute()
        except Exception as e:
            logger.error(f"Failed to insert delivery {record.tracking_id}: {e}")
            raise UpstreamServiceError("Could not save delivery record") from e
        if not response.data:
            raise UpstreamServiceError("Store did not return the inserted delivery record")
        return str(response.data[0]["id"])

    def find_by_id(self, delivery_id: str) -> DeliveryRecord | None:
        try:
            response = self.client.table(self.table).select("*").eq("id", delivery_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to load delivery {delivery_id}: {e}")
            raise UpstreamServiceError("Could not load delivery record") from e
        rows = response.data or []
        return row_to_record(rows[0]) if rows else None

    def find_by_identifier_or_phone(
        self, line_user_id: str | None = None, phone: str | None = None
    ) -> list[DeliveryRecord]:
        if not line_user_id and not phone:
            return []
        query = self.client.table(self.table).select("*")
        if line_user_id and phone:
            query = query.or_(f"line_user_id.eq.{_quote(line_user_id)},phone.eq.{_quote(phone)}")
        elif line_user_id:
            query = query.eq("line_user_id", line_user_id)
        else:
            query = query.eq("phone", phone)
        try:
            response = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"Failed to search deliveries (line_user_id={line_user_id}, phone={phone}): {e}")
            raise UpstreamServiceError("Could not search delivery records") from e
        return [row_to_record(row) for row in (response.data or [])]

    def find_by_tracking_id(self, tracking_id: str) -> list[DeliveryRecord]:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("tracking_id", tracking_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to search deliveries by tracking ID {tracking_id}: {e}")
            raise UpstreamServiceError("Could not search delivery records") from e
        return [row_to_record(row) for row in (response.data or [])]

    def update_by_id(self, delivery_id: str, fields: dict[str, Any]) -> DeliveryRecord | None:
        payload = {key: _serialize(value) for key, value in fields.items()}
        try:
            response = self.client.table(self.table).update(payload).eq("id", delivery_id).execute()
        except Exception as e:
            logger.error(f"Failed to update delivery {delivery_id}: {e}")
            raise UpstreamServiceError("Could not update delivery record") from e
        rows = response.data or []
        return row_to_record(rows[0]) if rows else None

    def ping(self) -> int:
        """Count records; used by the database health check."""
        response = self.client.table(self.table).select("id", count="exact").limit(1).execute()
        return response.count or 0
