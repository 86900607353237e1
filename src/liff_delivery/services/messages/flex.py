"""LINE Flex message summarizing a delivery record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict
from zoneinfo import ZoneInfo

from ...models.domain import DeliveryRecord, LocationType

LABEL_COLOR = "#aaaaaa"
VALUE_COLOR = "#666666"
ACCENT_COLOR = "#1e40af"


def format_thai_date(moment: datetime, tz_name: str = "Asia/Bangkok") -> str:
    """Render a date the way ``toLocaleDateString("th-TH")`` does (Buddhist calendar year)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(ZoneInfo(tz_name))
    return f"{local.day}/{local.month}/{local.year + 543}"


def format_address(record: DeliveryRecord) -> str:
    return (
        f"{record.address_details or ''}, {record.sub_district or ''}, "
        f"{record.district or ''}, {record.province or ''} {record.postal_code or ''}"
    ).strip()


def _row(label: str, value: str, **value_style: Any) -> Dict[str, Any]:
    return {
        "type": "box",
        "layout": "baseline",
        "contents": [
            {"type": "text", "text": label, "color": LABEL_COLOR, "size": "sm", "flex": 1},
            {
                "type": "text",
                "text": value,
                "wrap": True,
                "color": VALUE_COLOR,
                "size": "sm",
                "flex": 5,
                **value_style,
            },
        ],
    }


def build_delivery_summary(
    record: DeliveryRecord,
    *,
    confirm_url: str,
    store_pickup_label: str,
    tz_name: str = "Asia/Bangkok",
) -> Dict[str, Any]:
    if record.location_type is LocationType.HOME:
        location_row = _row("ที่อยู่:", format_address(record))
    else:
        location_row = _row("รับที่:", store_pickup_label)

    return {
        "type": "flex",
        "altText": "ข้อมูลการจัดส่ง",
        "contents": {
            "type": "bubble",
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "text",
                        "text": "📦 ข้อมูลการจัดส่ง",
                        "weight": "bold",
                        "size": "lg",
                        "color": ACCENT_COLOR,
                    },
                    {
                        "type": "box",
                        "layout": "vertical",
                        "margin": "md",
                        "spacing": "sm",
                        "contents": [
                            _row("รหัส:", record.tracking_id or "N/A", color=ACCENT_COLOR, weight="bold"),
                            _row("ชื่อ:", record.customer_name),
                            _row("เบอร์:", record.phone),
                            location_row,
                            _row("วันที่:", format_thai_date(record.created_at, tz_name)),
                        ],
                    },
                ],
            },
            "footer": {
                "type": "box",
                "layout": "vertical",
                "spacing": "sm",
                "contents": [
                    {
                        "type": "button",
                        "style": "primary",
                        "height": "sm",
                        "action": {"type": "uri", "label": "ดูข้อมูลการจัดส่ง", "uri": confirm_url},
                    }
                ],
            },
        },
    }
