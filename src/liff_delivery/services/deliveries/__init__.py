"""Delivery service helpers."""

from .service import (
    SlipAttachment,
    create_delivery,
    find_deliveries,
    get_delivery,
    get_delivery_by_tracking_id,
    get_latest_delivery,
    update_delivery,
)

__all__ = [
    "SlipAttachment",
    "create_delivery",
    "find_deliveries",
    "get_delivery",
    "get_delivery_by_tracking_id",
    "get_latest_delivery",
    "update_delivery",
]
