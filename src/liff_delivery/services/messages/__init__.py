"""Chat message builders and senders."""

from .flex import build_delivery_summary, format_address, format_thai_date
from .line_client import LineMessagingClient

__all__ = ["build_delivery_summary", "format_address", "format_thai_date", "LineMessagingClient"]
