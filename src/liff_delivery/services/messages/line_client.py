"""LINE Messaging API push client."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from ...errors import ServiceNotConfiguredError, UpstreamServiceError

logger = logging.getLogger(__name__)

PUSH_PATH = "/v2/bot/message/push"


class LineMessagingClient:
    def __init__(self, access_token: str | None, client: httpx.Client, base_url: str = "https://api.line.me") -> None:
        self.access_token = access_token
        self.client = client
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def push(self, to: str, messages: List[Dict[str, Any]]) -> None:
        if not self.access_token:
            raise ServiceNotConfiguredError("LINE channel access token is not configured.")
        payload = {"to": to, "messages": messages}
        try:
            response = self.client.post(f"{self.base_url}{PUSH_PATH}", headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[LINE] push failed: {e}")
            raise UpstreamServiceError("Could not send LINE message.") from e
        if response.status_code >= 400:
            logger.warning(f"[LINE] push failed: {response.status_code} {response.text[:500]}")
            raise UpstreamServiceError("Could not send LINE message.")
