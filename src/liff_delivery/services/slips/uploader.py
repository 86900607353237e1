"""HTTP client for the slip image upload service."""

from __future__ import annotations

import logging

import httpx

from ...errors import ServiceNotConfiguredError, SlipRejectedError, UpstreamServiceError

logger = logging.getLogger(__name__)


class SlipUploader:
    """Posts slip files as multipart (``myFile`` + ``userId``) and returns the public URL."""

    def __init__(self, upload_url: str | None, client: httpx.Client) -> None:
        self.upload_url = upload_url
        self.client = client

    def upload(self, content: bytes, filename: str, content_type: str, identifier: str) -> str:
        if not content:
            raise SlipRejectedError("No file buffer provided for upload.")
        if not self.upload_url:
            raise ServiceNotConfiguredError("Slip upload URL is not configured (DLV_UPLOAD_IMAGE_API_URL).")

        logger.info(f"Uploading slip for identifier: {identifier} to {self.upload_url}")
        try:
            response = self.client.post(
                self.upload_url,
                files={"myFile": (filename, content, content_type)},
                data={"userId": identifier},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(f"Slip upload rejected with {status_code}: {e.response.text[:500]}")
            if 400 <= status_code < 500:
                raise SlipRejectedError(_error_message(e.response)) from e
            raise UpstreamServiceError("Could not upload slip image.") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error uploading slip: {e}")
            raise UpstreamServiceError("Could not upload slip image.") from e

        url = (payload.get("data") or {}).get("url") if isinstance(payload, dict) else None
        if not url:
            logger.error(f"Invalid response format from image upload service: {payload!r}")
            raise UpstreamServiceError("Could not upload slip image.")
        return str(url)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Slip image was rejected by the upload service."
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return "Slip image was rejected by the upload service."
