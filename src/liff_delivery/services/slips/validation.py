"""Sanity checks for uploaded payment slips."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ...errors import DeliveryValidationError

PDF_CONTENT_TYPE = "application/pdf"


def validate_slip(content: bytes, content_type: str | None, filename: str | None, *, max_bytes: int) -> str:
    """Check a slip file and return its normalized content type.

    Images must be decodable; PDFs are only checked for their header.
    """
    if not content:
        raise DeliveryValidationError("Slip file is empty", field="file")
    if len(content) > max_bytes:
        raise DeliveryValidationError(
            f"Slip file is too large ({len(content)} bytes, limit {max_bytes})", field="file"
        )

    normalized = (content_type or "").split(";")[0].strip().lower()
    if not normalized and filename and filename.lower().endswith(".pdf"):
        normalized = PDF_CONTENT_TYPE

    if normalized == PDF_CONTENT_TYPE:
        if not content.startswith(b"%PDF"):
            raise DeliveryValidationError("Slip file is not a valid PDF", field="file")
        return normalized

    if normalized and not normalized.startswith("image/"):
        raise DeliveryValidationError(
            f"Unsupported slip file type '{normalized}' (expected an image or PDF)", field="file"
        )

    try:
        with Image.open(BytesIO(content)) as image:
            image.verify()
            detected = Image.MIME.get(image.format or "", "")
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise DeliveryValidationError("Slip file is not a readable image", field="file") from exc

    return normalized or detected or "application/octet-stream"
