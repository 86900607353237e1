"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DLV_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "LIFF Delivery Registration API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "https://liff.line.me",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    deliveries_table: str = Field(default="item_delivery", description="Table holding delivery records.")
    locations_view: str = Field(
        default="zip_code_view",
        description="View exposing one row per (province, district, subdistrict, postal code).",
    )
    locations_file: Optional[Path] = Field(
        default=Path("data/zip_codes.csv"),
        description="CSV/XLSX fallback for the reference location table.",
    )
    location_page_size: int = Field(default=1000, ge=1, le=10_000)

    # Slip upload service
    upload_image_api_url: Optional[str] = Field(
        default=None,
        description="Endpoint accepting multipart slip uploads (fields myFile, userId).",
    )
    upload_timeout_seconds: float = Field(default=30.0, gt=0.0)
    slip_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    require_slip_for_home: bool = Field(
        default=False,
        description="Reject home deliveries submitted without a payment slip.",
    )
    strict_address_validation: bool = Field(
        default=False,
        description="Require home addresses to match a row of the reference location table.",
    )

    # LINE
    line_channel_access_token: Optional[str] = Field(default=None)
    line_api_base_url: str = "https://api.line.me"
    liff_confirm_url: str = "https://liff.line.me/2007338329-1LxVpq5O/confirm"
    store_pickup_label: str = "ร้าน OK Mobile (15 ธ.ค. 68 เป็นต้นไป)"
    display_timezone: str = "Asia/Bangkok"

    @field_validator("locations_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
