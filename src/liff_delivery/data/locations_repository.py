"""Reference location table loader with database-first approach, falling back to a CSV/XLSX file."""

from __future__ import annotations

import csv
import functools
import logging
import threading
import zipfile
from pathlib import Path
from typing import Any, Iterable, Mapping

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from supabase import Client

from ..errors import ServiceNotConfiguredError, UpstreamServiceError
from ..models.domain import LocationRow

logger = logging.getLogger(__name__)

# Column aliases: the Supabase view uses tambon/amphoe naming, exported files may use either.
_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "province_id": ("province_id", "ProvinceId"),
    "province_name_th": ("province_name_th", "ProvinceNameTh"),
    "province_name_en": ("province_name_en", "ProvinceNameEn"),
    "district_id": ("amphoe_id", "district_id", "DistrictId"),
    "district_name_th": ("amphoe_name_th", "district_name_th", "DistrictNameTh"),
    "district_name_en": ("amphoe_name_en", "district_name_en", "DistrictNameEn"),
    "subdistrict_id": ("tambon_id", "subdistrict_id", "SubDistrictId"),
    "subdistrict_name_th": ("tambon_name_th", "subdistrict_name_th", "SubDistrictNameTh"),
    "subdistrict_name_en": ("tambon_name_en", "subdistrict_name_en", "SubDistrictNameEn"),
    "postal_code": ("zip_code", "postal_code", "PostalCode"),
}


def _lookup(row: Mapping[str, Any], field_name: str) -> Any:
    for alias in _COLUMN_ALIASES[field_name]:
        value = row.get(alias)
        if value is not None and value != "":
            return value
    return None


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_int(value: Any, field_name: str) -> int:
    if value is None:
        raise ValueError(f"Missing value for '{field_name}'")
    try:
        return int(float(str(value).strip()))
    except ValueError as exc:
        raise ValueError(f"Unable to parse integer for '{field_name}' from value '{value}'") from exc


def row_to_location(row: Mapping[str, Any]) -> LocationRow:
    """Convert a raw table/file row into a LocationRow, raising ValueError on bad data."""
    postal_code = _clean_text(_lookup(row, "postal_code"))
    if not postal_code:
        raise ValueError("Missing postal code")
    if postal_code.endswith(".0"):
        # Spreadsheet cells often carry postal codes as floats.
        postal_code = postal_code[:-2]
    return LocationRow(
        province_id=_coerce_int(_lookup(row, "province_id"), "province_id"),
        province_name_th=_clean_text(_lookup(row, "province_name_th")),
        province_name_en=_clean_text(_lookup(row, "province_name_en")),
        district_id=_coerce_int(_lookup(row, "district_id"), "district_id"),
        district_name_th=_clean_text(_lookup(row, "district_name_th")),
        district_name_en=_clean_text(_lookup(row, "district_name_en")),
        subdistrict_id=_coerce_int(_lookup(row, "subdistrict_id"), "subdistrict_id"),
        subdistrict_name_th=_clean_text(_lookup(row, "subdistrict_name_th")),
        subdistrict_name_en=_clean_text(_lookup(row, "subdistrict_name_en")),
        postal_code=postal_code,
    )


def _convert_rows(rows: Iterable[Mapping[str, Any]], source: str) -> tuple[LocationRow, ...]:
    locations: list[LocationRow] = []
    skipped = 0
    for row in rows:
        try:
            locations.append(row_to_location(row))
        except ValueError as e:
            skipped += 1
            logger.debug(f"Skipping invalid location row from {source}: {e}")
    if skipped:
        logger.warning(f"Skipped {skipped} invalid location rows from {source}")
    return tuple(locations)


def _load_locations_from_database(client: Client, view: str, page_size: int) -> tuple[LocationRow, ...]:
    """Page through the reference view. Raises UpstreamServiceError when the query fails."""
    raw_rows: list[dict[str, Any]] = []
    start = 0
    try:
        while True:
            response = client.table(view).select("*").range(start, start + page_size - 1).execute()
            batch = response.data or []
            raw_rows.extend(batch)
            if len(batch) < page_size:
                break
            start += page_size
    except Exception as e:
        logger.warning(f"Failed to load reference locations from '{view}': {e}")
        raise UpstreamServiceError(f"Reference location table '{view}' is unavailable") from e
    return _convert_rows(raw_rows, view)


@functools.lru_cache(maxsize=4)
def load_locations_from_file(source: Path) -> tuple[LocationRow, ...]:
    """Load reference rows from a CSV or XLSX export."""
    if not source.exists():
        raise FileNotFoundError(f"Location file not found: {source}")

    suffix = source.suffix.lower()
    if suffix == ".csv":
        with source.open(mode="r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            if not reader.fieldnames:
                raise ValueError(f"Location file '{source}' is missing a header row.")
            return _convert_rows(list(reader), source.name)

    if suffix == ".xlsx":
        wb = load_workbook(source, data_only=True, read_only=True)
        try:
            sheet = wb.active
            rows = sheet.iter_rows(min_row=1, values_only=True)
            header = next(rows, None)
            if header is None:
                raise ValueError(f"Location workbook '{source}' is empty.")
            names = [str(name).strip() if name is not None else "" for name in header]
            return _convert_rows((dict(zip(names, values)) for values in rows), source.name)
        finally:
            wb.close()

    raise ValueError(f"Unsupported location file type '{suffix}' (expected .csv or .xlsx)")


class LocationRepository:
    """Loads the reference location table once per process and keeps it in memory."""

    def __init__(
        self,
        client: Client | None,
        *,
        view: str = "zip_code_view",
        source: Path | None = None,
        page_size: int = 1000,
    ) -> None:
        self.client = client
        self.view = view
        self.source = source
        self.page_size = page_size
        self._rows: tuple[LocationRow, ...] | None = None
        self._lock = threading.Lock()

    def rows(self) -> tuple[LocationRow, ...]:
        if self._rows is None:
            with self._lock:
                if self._rows is None:
                    self._rows = self._load()
        return self._rows

    def clear(self) -> None:
        with self._lock:
            self._rows = None

    def _load(self) -> tuple[LocationRow, ...]:
        database_error: UpstreamServiceError | None = None
        if self.client is not None:
            try:
                db_rows = _load_locations_from_database(self.client, self.view, self.page_size)
            except UpstreamServiceError as e:
                database_error = e
            else:
                if db_rows:
                    logger.info(f"Loaded {len(db_rows)} reference locations from '{self.view}'")
                    return db_rows

        if self.source is not None and self.source.exists():
            try:
                file_rows = load_locations_from_file(self.source)
            except (ValueError, OSError, csv.Error, InvalidFileException, zipfile.BadZipFile) as e:
                logger.warning(f"Failed to load reference locations from {self.source}: {e}")
                raise ServiceNotConfiguredError(f"Reference location file '{self.source.name}' is unreadable") from e
            logger.info(f"Loaded {len(file_rows)} reference locations from {self.source}")
            return file_rows

        if database_error is not None:
            raise database_error
        raise ServiceNotConfiguredError(
            "Reference location table not available: configure Supabase or DLV_LOCATIONS_FILE."
        )
