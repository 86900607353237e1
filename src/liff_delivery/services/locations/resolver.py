"""Cascading address lookups over the reference location table."""

from __future__ import annotations

from typing import Optional, Sequence

from ...models.domain import District, LocationRow, PostalCodeMatch, Province, SubDistrict
from .levels import (
    DistrictLevel,
    LocationFilter,
    PostalCodeLevel,
    ProvinceLevel,
    RowsProvider,
    SubDistrictLevel,
)

DEFAULT_LIMIT = 100


def _same_name(value: str, *names: Optional[str]) -> bool:
    wanted = value.strip().casefold()
    return any(wanted == name.strip().casefold() for name in names if name)


class AddressHierarchyResolver:
    """Composes the per-level lookups; every returned tuple exists in the reference rows."""

    def __init__(self, rows: RowsProvider) -> None:
        self._rows = rows
        self.provinces = ProvinceLevel(rows)
        self.districts = DistrictLevel(rows)
        self.subdistricts = SubDistrictLevel(rows)
        self.postal_codes = PostalCodeLevel(rows)

    @classmethod
    def from_rows(cls, rows: Sequence[LocationRow]) -> "AddressHierarchyResolver":
        frozen = tuple(rows)
        return cls(lambda: frozen)

    def list_provinces(self, search: str | None = None, limit: int | None = DEFAULT_LIMIT) -> list[Province]:
        return self.provinces.fetch(LocationFilter(search=search, limit=limit))

    def list_districts(
        self, province_id: int, search: str | None = None, limit: int | None = DEFAULT_LIMIT
    ) -> list[District]:
        return self.districts.fetch(LocationFilter(province_id=province_id, search=search, limit=limit))

    def list_subdistricts(
        self,
        province_id: int,
        district_id: int,
        search: str | None = None,
        limit: int | None = DEFAULT_LIMIT,
    ) -> list[SubDistrict]:
        return self.subdistricts.fetch(
            LocationFilter(province_id=province_id, district_id=district_id, search=search, limit=limit)
        )

    def list_postal_codes_by_prefix(self, prefix: str, limit: int | None = DEFAULT_LIMIT) -> list[PostalCodeMatch]:
        return self.postal_codes.fetch(LocationFilter(search=prefix, limit=limit))

    def resolve_postal_code(self, province_id: int, district_id: int, subdistrict_id: int) -> str | None:
        """Postal code for an exact tuple, or None when the tuple is not in the table."""
        for row in self._rows():
            if (
                row.province_id == province_id
                and row.district_id == district_id
                and row.subdistrict_id == subdistrict_id
            ):
                return row.postal_code
        return None

    def find_tuple(self, province: str, district: str, subdistrict: str, postal_code: str) -> LocationRow | None:
        """Match a submitted address (names in either language) against the reference rows."""
        postal_code = postal_code.strip()
        for row in self._rows():
            if row.postal_code != postal_code:
                continue
            if not _same_name(province, row.province_name_th, row.province_name_en):
                continue
            if not _same_name(district, row.district_name_th, row.district_name_en):
                continue
            if not _same_name(subdistrict, row.subdistrict_name_th, row.subdistrict_name_en):
                continue
            return row
        return None
