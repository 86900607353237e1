"""One lookup capability per level of the province → district → subdistrict → postal code hierarchy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Iterator, Optional, Sequence, TypeVar

from ...models.domain import District, LocationRow, PostalCodeMatch, Province, SubDistrict

T = TypeVar("T")

RowsProvider = Callable[[], Sequence[LocationRow]]


@dataclass(frozen=True, slots=True)
class LocationFilter:
    """Selections made so far plus the free-text search for the level being fetched."""

    province_id: Optional[int] = None
    district_id: Optional[int] = None
    subdistrict_id: Optional[int] = None
    search: Optional[str] = None
    limit: Optional[int] = None


def name_matches(search: str, *names: Optional[str]) -> bool:
    """Case-insensitive substring match against any present localized name."""
    needle = search.casefold()
    return any(needle in name.casefold() for name in names if name)


def province_of(row: LocationRow) -> Province:
    return Province(id=row.province_id, name_th=row.province_name_th, name_en=row.province_name_en)


def district_of(row: LocationRow) -> District:
    return District(
        id=row.district_id,
        province_id=row.province_id,
        name_th=row.district_name_th,
        name_en=row.district_name_en,
    )


def subdistrict_of(row: LocationRow) -> SubDistrict:
    return SubDistrict(
        id=row.subdistrict_id,
        province_id=row.province_id,
        district_id=row.district_id,
        name_th=row.subdistrict_name_th,
        name_en=row.subdistrict_name_en,
    )


def match_of(row: LocationRow) -> PostalCodeMatch:
    return PostalCodeMatch(
        postal_code=row.postal_code,
        province=province_of(row),
        district=district_of(row),
        subdistrict=subdistrict_of(row),
    )


class LocationLevel(ABC, Generic[T]):
    """Contract for a single hierarchy level lookup."""

    def __init__(self, rows: RowsProvider) -> None:
        self._rows = rows

    @abstractmethod
    def fetch(self, location_filter: LocationFilter) -> list[T]:
        raise NotImplementedError

    def _scoped(self, location_filter: LocationFilter) -> Iterator[LocationRow]:
        for row in self._rows():
            if location_filter.province_id is not None and row.province_id != location_filter.province_id:
                continue
            if location_filter.district_id is not None and row.district_id != location_filter.district_id:
                continue
            if location_filter.subdistrict_id is not None and row.subdistrict_id != location_filter.subdistrict_id:
                continue
            yield row

    @staticmethod
    def _take(items: Iterable[T], limit: Optional[int]) -> list[T]:
        result: list[T] = []
        for item in items:
            if limit is not None and len(result) >= limit:
                break
            result.append(item)
        return result


class ProvinceLevel(LocationLevel[Province]):
    def fetch(self, location_filter: LocationFilter) -> list[Province]:
        search = (location_filter.search or "").strip()
        seen: set[int] = set()

        def _iter() -> Iterator[Province]:
            for row in self._scoped(location_filter):
                if row.province_id in seen:
                    continue
                if search and not name_matches(search, row.province_name_th, row.province_name_en):
                    continue
                seen.add(row.province_id)
                yield province_of(row)

        return self._take(_iter(), location_filter.limit)


class DistrictLevel(LocationLevel[District]):
    def fetch(self, location_filter: LocationFilter) -> list[District]:
        if location_filter.province_id is None:
            return []
        search = (location_filter.search or "").strip()
        seen: set[int] = set()

        def _iter() -> Iterator[District]:
            # Reference rows are one per postal code, so districts repeat.
            for row in self._scoped(location_filter):
                if row.district_id in seen:
                    continue
                if search and not name_matches(search, row.district_name_th, row.district_name_en):
                    continue
                seen.add(row.district_id)
                yield district_of(row)

        return self._take(_iter(), location_filter.limit)


class SubDistrictLevel(LocationLevel[SubDistrict]):
    def fetch(self, location_filter: LocationFilter) -> list[SubDistrict]:
        if location_filter.province_id is None or location_filter.district_id is None:
            return []
        search = (location_filter.search or "").strip()
        seen: set[int] = set()

        def _iter() -> Iterator[SubDistrict]:
            for row in self._scoped(location_filter):
                if row.subdistrict_id in seen:
                    continue
                if search and not name_matches(search, row.subdistrict_name_th, row.subdistrict_name_en):
                    continue
                seen.add(row.subdistrict_id)
                yield subdistrict_of(row)

        return self._take(_iter(), location_filter.limit)


class PostalCodeLevel(LocationLevel[PostalCodeMatch]):
    """Prefix search over postal codes; every matching row stays selectable."""

    def fetch(self, location_filter: LocationFilter) -> list[PostalCodeMatch]:
        prefix = (location_filter.search or "").strip()
        if not prefix:
            return []
        matches = (match_of(row) for row in self._scoped(location_filter) if row.postal_code.startswith(prefix))
        return self._take(matches, location_filter.limit)
