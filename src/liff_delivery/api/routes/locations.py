"""Cascading address lookup endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...errors import ServiceNotConfiguredError, UpstreamServiceError
from ...schemas.locations import (
    DistrictModel,
    PostalCodeLookupResponse,
    PostalCodeMatchModel,
    ProvinceModel,
    SubDistrictModel,
)
from ...services.locations import AddressHierarchyResolver
from ..dependencies import get_location_resolver, to_http_exception

router = APIRouter(prefix="/locations", tags=["locations"])

LOOKUP_ERRORS = (ServiceNotConfiguredError, UpstreamServiceError)


@router.get("/provinces", response_model=List[ProvinceModel], status_code=status.HTTP_200_OK)
def list_provinces(
    search: str | None = Query(default=None, description="Substring of the Thai or English name"),
    limit: int = Query(default=100, ge=1, le=1000),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
) -> List[ProvinceModel]:
    try:
        provinces = resolver.list_provinces(search, limit=limit)
    except LOOKUP_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return [ProvinceModel.from_domain(province) for province in provinces]


@router.get("/districts", response_model=List[DistrictModel], status_code=status.HTTP_200_OK)
def list_districts(
    province_id: int = Query(..., description="Selected province"),
    search: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
) -> List[DistrictModel]:
    try:
        districts = resolver.list_districts(province_id, search, limit=limit)
    except LOOKUP_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return [DistrictModel.from_domain(district) for district in districts]


@router.get("/subdistricts", response_model=List[SubDistrictModel], status_code=status.HTTP_200_OK)
def list_subdistricts(
    province_id: int = Query(..., description="Selected province"),
    district_id: int = Query(..., description="Selected district"),
    search: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
) -> List[SubDistrictModel]:
    try:
        subdistricts = resolver.list_subdistricts(province_id, district_id, search, limit=limit)
    except LOOKUP_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return [SubDistrictModel.from_domain(subdistrict) for subdistrict in subdistricts]


@router.get("/postal-codes", response_model=List[PostalCodeMatchModel], status_code=status.HTTP_200_OK)
def search_postal_codes(
    prefix: str = Query(default="", description="Leading digits of the postal code"),
    limit: int = Query(default=100, ge=1, le=1000),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
) -> List[PostalCodeMatchModel]:
    try:
        matches = resolver.list_postal_codes_by_prefix(prefix, limit=limit)
    except LOOKUP_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return [PostalCodeMatchModel.from_domain(match) for match in matches]


@router.get("/postal-code", response_model=PostalCodeLookupResponse, status_code=status.HTTP_200_OK)
def resolve_postal_code(
    province_id: int = Query(...),
    district_id: int = Query(...),
    subdistrict_id: int = Query(...),
    resolver: AddressHierarchyResolver = Depends(get_location_resolver),
) -> PostalCodeLookupResponse:
    """Auto-fill lookup; an unknown tuple is an empty result, not an error."""
    try:
        postal_code = resolver.resolve_postal_code(province_id, district_id, subdistrict_id)
    except LOOKUP_ERRORS as exc:
        raise to_http_exception(exc) from exc
    return PostalCodeLookupResponse(found=postal_code is not None, postalCode=postal_code)
