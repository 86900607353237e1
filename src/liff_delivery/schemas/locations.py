"""Location lookup API schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..models.domain import District, PostalCodeMatch, Province, SubDistrict


class ProvinceModel(BaseModel):
    id: int
    name: str
    name_th: Optional[str] = None
    name_en: Optional[str] = None

    @classmethod
    def from_domain(cls, province: Province) -> "ProvinceModel":
        return cls(id=province.id, name=province.display_name, name_th=province.name_th, name_en=province.name_en)


class DistrictModel(BaseModel):
    id: int
    province_id: int
    name: str
    name_th: Optional[str] = None
    name_en: Optional[str] = None

    @classmethod
    def from_domain(cls, district: District) -> "DistrictModel":
        return cls(
            id=district.id,
            province_id=district.province_id,
            name=district.display_name,
            name_th=district.name_th,
            name_en=district.name_en,
        )


class SubDistrictModel(BaseModel):
    id: int
    province_id: int
    district_id: int
    name: str
    name_th: Optional[str] = None
    name_en: Optional[str] = None

    @classmethod
    def from_domain(cls, subdistrict: SubDistrict) -> "SubDistrictModel":
        return cls(
            id=subdistrict.id,
            province_id=subdistrict.province_id,
            district_id=subdistrict.district_id,
            name=subdistrict.display_name,
            name_th=subdistrict.name_th,
            name_en=subdistrict.name_en,
        )


class PostalCodeMatchModel(BaseModel):
    postal_code: str
    province: ProvinceModel
    district: DistrictModel
    subdistrict: SubDistrictModel

    @classmethod
    def from_domain(cls, match: PostalCodeMatch) -> "PostalCodeMatchModel":
        return cls(
            postal_code=match.postal_code,
            province=ProvinceModel.from_domain(match.province),
            district=DistrictModel.from_domain(match.district),
            subdistrict=SubDistrictModel.from_domain(match.subdistrict),
        )


class PostalCodeLookupResponse(BaseModel):
    found: bool
    postalCode: Optional[str] = None
