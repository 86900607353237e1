"""State machine for the address sub-form (province → district → subdistrict → postal code)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...models.domain import District, PostalCodeMatch, Province, SubDistrict
from .levels import district_of, province_of, subdistrict_of
from .resolver import AddressHierarchyResolver


class AddressFormState(str, Enum):
    NO_PROVINCE = "no_province"
    PROVINCE_SELECTED = "province_selected"
    DISTRICT_SELECTED = "district_selected"
    SUBDISTRICT_SELECTED = "subdistrict_selected"
    POSTAL_CODE_RESOLVED = "postal_code_resolved"


class InvalidAddressTransition(ValueError):
    pass


@dataclass(slots=True, frozen=True)
class ResolvedAddress:
    province: str
    district: str
    sub_district: str
    postal_code: str


class AddressForm:
    """Tracks the cascading selections; a higher level always clears everything below it."""

    def __init__(self, resolver: AddressHierarchyResolver | None = None) -> None:
        self.resolver = resolver
        self.province: Optional[Province] = None
        self.district: Optional[District] = None
        self.subdistrict: Optional[SubDistrict] = None
        self.postal_code: Optional[str] = None

    @property
    def state(self) -> AddressFormState:
        if self.province is None:
            return AddressFormState.NO_PROVINCE
        if self.district is None:
            return AddressFormState.PROVINCE_SELECTED
        if self.subdistrict is None:
            return AddressFormState.DISTRICT_SELECTED
        if not self.postal_code:
            return AddressFormState.SUBDISTRICT_SELECTED
        return AddressFormState.POSTAL_CODE_RESOLVED

    @property
    def can_submit(self) -> bool:
        return self.state is AddressFormState.POSTAL_CODE_RESOLVED

    def select_province(self, province: Province) -> AddressFormState:
        self.province = province
        self.district = None
        self.subdistrict = None
        self.postal_code = None
        return self.state

    def select_district(self, district: District) -> AddressFormState:
        if self.province is None:
            raise InvalidAddressTransition("Select a province before choosing a district")
        if district.province_id != self.province.id:
            raise InvalidAddressTransition(
                f"District {district.id} does not belong to province {self.province.id}"
            )
        self.district = district
        self.subdistrict = None
        self.postal_code = None
        return self.state

    def select_subdistrict(self, subdistrict: SubDistrict) -> AddressFormState:
        if self.province is None or self.district is None:
            raise InvalidAddressTransition("Select a district before choosing a subdistrict")
        if subdistrict.district_id != self.district.id or subdistrict.province_id != self.province.id:
            raise InvalidAddressTransition(
                f"Subdistrict {subdistrict.id} does not belong to district {self.district.id}"
            )
        self.subdistrict = subdistrict
        self.postal_code = None
        if self.resolver is not None:
            self.postal_code = self.resolver.resolve_postal_code(
                self.province.id, self.district.id, subdistrict.id
            )
        return self.state

    def select_postal_match(self, match: PostalCodeMatch) -> AddressFormState:
        # Most specific signal: overwrites whatever was chosen upstream.
        self.province = match.province
        self.district = match.district
        self.subdistrict = match.subdistrict
        self.postal_code = match.postal_code
        return self.state

    def address(self) -> ResolvedAddress:
        if not self.can_submit:
            raise InvalidAddressTransition(f"Address is incomplete (state: {self.state.value})")
        return ResolvedAddress(
            province=self.province.display_name,
            district=self.district.display_name,
            sub_district=self.subdistrict.display_name,
            postal_code=self.postal_code,
        )

    @classmethod
    def from_names(
        cls,
        resolver: AddressHierarchyResolver,
        *,
        province: str,
        district: str,
        sub_district: str,
        postal_code: str,
    ) -> "AddressForm":
        """Replay the selections for a submitted address.

        Raises InvalidAddressTransition when the tuple does not exist in the reference table.
        """
        row = resolver.find_tuple(province, district, sub_district, postal_code)
        if row is None:
            raise InvalidAddressTransition(
                f"Address {sub_district}, {district}, {province} {postal_code} is not a known combination"
            )
        form = cls(resolver)
        form.select_province(province_of(row))
        form.select_district(district_of(row))
        form.select_subdistrict(subdistrict_of(row))
        if form.postal_code != row.postal_code:
            # Subdistricts spanning several postal codes resolve to the first; keep the submitted one.
            form.postal_code = row.postal_code
        return form
