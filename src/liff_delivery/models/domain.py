"""Domain models for delivery records and the reference location table."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LocationType(str, Enum):
    HOME = "home"
    STORE = "store"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


ADDRESS_FIELDS: tuple[str, ...] = (
    "address_details",
    "sub_district",
    "district",
    "province",
    "postal_code",
)


@dataclass(slots=True)
class DeliveryRecord:
    """A customer's delivery registration as persisted in the store."""

    customer_name: str
    phone: str
    location_type: LocationType
    tracking_id: str
    status: DeliveryStatus
    created_at: datetime
    updated_at: datetime
    line_user_id: Optional[str] = None
    address_details: Optional[str] = None
    sub_district: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    slip_image_url: Optional[str] = None
    id: Optional[str] = None


def _pick_name(primary: Optional[str], fallback: Optional[str]) -> str:
    return (primary or "").strip() or (fallback or "").strip()


@dataclass(slots=True, frozen=True)
class LocationRow:
    """One row of the reference location table (one per subdistrict/postal code pair)."""

    province_id: int
    province_name_th: Optional[str]
    province_name_en: Optional[str]
    district_id: int
    district_name_th: Optional[str]
    district_name_en: Optional[str]
    subdistrict_id: int
    subdistrict_name_th: Optional[str]
    subdistrict_name_en: Optional[str]
    postal_code: str


@dataclass(slots=True, frozen=True)
class Province:
    id: int
    name_th: Optional[str]
    name_en: Optional[str]

    @property
    def display_name(self) -> str:
        return _pick_name(self.name_th, self.name_en)


@dataclass(slots=True, frozen=True)
class District:
    id: int
    province_id: int
    name_th: Optional[str]
    name_en: Optional[str]

    @property
    def display_name(self) -> str:
        return _pick_name(self.name_th, self.name_en)


@dataclass(slots=True, frozen=True)
class SubDistrict:
    id: int
    province_id: int
    district_id: int
    name_th: Optional[str]
    name_en: Optional[str]

    @property
    def display_name(self) -> str:
        return _pick_name(self.name_th, self.name_en)


@dataclass(slots=True, frozen=True)
class PostalCodeMatch:
    """A postal code together with the full address tuple it belongs to."""

    postal_code: str
    province: Province
    district: District
    subdistrict: SubDistrict
