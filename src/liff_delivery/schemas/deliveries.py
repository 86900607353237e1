"""Pydantic request/response models for delivery endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import DeliveryRecord


class DeliveryCreateRequest(BaseModel):
    """JSON carried in the ``data`` form field of a registration."""

    model_config = ConfigDict(extra="ignore")

    customerName: Optional[str] = None
    phone: Optional[str] = None
    line_user_id: Optional[str] = None
    locationType: Optional[Literal["home", "store"]] = None
    addressDetails: Optional[str] = None
    subDistrict: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    postalCode: Optional[str] = None


class DeliveryUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customerName: Optional[str] = None
    phone: Optional[str] = None
    addressDetails: Optional[str] = None
    subDistrict: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    postalCode: Optional[str] = None


class FindDeliveryRequest(BaseModel):
    line_user_id: Optional[str] = None
    phone: Optional[str] = None


class DeliveryModel(BaseModel):
    id: str
    customerName: str
    phone: str
    line_user_id: Optional[str] = None
    locationType: Literal["home", "store"]
    addressDetails: Optional[str] = None
    subDistrict: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    postalCode: Optional[str] = None
    slipImageUrl: Optional[str] = None
    trackingId: str
    status: str
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_record(cls, record: DeliveryRecord) -> "DeliveryModel":
        return cls(
            id=record.id or "",
            customerName=record.customer_name,
            phone=record.phone,
            line_user_id=record.line_user_id,
            locationType=record.location_type.value,
            addressDetails=record.address_details,
            subDistrict=record.sub_district,
            district=record.district,
            province=record.province,
            postalCode=record.postal_code,
            slipImageUrl=record.slip_image_url,
            trackingId=record.tracking_id,
            status=record.status.value,
            createdAt=record.created_at,
            updatedAt=record.updated_at,
        )


class DeliveryCreatedResponse(BaseModel):
    id: str
    slipImageUrl: Optional[str] = None
    trackingId: str
    createdAt: datetime


class DeliveryDetailResponse(BaseModel):
    message: str
    data: DeliveryModel


class DeliveryListResponse(BaseModel):
    message: str
    count: int
    data: List[DeliveryModel]


class FlexMessageResponse(BaseModel):
    trackingId: str
    messages: List[dict] = Field(description="Messages ready for liff.sendMessages().")


class NotifyResponse(BaseModel):
    sent: bool
    to: str
