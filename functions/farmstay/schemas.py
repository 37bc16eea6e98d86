"""
Pydantic schemas for the site API.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmstay.types import ContentTable, EnquiryStatus, EventType


class RecordListResponse(BaseModel):
    items: list[dict]


class SiteSettingsResponse(BaseModel):
    settings: dict
    mock_mode: bool


class GalleryResponse(BaseModel):
    images: list[dict]
    categories: list[str]


class StayEnquiryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=64)
    checkin: date
    checkout: date
    guests: int = Field(1, ge=1)
    message: str = Field("", max_length=4000)


class EventEnquiryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=64)
    event_date: date
    event_type: EventType = EventType.OTHER
    guests: int = Field(20, ge=1)
    requirements: str = Field("", max_length=4000)


class EnquiryResponse(BaseModel):
    enquiry: dict
    whatsapp_url: str


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    email: Optional[str]
    is_admin: bool


class SessionResponse(BaseModel):
    authenticated: bool
    email: Optional[str] = None
    is_admin: bool = False
    mock_mode: bool = False


class StatusResponse(BaseModel):
    status: Literal["ok"]


class EnquiryStatusUpdate(BaseModel):
    status: EnquiryStatus


class OverviewResponse(BaseModel):
    leads_last_30_days: int
    new_leads: int
    gallery_assets: int


class SiteSettingsPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    brand_name: Optional[str] = None
    tagline: Optional[str] = None
    logo_url: Optional[str] = None
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    hero_image_url: Optional[str] = None
    section2_badge: Optional[str] = None
    section2_title: Optional[str] = None
    section2_subtitle: Optional[str] = None
    section2_image_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    phone_number: Optional[str] = None
    address_text: Optional[str] = None
    email_address: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    airbnb_url: Optional[str] = None
    booking_url: Optional[str] = None


class BrandingUploadResponse(BaseModel):
    field: str
    path: str
    url: str


class UploadJobsResponse(BaseModel):
    jobs: list[dict]


class GuestTestimonialPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    context: str = ""
    rating: int = Field(5, ge=1, le=5)
    text: str = Field(..., min_length=1)
    image: Optional[str] = None


class FaqPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class AmenityGroupPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    title: str = Field(..., min_length=1)
    items: list[str] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def drop_blank_items(cls, value: list[str]) -> list[str]:
        # The editor submits one item per line.
        return [item.strip() for item in value if item.strip()]


class EventSpacePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    capacity: str = ""
    description: str = ""


class HouseRulePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    sort_order: int = 1
    rule_text: str = Field(..., min_length=1)


CONTENT_PAYLOADS: dict[ContentTable, type[BaseModel]] = {
    ContentTable.TESTIMONIALS: GuestTestimonialPayload,
    ContentTable.FAQS: FaqPayload,
    ContentTable.AMENITY_GROUPS: AmenityGroupPayload,
    ContentTable.EVENT_SPACES: EventSpacePayload,
    ContentTable.HOUSE_RULES: HouseRulePayload,
}


class RecordResponse(BaseModel):
    record: dict


class ClearedResponse(BaseModel):
    removed: int
