"""
Shared enums and constants.
"""

from __future__ import annotations

from enum import Enum


class EnquiryStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    BOOKED = "booked"


class EnquiryKind(str, Enum):
    STAY = "stay"
    EVENT = "event"

    @property
    def table(self) -> str:
        return f"{self.value}_enquiries"


class EventType(str, Enum):
    HALDI = "Haldi"
    MEHENDI = "Mehendi"
    COCKTAIL = "Cocktail"
    BIRTHDAY = "Birthday"
    CORPORATE = "Corporate"
    WEDDING = "Wedding"
    OTHER = "Other"


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


class ContentTable(str, Enum):
    """Tables editable from the admin content editor."""

    TESTIMONIALS = "testimonials"
    FAQS = "faqs"
    AMENITY_GROUPS = "amenity_groups"
    EVENT_SPACES = "event_spaces"
    HOUSE_RULES = "house_rules"


class BrandingField(str, Enum):
    LOGO_URL = "logo_url"
    HERO_IMAGE_URL = "hero_image_url"
    SECTION2_IMAGE_URL = "section2_image_url"


GALLERY_CATEGORIES = ["Rooms", "Pool", "Lawn", "Night Vibes", "Bar Garden"]

SITE_SETTINGS_ID = 1
