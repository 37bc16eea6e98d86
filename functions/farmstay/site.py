"""
Helpers behind the public pages: settings fallbacks, WhatsApp deep links,
gallery filtering and the admin overview counters.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Iterable, Optional
from urllib.parse import quote

from farmstay.config import Settings
from farmstay.db import DbClient, DbError
from farmstay.types import SITE_SETTINGS_ID, EnquiryKind, EnquiryStatus

logger = logging.getLogger(__name__)

SITE_SETTINGS_TABLE = "site_settings"
GALLERY_TABLE = "gallery_images"
LEADS_WINDOW_SECONDS = 30 * 24 * 60 * 60

# Values the public pages fall back to while a settings field is empty.
FALLBACK_SITE_SETTINGS = {
    "brand_name": "Wood Heaven Farms",
    "hero_title": "Welcome to Heaven",
    "hero_subtitle": "A sanctuary of elegance and luxury.",
    "phone_number": "+91 88520 21119",
    "email_address": "woodheavenfarms@gmail.com",
    "address_text": "631,632, green triveni, Opp. ashiana greens, sikar road, Jaipur - 302013",
    "airbnb_url": "https://www.airbnb.com/rooms/1149468945691456184",
    "booking_url": "https://www.booking.com/hotel/in/wood-heaven-farms.html",
}


def safe_select(db: DbClient, table: str, **kwargs) -> list[dict]:
    """Select for public pages: a failing record store yields an empty list."""
    try:
        return db.select(table, **kwargs)
    except DbError:
        logger.exception("Error fetching %s", table)
        return []


def load_site_settings(db: DbClient) -> dict:
    """Return the stored settings record, or an empty dict when none exists."""
    try:
        record = db.get(SITE_SETTINGS_TABLE, SITE_SETTINGS_ID)
        if record is None:
            rows = db.select(
                SITE_SETTINGS_TABLE, order_by="updated_at", descending=True, limit=1
            )
            record = rows[0] if rows else None
    except DbError:
        logger.exception("Error fetching settings")
        record = None
    return record or {}


def resolve_settings(record: dict, settings: Settings) -> dict:
    resolved = dict(FALLBACK_SITE_SETTINGS)
    resolved["whatsapp_number"] = settings.default_whatsapp_number
    resolved.update({k: v for k, v in record.items() if v not in (None, "")})
    return resolved


def whatsapp_link(number: str, text: str) -> str:
    digits = re.sub(r"\D", "", number or "")
    return f"https://wa.me/{digits}?text={quote(text)}"


def stay_whatsapp_message(brand_name: str, enquiry: dict) -> str:
    return (
        f"Hi {brand_name}! I want to book a stay.\n"
        f"Name: {enquiry['name']}\n"
        f"Dates: {enquiry['checkin']} to {enquiry['checkout']}\n"
        f"Guests: {enquiry['guests']}"
    )


def event_whatsapp_message(brand_name: str, enquiry: dict) -> str:
    return (
        f"Hi! Planning an event at {brand_name}.\n"
        f"Type: {enquiry['event_type']}\n"
        f"Date: {enquiry['event_date']}\n"
        f"Guests: {enquiry['guests']}"
    )


def gallery_categories(images: Iterable[dict]) -> list[str]:
    categories = ["All"]
    for image in images:
        category = image.get("category")
        if category and category not in categories:
            categories.append(category)
    return categories


def filter_gallery(images: list[dict], category: Optional[str]) -> list[dict]:
    if not category or category == "All":
        return images
    return [image for image in images if image.get("category") == category]


def admin_overview(db: DbClient, now: Optional[float] = None) -> dict:
    now = time.time() if now is None else now
    cutoff = now - LEADS_WINDOW_SECONDS
    recent = 0
    new = 0
    for kind in EnquiryKind:
        for lead in db.select(kind.table):
            if (lead.get("created_at") or 0) >= cutoff:
                recent += 1
            if lead.get("status") == EnquiryStatus.NEW.value:
                new += 1
    return {
        "leads_last_30_days": recent,
        "new_leads": new,
        "gallery_assets": len(db.select(GALLERY_TABLE)),
    }
