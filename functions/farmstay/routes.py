"""
Public HTTP routes: site content, lead capture and admin sign-in.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from farmstay.auth import AuthClient, AuthError
from farmstay.config import get_settings
from farmstay.db import DbClient, DbError
from farmstay.dependencies import get_auth_client, get_db_client
from farmstay.guard import check_is_admin, session_token
from farmstay.schemas import (
    EnquiryResponse,
    EventEnquiryCreate,
    GalleryResponse,
    LoginRequest,
    LoginResponse,
    RecordListResponse,
    SessionResponse,
    SiteSettingsResponse,
    StatusResponse,
    StayEnquiryCreate,
)
from farmstay.site import (
    GALLERY_TABLE,
    event_whatsapp_message,
    filter_gallery,
    gallery_categories,
    load_site_settings,
    resolve_settings,
    safe_select,
    stay_whatsapp_message,
    whatsapp_link,
)
from farmstay.types import EnquiryKind, EnquiryStatus

logger = logging.getLogger(__name__)

router = APIRouter()

ENQUIRY_FAILED_MESSAGE = "Something went wrong. Please try again."


@router.get("/health")
def health():
    return {"status": "healthy"}


@router.get("/site-settings", response_model=SiteSettingsResponse)
def site_settings(db: DbClient = Depends(get_db_client)):
    settings = get_settings()
    record = load_site_settings(db)
    return SiteSettingsResponse(
        settings=resolve_settings(record, settings),
        mock_mode=settings.is_mock_mode,
    )


@router.get("/testimonials", response_model=RecordListResponse)
def list_testimonials(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(
        items=safe_select(db, "testimonials", order_by="id", descending=True)
    )


@router.get("/faqs", response_model=RecordListResponse)
def list_faqs(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(items=safe_select(db, "faqs", order_by="id"))


@router.get("/amenity-groups", response_model=RecordListResponse)
def list_amenity_groups(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(items=safe_select(db, "amenity_groups", order_by="id"))


@router.get("/event-spaces", response_model=RecordListResponse)
def list_event_spaces(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(items=safe_select(db, "event_spaces", order_by="id"))


@router.get("/house-rules", response_model=RecordListResponse)
def list_house_rules(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(
        items=safe_select(db, "house_rules", order_by="sort_order")
    )


@router.get("/gallery", response_model=GalleryResponse)
def gallery(
    category: str | None = Query(None, max_length=64),
    db: DbClient = Depends(get_db_client),
):
    images = safe_select(db, GALLERY_TABLE, order_by="sort_order")
    return GalleryResponse(
        images=filter_gallery(images, category),
        categories=gallery_categories(images),
    )


def _insert_enquiry(db: DbClient, kind: EnquiryKind, record: dict, source: str | None) -> dict:
    record = {
        **record,
        "source": source or "direct",
        "status": EnquiryStatus.NEW.value,
    }
    try:
        return db.insert(kind.table, record)
    except DbError:
        logger.exception("Submission error for %s enquiry", kind.value)
        raise HTTPException(status_code=502, detail=ENQUIRY_FAILED_MESSAGE)


@router.post("/enquiries/stay", response_model=EnquiryResponse, status_code=201)
def submit_stay_enquiry(
    payload: StayEnquiryCreate,
    utm_source: str | None = Query(None, max_length=100),
    db: DbClient = Depends(get_db_client),
):
    enquiry = _insert_enquiry(
        db, EnquiryKind.STAY, payload.model_dump(mode="json"), utm_source
    )
    site = resolve_settings(load_site_settings(db), get_settings())
    return EnquiryResponse(
        enquiry=enquiry,
        whatsapp_url=whatsapp_link(
            site["whatsapp_number"], stay_whatsapp_message(site["brand_name"], enquiry)
        ),
    )


@router.post("/enquiries/event", response_model=EnquiryResponse, status_code=201)
def submit_event_enquiry(
    payload: EventEnquiryCreate,
    utm_source: str | None = Query(None, max_length=100),
    db: DbClient = Depends(get_db_client),
):
    enquiry = _insert_enquiry(
        db, EnquiryKind.EVENT, payload.model_dump(mode="json"), utm_source
    )
    site = resolve_settings(load_site_settings(db), get_settings())
    return EnquiryResponse(
        enquiry=enquiry,
        whatsapp_url=whatsapp_link(
            site["whatsapp_number"], event_whatsapp_message(site["brand_name"], enquiry)
        ),
    )


@router.post("/auth/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    auth: AuthClient = Depends(get_auth_client),
    db: DbClient = Depends(get_db_client),
):
    try:
        session = auth.sign_in_with_password(payload.email, payload.password)
    except AuthError as e:
        logger.warning("Sign-in failed for %s: %s", payload.email, e)
        raise HTTPException(status_code=401, detail=str(e))

    if not check_is_admin(session.access_token, auth=auth, db=db):
        raise HTTPException(status_code=403, detail="Unauthorized: Access denied.")

    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return LoginResponse(
        access_token=session.access_token, email=session.email, is_admin=True
    )


@router.post("/auth/logout", response_model=StatusResponse)
def logout(
    request: Request,
    response: Response,
    auth: AuthClient = Depends(get_auth_client),
):
    token = session_token(request)
    if token:
        try:
            auth.sign_out(token)
        except AuthError:
            logger.warning("Sign-out failed", exc_info=True)
    response.delete_cookie(get_settings().session_cookie_name)
    return StatusResponse(status="ok")


@router.get("/auth/session", response_model=SessionResponse)
def auth_session(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    db: DbClient = Depends(get_db_client),
):
    mock_mode = get_settings().is_mock_mode
    token = session_token(request)
    session = None
    if token:
        try:
            session = auth.get_session(token)
        except AuthError:
            logger.warning("Session lookup failed", exc_info=True)
    if session is None:
        return SessionResponse(authenticated=False, mock_mode=mock_mode)
    return SessionResponse(
        authenticated=True,
        email=session.email,
        # Read-only: report the status without signing the session out.
        is_admin=check_is_admin(token, auth=auth, db=db, revoke=False),
        mock_mode=mock_mode,
    )
