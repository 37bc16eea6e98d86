"""
Admin HTTP routes. Every route requires an allow-listed admin session.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from farmstay.config import get_settings
from farmstay.db import DbClient
from farmstay.dependencies import get_db_client, get_storage_client, get_upload_jobs
from farmstay.guard import require_admin
from farmstay.schemas import (
    CONTENT_PAYLOADS,
    BrandingUploadResponse,
    ClearedResponse,
    EnquiryStatusUpdate,
    OverviewResponse,
    RecordListResponse,
    RecordResponse,
    SiteSettingsPayload,
    StatusResponse,
    UploadJobsResponse,
)
from farmstay.site import GALLERY_TABLE, SITE_SETTINGS_TABLE, admin_overview, load_site_settings
from farmstay.storage import StorageClient, StorageError
from farmstay.types import (
    GALLERY_CATEGORIES,
    SITE_SETTINGS_ID,
    BrandingField,
    ContentTable,
    EnquiryKind,
)
from farmstay.uploads import UploadJobList

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@admin_router.get("/overview", response_model=OverviewResponse)
def overview(db: DbClient = Depends(get_db_client)):
    return OverviewResponse(**admin_overview(db))


@admin_router.get("/enquiries/{kind}", response_model=RecordListResponse)
def list_enquiries(kind: EnquiryKind, db: DbClient = Depends(get_db_client)):
    return RecordListResponse(
        items=db.select(kind.table, order_by="created_at", descending=True)
    )


@admin_router.patch("/enquiries/{kind}/{enquiry_id}", response_model=RecordResponse)
def update_enquiry_status(
    kind: EnquiryKind,
    enquiry_id: int,
    payload: EnquiryStatusUpdate,
    db: DbClient = Depends(get_db_client),
):
    updated = db.update(kind.table, enquiry_id, {"status": payload.status.value})
    if updated is None:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return RecordResponse(record=updated)


@admin_router.get("/site-settings", response_model=RecordResponse)
def get_site_settings(db: DbClient = Depends(get_db_client)):
    return RecordResponse(record=load_site_settings(db))


@admin_router.put("/site-settings", response_model=RecordResponse)
def save_site_settings(
    payload: SiteSettingsPayload, db: DbClient = Depends(get_db_client)
):
    record = payload.model_dump(exclude_unset=True)
    record["id"] = SITE_SETTINGS_ID
    record["updated_at"] = time.time()
    return RecordResponse(record=db.upsert(SITE_SETTINGS_TABLE, record))


def _file_ext(filename: str | None) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    return "bin"


@admin_router.post("/branding/{field}", response_model=BrandingUploadResponse)
async def upload_branding_asset(
    field: BrandingField,
    file: UploadFile = File(...),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Store a branding image and return its public URL. The settings record is
    saved separately through PUT /admin/site-settings.
    """
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")

    bucket = get_settings().branding_bucket
    path = f"branding/{field.value}-{int(time.time() * 1000)}.{_file_ext(file.filename)}"
    try:
        storage.upload_bytes(bucket, path, data, file.content_type)
    except StorageError as e:
        logger.exception("Branding upload failed")
        raise HTTPException(status_code=502, detail=f"Upload failed: {e}")
    return BrandingUploadResponse(
        field=field.value, path=path, url=storage.public_url(bucket, path)
    )


@admin_router.get("/content/{table}", response_model=RecordListResponse)
def list_content(table: ContentTable, db: DbClient = Depends(get_db_client)):
    return RecordListResponse(
        items=db.select(table.value, order_by="id", descending=True)
    )


@admin_router.put("/content/{table}", response_model=RecordResponse)
def save_content(
    table: ContentTable,
    body: dict = Body(...),
    db: DbClient = Depends(get_db_client),
):
    try:
        payload = CONTENT_PAYLOADS[table].model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
    record = payload.model_dump(exclude_none=True)
    return RecordResponse(record=db.upsert(table.value, record))


@admin_router.delete("/content/{table}/{record_id}", response_model=StatusResponse)
def delete_content(
    table: ContentTable, record_id: int, db: DbClient = Depends(get_db_client)
):
    if not db.delete(table.value, record_id):
        raise HTTPException(status_code=404, detail="Record not found")
    return StatusResponse(status="ok")


@admin_router.get("/gallery", response_model=RecordListResponse)
def list_gallery(db: DbClient = Depends(get_db_client)):
    return RecordListResponse(items=db.select(GALLERY_TABLE, order_by="sort_order"))


@admin_router.delete("/gallery/{image_id}", response_model=StatusResponse)
def delete_gallery_image(
    image_id: int,
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    image = db.get(GALLERY_TABLE, image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")
    db.delete(GALLERY_TABLE, image_id)
    if image.get("storage_path"):
        try:
            storage.remove(get_settings().gallery_bucket, [image["storage_path"]])
        except StorageError:
            logger.warning("Could not remove %s from storage", image["storage_path"])
    return StatusResponse(status="ok")


@admin_router.post("/gallery/uploads", response_model=UploadJobsResponse, status_code=201)
async def stage_gallery_uploads(
    files: list[UploadFile] = File(...),
    category: str = Form(GALLERY_CATEGORIES[0]),
    jobs: UploadJobList = Depends(get_upload_jobs),
):
    if category not in GALLERY_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")
    staged = []
    for upload in files:
        staged.append((upload.filename or "upload", await upload.read(), upload.content_type))
    new_jobs = jobs.add_files(staged, category)
    return UploadJobsResponse(jobs=[job.as_dict() for job in new_jobs])


@admin_router.get("/gallery/uploads", response_model=UploadJobsResponse)
def list_gallery_uploads(jobs: UploadJobList = Depends(get_upload_jobs)):
    return UploadJobsResponse(jobs=[job.as_dict() for job in jobs.list()])


@admin_router.post("/gallery/uploads/start", response_model=UploadJobsResponse)
def start_gallery_uploads(
    jobs: UploadJobList = Depends(get_upload_jobs),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    processed = jobs.start_all(db, storage, get_settings().gallery_bucket)
    return UploadJobsResponse(jobs=[job.as_dict() for job in processed])


@admin_router.delete("/gallery/uploads/finished", response_model=ClearedResponse)
def clear_finished_uploads(jobs: UploadJobList = Depends(get_upload_jobs)):
    return ClearedResponse(removed=jobs.clear_finished())
