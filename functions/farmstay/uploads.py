"""
Bulk gallery upload jobs.

Files are staged in memory as ``pending`` jobs; ``start_all`` uploads every
pending job one after the other and records a ``gallery_images`` row for
each. A failed job is marked ``error`` with the message and its bytes are
released; ``clear_finished`` drops it along with completed jobs. There is no
retry, concurrency cap or cancellation.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional

from farmstay.db import DbClient
from farmstay.storage import StorageClient
from farmstay.types import UploadStatus

logger = logging.getLogger(__name__)

GALLERY_TABLE = "gallery_images"
FINISHED_STATUSES = (UploadStatus.COMPLETED, UploadStatus.ERROR)


@dataclass
class UploadJob:
    id: str
    filename: str
    title: str
    category: str
    data: bytes = field(repr=False)
    content_type: Optional[str] = None
    progress: int = 0
    status: UploadStatus = UploadStatus.PENDING
    error: Optional[str] = None
    image: Optional[dict] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())
    size: int = 0

    def __post_init__(self):
        self.size = len(self.data)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "title": self.title,
            "category": self.category,
            "size": self.size,
            "progress": self.progress,
            "status": self.status.value,
            "error": self.error,
            "image": self.image,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def title_from_filename(filename: str) -> str:
    return (filename or "").split(".")[0]


def storage_path_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "bin"
    return f"gallery/{uuid.uuid4().hex}.{ext}"


class UploadJobList:
    """In-process list of upload jobs, kept in the order files were added."""

    def __init__(self):
        self.items: list[UploadJob] = []
        self._lock = threading.Lock()

    def add_files(
        self,
        files: Iterable[tuple[str, bytes, Optional[str]]],
        category: str,
    ) -> list[UploadJob]:
        """Stage ``(filename, data, content_type)`` tuples as pending jobs."""
        new_jobs = [
            UploadJob(
                id=uuid.uuid4().hex[:9],
                filename=filename,
                title=title_from_filename(filename),
                category=category,
                data=data,
                content_type=content_type,
            )
            for filename, data, content_type in files
        ]
        with self._lock:
            self.items.extend(new_jobs)
        return new_jobs

    def list(self) -> list[UploadJob]:
        return list(self.items)

    def get(self, job_id: str) -> Optional[UploadJob]:
        for job in self.items:
            if job.id == job_id:
                return job
        return None

    def clear_finished(self) -> int:
        """Drop completed and failed jobs; pending and running ones stay."""
        with self._lock:
            kept = [job for job in self.items if job.status not in FINISHED_STATUSES]
            removed = len(self.items) - len(kept)
            self.items = kept
        return removed

    def _claim_pending(self) -> list[UploadJob]:
        with self._lock:
            pending = [job for job in self.items if job.status == UploadStatus.PENDING]
            for job in pending:
                _mark(job, UploadStatus.UPLOADING)
        return pending

    def start_all(self, db: DbClient, storage: StorageClient, bucket: str) -> list[UploadJob]:
        """
        Upload every pending job. Returns the jobs that were processed.
        """
        jobs = self._claim_pending()
        for job in jobs:
            process_job(job, db=db, storage=storage, bucket=bucket)
        return jobs


def _mark(job: UploadJob, status: UploadStatus, *, error: Optional[str] = None) -> None:
    job.status = status
    job.error = error
    if status == UploadStatus.COMPLETED:
        job.progress = 100
    job.updated_at = time.time()


def process_job(job: UploadJob, *, db: DbClient, storage: StorageClient, bucket: str) -> None:
    """
    Upload a single job's bytes and record the gallery image.
    """
    if job.status != UploadStatus.UPLOADING:
        _mark(job, UploadStatus.UPLOADING)
    try:
        path = storage_path_for(job.filename)
        storage.upload_bytes(bucket, path, job.data, job.content_type)
        url = storage.public_url(bucket, path)
        job.image = db.insert(
            GALLERY_TABLE,
            {
                "title": job.title,
                "category": job.category,
                "storage_path": path,
                "url": url,
            },
        )
    except Exception as e:
        logger.exception("[%s] Upload of %s failed", job.id, job.filename)
        job.data = b""
        _mark(job, UploadStatus.ERROR, error=str(e) or e.__class__.__name__)
        return

    job.data = b""
    _mark(job, UploadStatus.COMPLETED)
    logger.info("[%s] Uploaded %s to %s/%s", job.id, job.filename, bucket, path)
