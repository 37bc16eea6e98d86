"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from farmstay.auth import AuthClient, GoTrueAuthClient, InMemoryAuthClient
from farmstay.config import ConfigurationError, Settings, get_settings
from farmstay.db import DbClient, InMemoryDbClient, PostgresDbClient
from farmstay.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from farmstay.uploads import UploadJobList

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_auth_client: AuthClient | None = None
_upload_jobs: UploadJobList | None = None


def _fallback(settings: Settings, what: str, env_vars: str) -> None:
    """Refuse in-memory fallbacks in production; warn about them otherwise."""
    if settings.is_production and not settings.use_in_memory_backends:
        raise ConfigurationError(
            f"{what} configuration is missing in production. Set {env_vars}."
        )
    logger.warning(
        "%s not configured (%s); using the in-memory mock backend.", what, env_vars
    )


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so records persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.has_database:
        _db_client = PostgresDbClient(settings.database_url)
    else:
        _fallback(settings, "Record store", "DATABASE_URL")
        _db_client = InMemoryDbClient()
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.has_storage:
        _storage_client = S3StorageClient(
            endpoint=settings.storage_endpoint or "",
            region=settings.storage_region or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.storage_public_url or "",
        )
    else:
        _fallback(
            settings,
            "Object storage",
            "STORAGE_ENDPOINT or STORAGE_REGION or AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY",
        )
        _storage_client = InMemoryStorageClient()
    return _storage_client


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client:
        return _auth_client

    settings = get_settings()
    if settings.has_auth:
        _auth_client = GoTrueAuthClient(settings.auth_url, settings.auth_anon_key)
    else:
        _fallback(settings, "Auth service", "AUTH_URL and AUTH_ANON_KEY")
        _auth_client = InMemoryAuthClient(
            dev_email=settings.dev_admin_email,
            dev_password=settings.dev_admin_password,
        )
    return _auth_client


def get_upload_jobs() -> UploadJobList:
    """
    Return the process-wide gallery upload job list.
    """
    global _upload_jobs
    if _upload_jobs is None:
        _upload_jobs = UploadJobList()
    return _upload_jobs
