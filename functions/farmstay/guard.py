"""
Admin allow-list guard.

A session is an admin session when its email is present in the
``admin_users`` table. Sessions that fail the check are signed out.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request

from farmstay.auth import DEV_USER_ID, AuthClient, AuthSession
from farmstay.config import get_settings
from farmstay.db import DbClient, DbError
from farmstay.dependencies import get_auth_client, get_db_client

logger = logging.getLogger(__name__)

ADMIN_USERS_TABLE = "admin_users"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def resolve_admin_session(
    access_token: Optional[str],
    *,
    auth: AuthClient,
    db: DbClient,
    revoke: bool = True,
) -> Optional[AuthSession]:
    """
    Return the session for ``access_token`` when it belongs to an admin.

    With ``revoke`` set, a session that fails the allow-list is signed out.
    """
    if not access_token:
        return None
    try:
        session = auth.get_session(access_token)
        if not session or not session.email:
            return None

        if session.user_id == DEV_USER_ID:
            return session

        try:
            rows = db.select(
                ADMIN_USERS_TABLE,
                filters={"email": normalize_email(session.email)},
                limit=1,
            )
        except DbError:
            logger.exception("Admin lookup failed for %s", session.email)
            rows = []
        if not rows:
            logger.info("Denied admin access for %s", session.email)
            if revoke:
                auth.sign_out(access_token)
            return None
        return session
    except Exception:
        logger.exception("Admin guard error")
        return None


def check_is_admin(
    access_token: Optional[str],
    *,
    auth: AuthClient,
    db: DbClient,
    revoke: bool = True,
) -> bool:
    return resolve_admin_session(access_token, auth=auth, db=db, revoke=revoke) is not None


def session_token(request: Request) -> Optional[str]:
    """Read the access token from the Authorization header or the session cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(get_settings().session_cookie_name)


def require_admin(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    db: DbClient = Depends(get_db_client),
) -> AuthSession:
    session = resolve_admin_session(session_token(request), auth=auth, db=db)
    if session is None:
        raise HTTPException(status_code=401, detail="Admin session required")
    return session
