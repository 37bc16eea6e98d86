"""
Session auth abstraction for the hosted auth service and an in-memory double.

The hosted client talks to a GoTrue-compatible REST API; the in-memory client
backs local mock mode and accepts the configured development credentials.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds

# User id issued to the mock-mode development admin. The admin guard lets it
# through without an allow-list lookup.
DEV_USER_ID = "mock-uuid"


class AuthError(Exception):
    """Raised when sign-in fails or the auth service cannot be reached."""


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: Optional[str]


class AuthClient(Protocol):
    """Operations the API needs from the auth service."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    def sign_out(self, access_token: str) -> None:
        ...

    def get_session(self, access_token: str) -> Optional[AuthSession]:
        ...


class InMemoryAuthClient:
    """Credential check against a local user table; tokens live in memory."""

    def __init__(
        self,
        dev_email: Optional[str] = None,
        dev_password: Optional[str] = None,
    ):
        self.users: Dict[str, tuple[str, str]] = {}
        self.sessions: Dict[str, AuthSession] = {}
        if dev_email and dev_password:
            self.add_user(dev_email, dev_password, user_id=DEV_USER_ID)

    def add_user(self, email: str, password: str, user_id: Optional[str] = None) -> str:
        user_id = user_id or secrets.token_hex(8)
        self.users[email.strip().lower()] = (password, user_id)
        return user_id

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        user = self.users.get((email or "").strip().lower())
        if not user or user[0] != password:
            raise AuthError("Invalid credentials in Local Mock Mode.")
        session = AuthSession(
            access_token=secrets.token_urlsafe(24),
            user_id=user[1],
            email=email.strip().lower(),
        )
        self.sessions[session.access_token] = session
        return session

    def sign_out(self, access_token: str) -> None:
        self.sessions.pop(access_token, None)

    def get_session(self, access_token: str) -> Optional[AuthSession]:
        return self.sessions.get(access_token)


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"Auth request failed ({response.status_code})"
    for key in ("error_description", "msg", "message", "error"):
        if payload.get(key):
            return str(payload[key])
    return f"Auth request failed ({response.status_code})"


class GoTrueAuthClient:
    """
    Client for a GoTrue-compatible auth REST API (password grant).
    """

    def __init__(self, url: str, anon_key: str, timeout: int = REQUEST_TIMEOUT):
        if not url or not anon_key:
            raise ValueError("AUTH_URL and AUTH_ANON_KEY are required for GoTrueAuthClient")
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout

    def _headers(self, access_token: Optional[str] = None) -> dict:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = requests.post(
                f"{self.url}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthError("Auth service unreachable") from exc
        if response.status_code >= 400:
            raise AuthError(_error_message(response))
        payload = response.json()
        user = payload.get("user") or {}
        return AuthSession(
            access_token=payload["access_token"],
            user_id=user.get("id", ""),
            email=user.get("email"),
        )

    def sign_out(self, access_token: str) -> None:
        try:
            response = requests.post(
                f"{self.url}/auth/v1/logout",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthError("Auth service unreachable") from exc
        if response.status_code >= 400 and response.status_code not in (401, 403, 404):
            raise AuthError(_error_message(response))

    def get_session(self, access_token: str) -> Optional[AuthSession]:
        try:
            response = requests.get(
                f"{self.url}/auth/v1/user",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthError("Auth service unreachable") from exc
        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            raise AuthError(_error_message(response))
        user = response.json()
        return AuthSession(
            access_token=access_token,
            user_id=user.get("id", ""),
            email=user.get("email"),
        )
