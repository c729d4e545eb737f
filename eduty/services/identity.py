"""Identity provider client (Supabase Auth REST API).

Resolves bearer tokens to user identities and looks users up by id or email
for membership and invitation flows. Every call is bounded by
``Settings.identity_timeout`` and never retried; failures are logged and
reported as "no user" (tokens) or an explicit UNKNOWN lookup outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any
from uuid import UUID

import httpx

from eduty.config import get_settings

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 10
USERS_PAGE_SIZE = 1000


@dataclass(frozen=True)
class Identity:
    """A user record as known to the identity provider."""

    id: UUID
    email: str
    email_confirmed_at: datetime | None = None
    created_at: datetime | None = None
    phone: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def phone_number(self) -> str | None:
        """Phone from profile metadata, falling back to the account phone."""
        return (
            self.user_metadata.get("phone")
            or self.user_metadata.get("phone_number")
            or self.user_metadata.get("phoneNumber")
            or self.phone
            or None
        )


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"  # provider unavailable, timed out or misconfigured


@dataclass(frozen=True)
class LookupResult:
    status: LookupStatus
    identity: Identity | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def unknown(self) -> bool:
        return self.status is LookupStatus.UNKNOWN

    @property
    def email(self) -> str | None:
        return self.identity.email if self.identity else None


NOT_FOUND = LookupResult(LookupStatus.NOT_FOUND)
UNKNOWN = LookupResult(LookupStatus.UNKNOWN)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _parse_timestamp(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_identity(data: Any) -> Identity | None:
    """Build an Identity from a provider user payload; None if id/email missing or invalid."""
    if not isinstance(data, dict):
        return None
    raw_id = data.get("id")
    email = data.get("email")
    if not raw_id or not email:
        logger.warning("Invalid user data returned by identity provider (id=%s)", raw_id)
        return None
    try:
        user_id = UUID(str(raw_id))
    except ValueError:
        logger.warning("Identity provider returned non-UUID user id %s", raw_id)
        return None
    metadata = data.get("user_metadata") or {}
    return Identity(
        id=user_id,
        email=email,
        email_confirmed_at=_parse_timestamp(data.get("email_confirmed_at")),
        created_at=_parse_timestamp(data.get("created_at")),
        phone=data.get("phone") or None,
        user_metadata=metadata if isinstance(metadata, dict) else {},
    )


class IdentityVerifier:
    """Thin synchronous client for the Supabase Auth API."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self._transport = transport
        if not self.enabled:
            logger.warning(
                "Identity provider configuration is missing. Auth features will be disabled. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )

    @property
    def enabled(self) -> bool:
        return bool(self.base_url and self.service_key)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.base_url}/auth/v1",
            timeout=self.timeout,
            transport=self._transport,
            headers={"apikey": self.service_key},
        )

    def _admin_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.service_key}"}

    def verify_token(self, token: str) -> Identity | None:
        """Return the identity owning ``token``, or None if invalid, expired or unverifiable."""
        if not self.enabled:
            logger.warning("Identity provider not configured. Cannot verify token.")
            return None
        if not token or len(token) < MIN_TOKEN_LENGTH:
            logger.warning("Invalid token format provided")
            return None
        try:
            with self._client() as client:
                response = client.get("/user", headers={"Authorization": f"Bearer {token}"})
        except httpx.TimeoutException:
            logger.error("Token verification timed out")
            return None
        except httpx.HTTPError as exc:
            logger.error("Error verifying token: %s", exc)
            return None
        if response.status_code != 200:
            logger.warning("Token verification failed (HTTP %s)", response.status_code)
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Token verification returned a non-JSON body")
            return None
        return parse_identity(payload)

    def get_user_by_id(self, user_id: UUID | str) -> LookupResult:
        if not self.enabled:
            logger.warning("Identity provider not configured. Cannot get user.")
            return UNKNOWN
        if not user_id:
            logger.warning("Invalid user ID provided")
            return NOT_FOUND
        try:
            with self._client() as client:
                response = client.get(f"/admin/users/{user_id}", headers=self._admin_headers())
        except httpx.TimeoutException:
            logger.error("Get user by ID timed out (user_id=%s)", user_id)
            return UNKNOWN
        except httpx.HTTPError as exc:
            logger.error("Error getting user by ID %s: %s", user_id, exc)
            return UNKNOWN
        if response.status_code == 404:
            return NOT_FOUND
        if response.status_code != 200:
            logger.warning("Failed to get user by ID %s (HTTP %s)", user_id, response.status_code)
            return UNKNOWN
        try:
            identity = parse_identity(response.json())
        except ValueError:
            return UNKNOWN
        if identity is None:
            return NOT_FOUND
        return LookupResult(LookupStatus.FOUND, identity)

    def get_user_by_email(self, email: str) -> LookupResult:
        """Find a registered user by email by paging through the admin user list."""
        if not self.enabled:
            logger.warning("Identity provider not configured. Cannot get user.")
            return UNKNOWN
        if not email or "@" not in email:
            logger.warning("Invalid email provided")
            return NOT_FOUND
        wanted = normalize_email(email)
        page = 1
        try:
            with self._client() as client:
                while True:
                    response = client.get(
                        "/admin/users",
                        params={"page": page, "per_page": USERS_PAGE_SIZE},
                        headers=self._admin_headers(),
                    )
                    if response.status_code != 200:
                        logger.warning("Failed to list users (HTTP %s)", response.status_code)
                        return UNKNOWN
                    payload = response.json()
                    users = payload.get("users") if isinstance(payload, dict) else None
                    if not isinstance(users, list):
                        logger.warning("Unexpected user list payload from identity provider")
                        return UNKNOWN
                    for user in users:
                        if not isinstance(user, dict):
                            continue
                        if normalize_email(user.get("email") or "") == wanted:
                            identity = parse_identity(user)
                            if identity is None:
                                return NOT_FOUND
                            return LookupResult(LookupStatus.FOUND, identity)
                    if len(users) < USERS_PAGE_SIZE:
                        break
                    page += 1
        except httpx.TimeoutException:
            logger.error("Get user by email timed out (email=%s)", wanted)
            return UNKNOWN
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error getting user by email %s: %s", wanted, exc)
            return UNKNOWN
        logger.debug("User not found by email %s", wanted)
        return NOT_FOUND

    def get_user_phone_number(self, user_id: UUID | str) -> str | None:
        """Best-effort phone lookup from profile metadata or the account phone."""
        result = self.get_user_by_id(user_id)
        return result.identity.phone_number if result.found else None

    def email_for(self, user_id: UUID | str, default: str = "Unknown") -> str:
        """Email of ``user_id`` for display, or ``default`` when it cannot be resolved."""
        return self.get_user_by_id(user_id).email or default


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    """FastAPI dependency: process-wide verifier built from settings."""
    settings = get_settings()
    return IdentityVerifier(
        settings.supabase_url,
        settings.supabase_service_role_key,
        timeout=settings.identity_timeout,
    )
