"""Client for the hosted auth service (Supabase GoTrue REST API)."""
from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass
from functools import lru_cache

import httpx

from ..core.config import settings
from .session_events import SessionEvent, SessionEvents, SessionEventType, SessionSubscription, session_events

logger = logging.getLogger(__name__)


class AuthServiceError(RuntimeError):
    """Raised when the auth service cannot be reached or answers unexpectedly."""


class InvalidCredentialsError(RuntimeError):
    """Raised when sign-in is rejected."""


@dataclass(slots=True)
class AuthUser:
    id: str
    email: str | None = None


@dataclass(slots=True)
class AuthSession:
    """Proof of authentication; presence implies a signed-in visitor."""

    access_token: str
    user: AuthUser
    refresh_token: str | None = None
    expires_in: int | None = None
    expires_at: float | None = None

    def seconds_left(self, now: float | None = None) -> float | None:
        """Remaining lifetime in seconds, or None when the expiry is unknown."""

        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - (time.time() if now is None else now))


class SupabaseAuth:
    """Session queries, sign-in/out and change subscription."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        events: SessionEvents | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self.events = events if events is not None else session_events

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._base_url}/auth/v1",
            headers={"apikey": self._api_key},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def get_session(self, access_token: str | None) -> AuthSession | None:
        """Resolve an access token to a session, or None when it is not valid."""

        if not access_token:
            return None

        try:
            async with self._client() as client:
                response = await client.get("/user", headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as exc:
            raise AuthServiceError(f"Auth service unreachable: {exc}") from exc

        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            raise AuthServiceError(f"Auth service returned {response.status_code}")

        return AuthSession(
            access_token=access_token,
            user=_parse_user(response.json()),
            expires_at=_token_expiry(access_token),
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange email and password for a session."""

        try:
            async with self._client() as client:
                response = await client.post(
                    "/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as exc:
            raise AuthServiceError(f"Auth service unreachable: {exc}") from exc

        if response.status_code in (400, 401):
            raise InvalidCredentialsError("Invalid login credentials")
        if response.status_code != 200:
            raise AuthServiceError(f"Auth service returned {response.status_code}")

        payload = response.json()
        expires_in = payload.get("expires_in")
        expires_at = payload.get("expires_at")
        if expires_at is None and expires_in is not None:
            expires_at = time.time() + expires_in
        session = AuthSession(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=expires_in,
            expires_at=float(expires_at) if expires_at is not None else _token_expiry(payload["access_token"]),
            user=_parse_user(payload.get("user") or {}),
        )
        self.events.publish(SessionEvent(SessionEventType.SIGNED_IN, session.user.id, session))
        return session

    async def sign_out(self, session: AuthSession) -> bool:
        """Revoke the session remotely and notify local subscribers.

        Remote failures are logged and reported by returning False; the
        signed-out event is published either way.
        """

        ok = True
        try:
            async with self._client() as client:
                response = await client.post(
                    "/logout", headers={"Authorization": f"Bearer {session.access_token}"}
                )
            if response.status_code >= 400 and response.status_code != 401:
                logger.warning("Sign-out returned %s for user %s", response.status_code, session.user.id)
                ok = False
        except httpx.HTTPError as exc:
            logger.warning("Sign-out request failed for user %s: %s", session.user.id, exc)
            ok = False

        self.events.publish(SessionEvent(SessionEventType.SIGNED_OUT, session.user.id, None))
        return ok

    def subscribe(self, user_id: str | None = None) -> SessionSubscription:
        return self.events.subscribe(user_id)


def _parse_user(payload: dict) -> AuthUser:
    user_id = payload.get("id")
    if not user_id:
        raise AuthServiceError("Auth service response is missing the user id")
    return AuthUser(id=str(user_id), email=payload.get("email"))


def _token_expiry(access_token: str) -> float | None:
    """Read the ``exp`` claim of a JWT access token without verifying it.

    The auth service has already accepted the token; this only tells the
    guard when to stop trusting it.
    """

    parts = access_token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(segment))
    except (binascii.Error, ValueError):
        return None
    exp = claims.get("exp") if isinstance(claims, dict) else None
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


@lru_cache
def get_auth_client() -> SupabaseAuth:
    """Return the process-wide auth client; override in tests via dependency_overrides."""

    return SupabaseAuth(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.http_timeout_seconds,
    )
