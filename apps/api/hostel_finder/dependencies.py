"""FastAPI dependencies wiring the guard to its collaborators."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from .core.config import settings
from .db.session import SessionLocal
from .models.profile import Profile
from .repositories import profiles as profiles_repo
from .services.auth import AuthSession, SupabaseAuth, get_auth_client
from .services.session_guard import GuardDecision, ProfileLookup, SessionGuard
from .services.storage import SupabaseStorage, get_storage_client


def get_access_token(request: Request) -> str | None:
    """Bearer token from the Authorization header, else the session cookie."""

    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(settings.session_cookie_name) or None


async def _lookup_profile(user_id: str) -> Profile | None:
    async with SessionLocal() as session:
        return await profiles_repo.get_by_user_id(session, user_id)


def get_profile_lookup() -> ProfileLookup:
    """Profile reads run on their own short-lived session."""

    return _lookup_profile


def get_auth() -> SupabaseAuth:
    return get_auth_client()


def get_storage() -> SupabaseStorage:
    return get_storage_client()


async def plain_guard_decision(
    access_token: str | None = Depends(get_access_token),
    auth: SupabaseAuth = Depends(get_auth),
) -> GuardDecision:
    return await SessionGuard(auth).evaluate(access_token)


async def admin_guard_decision(
    access_token: str | None = Depends(get_access_token),
    auth: SupabaseAuth = Depends(get_auth),
    profile_lookup: ProfileLookup = Depends(get_profile_lookup),
) -> GuardDecision:
    guard = SessionGuard(auth, require_admin=True, profile_lookup=profile_lookup)
    return await guard.evaluate(access_token)


def require_session(decision: GuardDecision = Depends(plain_guard_decision)) -> AuthSession:
    """API variant of the plain guard: 401 unless a session exists."""

    if not decision.granted or decision.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decision.session


def require_admin(decision: GuardDecision = Depends(admin_guard_decision)) -> AuthSession:
    """API variant of the admin guard: 401, 403, or 503 for retryable failures."""

    if decision.granted and decision.session is not None:
        return decision.session
    if decision.retryable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=decision.error,
            headers={"Retry-After": "1"},
        )
    if decision.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
