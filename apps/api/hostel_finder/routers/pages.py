"""Server-rendered entry points: login, dashboard and the admin console."""
from __future__ import annotations

import logging
from html import escape

from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..db.session import get_session
from ..dependencies import admin_guard_decision, get_access_token, get_auth, plain_guard_decision
from ..schemas import hostels as hostels_schema
from ..services import listings as listings_service
from ..services.auth import AuthServiceError, InvalidCredentialsError, SupabaseAuth
from ..services.session_guard import LOGIN_PATH, GuardDecision

logger = logging.getLogger(__name__)

router = APIRouter()

DASHBOARD_PATH = "/dashboard"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
</head>
<body>
    <h1>{title}</h1>
    {body}
</body>
</html>"""

LOGIN_FORM = """<form method="post" action="/login">
        <label>Email <input type="email" name="email" value="{email}" required /></label>
        <label>Password <input type="password" name="password" required /></label>
        <button type="submit">Sign in</button>
    </form>"""

SEARCH_FORM = """<form method="get" action="/dashboard">
        <input name="q" value="{q}" placeholder="Search by hostel name, description, or owner..." />
        <input name="min_price" type="number" min="0" value="{min_price}" placeholder="0" />
        <input name="max_price" type="number" min="0" value="{max_price}" placeholder="No limit" />
        <button type="submit">Search</button>
    </form>
    <form method="post" action="/logout"><button type="submit">Logout</button></form>"""


def _page(title: str, body: str, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    return HTMLResponse(PAGE_TEMPLATE.format(title=escape(title), body=body), status_code=status_code)


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=status.HTTP_303_SEE_OTHER)


def _listing_items(listings: list[hostels_schema.HostelListing]) -> str:
    rows = []
    for listing in listings:
        room_types = ", ".join(
            f"{escape(row.room_type)} GH&#8373; {row.price:,}" for row in listing.room_types
        )
        rows.append(
            "<li>"
            f"<strong>{escape(listing.name)}</strong> GH&#8373; {listing.price:,}/year, "
            f"{listing.available_rooms} rooms left"
            f"{' - ' + escape(listing.description) if listing.description else ''}"
            f"<br />Owner: {escape(listing.owner_name or 'Not provided')} "
            f"({escape(listing.owner_contact or 'Not provided')})"
            f"{'<br />Room types: ' + room_types if room_types else ''}"
            "</li>"
        )
    return "<ul>" + "".join(rows) + "</ul>"


@router.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    return _redirect(LOGIN_PATH)


@router.get("/login", response_class=HTMLResponse)
async def login_page(decision: GuardDecision = Depends(plain_guard_decision)) -> Response:
    """Show the sign-in form, or go straight to the dashboard when signed in."""

    if decision.granted:
        return _redirect(DASHBOARD_PATH)
    return _page("Central University Hostel Finder", LOGIN_FORM.format(email=""))


@router.post("/login")
async def login(
    email: str = Form(...),
    password: str = Form(...),
    auth: SupabaseAuth = Depends(get_auth),
) -> Response:
    """Sign in and keep the access token in an HTTP-only cookie."""

    form = LOGIN_FORM.format(email=escape(email))
    try:
        session = await auth.sign_in(email, password)
    except InvalidCredentialsError:
        return _page(
            "Central University Hostel Finder",
            "<p role=\"alert\">Invalid email or password.</p>" + form,
            status.HTTP_401_UNAUTHORIZED,
        )
    except AuthServiceError as exc:
        logger.warning("Sign-in unavailable: %s", exc)
        return _page(
            "Central University Hostel Finder",
            "<p role=\"alert\">Sign-in is temporarily unavailable. Please try again.</p>" + form,
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = _redirect(DASHBOARD_PATH)
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        samesite="lax",
        secure=settings.app_env != "development",
    )
    return response


@router.post("/logout")
async def logout(
    access_token: str | None = Depends(get_access_token),
    auth: SupabaseAuth = Depends(get_auth),
) -> Response:
    """Sign out, clear the cookie and return to the login page."""

    try:
        session = await auth.get_session(access_token)
    except AuthServiceError as exc:
        logger.warning("Could not resolve session during logout: %s", exc)
        session = None
    if session is not None and not await auth.sign_out(session):
        logger.warning("Remote sign-out failed for user %s", session.user.id)

    response = _redirect(LOGIN_PATH)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    q: str = Query(default=""),
    min_price: str | None = Query(default=None),
    max_price: str | None = Query(default=None),
    decision: GuardDecision = Depends(plain_guard_decision),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Hostel search for signed-in visitors."""

    if not decision.granted:
        return _redirect(decision.redirect_to or LOGIN_PATH)

    criteria = hostels_schema.ListingCriteria(q=q, min_price=min_price, max_price=max_price)
    found = await listings_service.search_listings(criteria, session)

    body = SEARCH_FORM.format(q=escape(q), min_price=escape(min_price or ""), max_price=escape(max_price or ""))
    if found.error:
        body += f"<p role=\"alert\">{escape(found.error)}</p>"
    if found.results:
        body += "<h2>Available Hostels</h2>" + _listing_items(found.results)
    else:
        body += "<h2>No hostels found</h2><p>Please try adjusting your search filters</p>"
    return _page("Find Your Perfect Student Hostel", body)


@router.get("/admin", response_class=HTMLResponse)
async def admin_console(
    decision: GuardDecision = Depends(admin_guard_decision),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Hostel management list for administrators."""

    if decision.retryable:
        return _page(
            "Manage Hostels",
            f"<p role=\"alert\">{escape(decision.error or 'Something went wrong.')}</p>"
            "<a href=\"/admin\">Retry</a>",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if not decision.granted:
        return _redirect(decision.redirect_to or LOGIN_PATH)

    fetched = await listings_service.fetch_listings(session)
    body = "<p>Add, edit, or remove hostel listings</p>"
    if fetched.error:
        body += f"<p role=\"alert\">{escape(fetched.error)}</p>"
    body += _listing_items(fetched.listings) if fetched.listings else "<p>No hostels found</p>"
    return _page("Manage Hostels", body)
