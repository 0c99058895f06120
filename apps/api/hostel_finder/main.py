"""FastAPI application for the student hostel finder."""
from __future__ import annotations

import base64
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from .core.config import settings
from .db.session import dispose_engine
from .routers import admin, listings, pages, session
from .services.session_guard import LOGIN_PATH

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting hostel finder (%s)", settings.app_env)
    yield
    await dispose_engine()


app = FastAPI(title="Hostel Finder API", version="0.1.0", lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

FAVICON_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGMAAQAABQABDQottAAAAABJRU5ErkJggg=="
)


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Return a simple health payload."""

    return {"status": "ok"}


@app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    return PlainTextResponse("User-agent: *\nDisallow: /admin")


@app.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(content=FAVICON_BYTES, media_type="image/png")


app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(session.router, prefix="/api/session", tags=["session"])
app.include_router(pages.router, tags=["pages"])


@app.get("/{path:path}", include_in_schema=False)
async def fallback(path: str) -> Response:
    """Unknown pages go to the login screen; unknown API paths are 404s."""

    if path == "api" or path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")
    return RedirectResponse(LOGIN_PATH, status_code=303)
