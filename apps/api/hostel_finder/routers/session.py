"""Live session state for guarded client views."""
from __future__ import annotations

import asyncio
from contextlib import aclosing, suppress

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..core.config import settings
from ..dependencies import get_auth, get_profile_lookup
from ..services.auth import SupabaseAuth
from ..services.session_guard import ProfileLookup, SessionGuard

router = APIRouter()


@router.websocket("/watch")
async def watch_session(
    websocket: WebSocket,
    auth: SupabaseAuth = Depends(get_auth),
    profile_lookup: ProfileLookup = Depends(get_profile_lookup),
) -> None:
    """Stream guard decisions until the guard settles on a sign-out or the socket closes.

    Pass ``admin=true`` for the admin guard. The token comes from the
    ``token`` query parameter or the session cookie.
    """

    access_token = websocket.query_params.get("token") or websocket.cookies.get(settings.session_cookie_name)
    require_admin = websocket.query_params.get("admin", "").lower() in {"1", "true", "yes"}
    guard = SessionGuard(
        auth,
        require_admin=require_admin,
        profile_lookup=profile_lookup if require_admin else None,
    )

    await websocket.accept()

    async def forward_decisions() -> None:
        async with aclosing(guard.watch(access_token)) as decisions:
            async for decision in decisions:
                await websocket.send_json(decision.as_message())

    async def wait_for_disconnect() -> None:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

    forward_task = asyncio.create_task(forward_decisions())
    listen_task = asyncio.create_task(wait_for_disconnect())
    done, pending = await asyncio.wait({forward_task, listen_task}, return_when=asyncio.FIRST_COMPLETED)

    # Cancelling the forwarder closes the guard's generator, which releases its subscription.
    for task in pending:
        task.cancel()
        with suppress(asyncio.CancelledError, WebSocketDisconnect):
            await task

    if forward_task in done:
        with suppress(WebSocketDisconnect):
            forward_task.result()
        if listen_task not in done:
            await websocket.close()
