"""Route-level access control over the auth service and account profiles."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Protocol

from .auth import AuthServiceError, AuthSession, SupabaseAuth

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/"


class AdminFlag(Protocol):
    is_admin: bool


ProfileLookup = Callable[[str], Awaitable[AdminFlag | None]]


class GuardOutcome(str, enum.Enum):
    PENDING = "pending"
    DENIED = "denied"
    GRANTED = "granted"


@dataclass(slots=True)
class GuardDecision:
    """What to render for a guarded route.

    A denied decision carries either a redirect target or, for a
    recoverable service failure, an error message with ``retryable`` set.
    """

    outcome: GuardOutcome
    redirect_to: str | None = None
    error: str | None = None
    retryable: bool = False
    session: AuthSession | None = None

    @property
    def granted(self) -> bool:
        return self.outcome is GuardOutcome.GRANTED

    def as_message(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "redirect_to": self.redirect_to,
            "error": self.error,
            "retryable": self.retryable,
            "user_id": self.session.user.id if self.session else None,
        }


PENDING = GuardDecision(GuardOutcome.PENDING)


class SessionGuard:
    """Decide pending/denied/granted for a visitor.

    The plain guard only needs a session. The admin guard additionally looks
    up the account profile and requires ``is_admin`` to be exactly True.
    """

    def __init__(
        self,
        auth: SupabaseAuth,
        *,
        require_admin: bool = False,
        profile_lookup: ProfileLookup | None = None,
    ) -> None:
        if require_admin and profile_lookup is None:
            raise ValueError("The admin guard needs a profile lookup")
        self._auth = auth
        self._profile_lookup = profile_lookup
        self.require_admin = require_admin
        self.decision = PENDING

    async def evaluate(self, access_token: str | None) -> GuardDecision:
        """Query the current session and decide."""

        self.decision = PENDING
        try:
            session = await self._auth.get_session(access_token)
        except AuthServiceError as exc:
            if not self.require_admin:
                logger.info("Session query failed, treating visitor as signed out: %s", exc)
                return self._set(GuardDecision(GuardOutcome.DENIED, redirect_to=LOGIN_PATH))
            logger.warning("Session query failed for admin route: %s", exc)
            return self._set(
                GuardDecision(
                    GuardOutcome.DENIED,
                    error="Could not verify your session. Please try again.",
                    retryable=True,
                )
            )
        return await self.decide(session)

    async def decide(self, session: AuthSession | None) -> GuardDecision:
        """Decide for an already resolved session."""

        if session is None:
            return self._set(GuardDecision(GuardOutcome.DENIED, redirect_to=LOGIN_PATH))

        if not self.require_admin:
            return self._set(GuardDecision(GuardOutcome.GRANTED, session=session))

        if self._profile_lookup is None:
            raise RuntimeError("The admin guard was built without a profile lookup")
        try:
            profile = await self._profile_lookup(session.user.id)
        except Exception as exc:  # noqa: BLE001 - any lookup failure is retryable
            logger.warning("Profile lookup failed for user %s: %s", session.user.id, exc)
            return self._set(
                GuardDecision(
                    GuardOutcome.DENIED,
                    error="Could not check administrator access. Please try again.",
                    retryable=True,
                    session=session,
                )
            )

        if profile is None or profile.is_admin is not True:
            return self._set(GuardDecision(GuardOutcome.DENIED, redirect_to=HOME_PATH, session=session))
        return self._set(GuardDecision(GuardOutcome.GRANTED, session=session))

    async def watch(self, access_token: str | None) -> AsyncIterator[GuardDecision]:
        """Yield ``pending``, the first decision, then one decision per session change.

        The change subscription is taken before the session is queried, so a
        sign-out that lands while the first decision is still being made is
        replayed right after it. A known session expiry ends the stream with a
        redirect to the login page. The subscription lives exactly as long as
        the generator; close it (``contextlib.aclosing``) when the consumer
        goes away.
        """

        subscription = self._auth.subscribe()
        try:
            yield PENDING
            decision = await self.evaluate(access_token)
            yield decision
            session = decision.session
            if session is None:
                return

            user_id = session.user.id
            while True:
                try:
                    event = await asyncio.wait_for(subscription.next_event(), session.seconds_left())
                except asyncio.TimeoutError:
                    logger.info("Session for user %s expired", user_id)
                    yield self._set(GuardDecision(GuardOutcome.DENIED, redirect_to=LOGIN_PATH))
                    return
                if event is None:
                    return
                if event.user_id != user_id:
                    continue
                if event.session is None:
                    yield self._set(GuardDecision(GuardOutcome.DENIED, redirect_to=LOGIN_PATH))
                    return
                session = event.session
                yield await self.decide(session)
        finally:
            subscription.unsubscribe()

    def _set(self, decision: GuardDecision) -> GuardDecision:
        self.decision = decision
        return decision
