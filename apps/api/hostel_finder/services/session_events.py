"""In-process fan-out of auth session changes."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from .auth import AuthSession

logger = logging.getLogger(__name__)


class SessionEventType(str, enum.Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


@dataclass(slots=True)
class SessionEvent:
    """A session transition for one user; ``session`` is None when signed out."""

    type: SessionEventType
    user_id: str
    session: "AuthSession | None" = None


class SessionSubscription:
    """Ordered stream of events for one subscriber, released with ``unsubscribe``.

    ``user_id`` is None for a hub-wide subscription that sees every user's events.
    """

    def __init__(self, hub: "SessionEvents", subscription_id: int, user_id: str | None) -> None:
        self._hub = hub
        self.subscription_id = subscription_id
        self.user_id = user_id
        self._queue: asyncio.Queue[SessionEvent | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, event: SessionEvent) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    async def next_event(self) -> SessionEvent | None:
        """Wait for the next event; None once unsubscribed."""

        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._hub._remove(self)
        # Wake a pending reader so it can observe the close.
        self._queue.put_nowait(None)

    def __aiter__(self) -> "SessionSubscription":
        return self

    async def __anext__(self) -> SessionEvent:
        event = await self.next_event()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "SessionSubscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class SessionEvents:
    """Registry of session subscribers keyed by user id; the None key listens to everyone."""

    def __init__(self) -> None:
        self._subscribers: Dict[str | None, Dict[int, SessionSubscription]] = {}
        self._next_id = 0

    def subscribe(self, user_id: str | None = None) -> SessionSubscription:
        self._next_id += 1
        subscription = SessionSubscription(self, self._next_id, user_id)
        self._subscribers.setdefault(user_id, {})[subscription.subscription_id] = subscription
        return subscription

    def publish(self, event: SessionEvent) -> int:
        """Deliver ``event`` to its user's subscribers and hub-wide ones; return the count."""

        subscribers = list(self._subscribers.get(event.user_id, {}).values())
        subscribers.extend(self._subscribers.get(None, {}).values())
        for subscription in subscribers:
            subscription._deliver(event)
        logger.debug("Published %s for user %s to %d subscriber(s)", event.type.value, event.user_id, len(subscribers))
        return len(subscribers)

    def subscriber_count(self, user_id: str | None = None) -> int:
        if user_id is not None:
            return len(self._subscribers.get(user_id, {}))
        return sum(len(items) for items in self._subscribers.values())

    def _remove(self, subscription: SessionSubscription) -> None:
        subscribers = self._subscribers.get(subscription.user_id)
        if not subscribers:
            return
        subscribers.pop(subscription.subscription_id, None)
        if not subscribers:
            self._subscribers.pop(subscription.user_id, None)


session_events = SessionEvents()
