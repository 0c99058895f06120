"""Tests for the session change hub."""
from __future__ import annotations

import asyncio

import pytest

from hostel_finder.services.auth import AuthSession, AuthUser
from hostel_finder.services.session_events import SessionEvent, SessionEvents, SessionEventType


def signed_in(user_id: str, token: str = "token") -> SessionEvent:
    session = AuthSession(access_token=token, user=AuthUser(id=user_id))
    return SessionEvent(SessionEventType.SIGNED_IN, user_id, session)


@pytest.mark.asyncio
async def test_events_arrive_in_publish_order_for_the_right_user():
    hub = SessionEvents()
    alice = hub.subscribe("alice")
    bob = hub.subscribe("bob")

    hub.publish(signed_in("alice", "t1"))
    hub.publish(SessionEvent(SessionEventType.SIGNED_OUT, "alice"))
    hub.publish(signed_in("bob"))

    first = await alice.next_event()
    second = await alice.next_event()
    assert first.session.access_token == "t1"
    assert second.type is SessionEventType.SIGNED_OUT
    assert second.session is None

    bob_event = await bob.next_event()
    assert bob_event.user_id == "bob"


@pytest.mark.asyncio
async def test_unsubscribe_detaches_and_wakes_reader():
    hub = SessionEvents()
    subscription = hub.subscribe("alice")
    assert hub.subscriber_count("alice") == 1

    reader = asyncio.create_task(subscription.next_event())
    await asyncio.sleep(0)
    subscription.unsubscribe()

    assert await reader is None
    assert hub.subscriber_count() == 0
    assert hub.publish(signed_in("alice")) == 0

    subscription.unsubscribe()
    assert subscription.closed


@pytest.mark.asyncio
async def test_context_manager_releases_subscription():
    hub = SessionEvents()

    async with hub.subscribe("alice") as subscription:
        assert hub.publish(signed_in("alice")) == 1
        received = [event async for event in _take(subscription, 1)]

    assert len(received) == 1
    assert hub.subscriber_count("alice") == 0


async def _take(subscription, count):
    async for event in subscription:
        yield event
        count -= 1
        if count == 0:
            return


@pytest.mark.asyncio
async def test_hub_wide_subscription_sees_every_user():
    hub = SessionEvents()
    everyone = hub.subscribe()
    alice = hub.subscribe("alice")

    assert hub.publish(signed_in("alice")) == 2
    assert hub.publish(SessionEvent(SessionEventType.SIGNED_OUT, "bob")) == 1

    assert (await everyone.next_event()).user_id == "alice"
    assert (await everyone.next_event()).user_id == "bob"
    assert (await alice.next_event()).user_id == "alice"

    everyone.unsubscribe()
    alice.unsubscribe()
    assert hub.subscriber_count() == 0
