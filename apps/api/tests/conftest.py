"""Shared fixtures: test doubles for the auth, profile and storage collaborators."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from hostel_finder import dependencies
from hostel_finder.db.session import get_session
from hostel_finder.main import app
from hostel_finder.services.auth import AuthSession, AuthUser, InvalidCredentialsError
from hostel_finder.services.session_events import SessionEvent, SessionEvents, SessionEventType


class FakeAuth:
    """Auth double: tokens map to users, profiles map to admin flags."""

    def __init__(self) -> None:
        self.events = SessionEvents()
        self.tokens: dict[str, str] = {"visitor-token": "visitor", "admin-token": "admin"}
        self.passwords: dict[str, tuple[str, str]] = {"admin@example.com": ("secret", "admin-token")}
        self.signed_out: list[str] = []
        self.queued_on_subscribe: list[SessionEvent] = []

    async def get_session(self, access_token):
        user_id = self.tokens.get(access_token or "")
        if user_id is None:
            return None
        return AuthSession(access_token=access_token, user=AuthUser(id=user_id))

    async def sign_in(self, email, password):
        expected = self.passwords.get(email)
        if expected is None or expected[0] != password:
            raise InvalidCredentialsError("Invalid login credentials")
        token = expected[1]
        return AuthSession(access_token=token, user=AuthUser(id=self.tokens[token], email=email), expires_in=3600)

    async def sign_out(self, session):
        self.signed_out.append(session.user.id)
        self.events.publish(SessionEvent(SessionEventType.SIGNED_OUT, session.user.id))
        return True

    def subscribe(self, user_id=None):
        subscription = self.events.subscribe(user_id)
        for event in self.queued_on_subscribe:
            self.events.publish(event)
        return subscription


class FakeProfiles:
    def __init__(self) -> None:
        self.admins = {"admin"}
        self.error: Exception | None = None

    async def __call__(self, user_id):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(id=user_id, is_admin=user_id in self.admins)


class DummySession:
    """Minimal session stub supporting async transaction context."""

    def __init__(self) -> None:
        self.added: list[object] = []

    def add(self, obj: object) -> None:
        self.added.append(obj)

    def begin(self):  # noqa: D401 - mimic SQLAlchemy's async begin
        session = self

        class _Tx:
            async def __aenter__(self_inner):
                return session

            async def __aexit__(self_inner, exc_type, exc, tb):
                return False

        return _Tx()


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[str] = []

    async def upload(self, path, content, content_type, *, access_token=None):
        self.uploads.append(path)
        return f"https://cdn.example.com/{path}"


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def fake_profiles():
    return FakeProfiles()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def overrides(fake_auth, fake_profiles, fake_storage):
    db_session = DummySession()

    async def override_session():
        yield db_session

    app.dependency_overrides[dependencies.get_auth] = lambda: fake_auth
    app.dependency_overrides[dependencies.get_profile_lookup] = lambda: fake_profiles
    app.dependency_overrides[dependencies.get_storage] = lambda: fake_storage
    app.dependency_overrides[get_session] = override_session
    yield SimpleNamespace(auth=fake_auth, profiles=fake_profiles, storage=fake_storage, db=db_session)
    app.dependency_overrides.clear()
