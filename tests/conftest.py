"""
Global pytest fixtures.

Tests never touch a real Postgres instance: the DB session dependency yields a
stub, and the repositories behind the services are swapped for in-memory fakes
that honour the same method signatures.
"""

import os

# Keep password hashing cheap in tests; must be set before settings load.
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("APP_ENV", "test")

import datetime as dt
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import pytest  # type: ignore[import-not-found]
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # type: ignore[import-not-found]

from gameplan.api.main import build_app
from gameplan.auth.depends import (
    get_auth_service,
    get_client_rate_limiter,
    get_rate_limiter,
)
from gameplan.auth.models import Base, User
from gameplan.auth.service import AuthService
from gameplan.auth.tokens import TokenService
from gameplan.clubs import models as _clubs_models  # noqa: F401  (registers club tables)
from gameplan.clubs.depends import get_club_access_service
from gameplan.clubs.repository import MembershipRecord
from gameplan.clubs.service import ClubAccessService
from gameplan.commons.depends import database_session
from gameplan.commons.ids import random_uuid
from gameplan.commons.ratelimit import ClientRateLimiter, UserRateLimiter

TEST_SECRET = "test-secret"
TEST_ISSUER = "gameplan-api"
TEST_AUDIENCE = "gameplan-client"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class FakeDbSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    async def flush(self) -> None:
        return None


@dataclass
class SessionRow:
    id: UUID
    user_id: UUID
    expires_at: dt.datetime
    ip_address: str | None
    user_agent: str | None


@dataclass
class InMemoryStore:
    users: dict[UUID, User] = field(default_factory=dict)
    sessions: dict[UUID, SessionRow] = field(default_factory=dict)
    memberships: list[tuple[UUID, MembershipRecord]] = field(default_factory=list)

    def add_membership(
        self,
        *,
        user_id: UUID,
        club_id: UUID,
        role_name: str,
        category: str,
        permissions: dict[str, Any] | None = None,
        is_active: bool = True,
    ) -> MembershipRecord:
        record = MembershipRecord(
            id=random_uuid(),
            club_id=club_id,
            role_name=role_name,
            category=category,
            is_active=is_active,
            permissions=dict(permissions or {}),
        )
        self.memberships.append((user_id, record))
        return record


@dataclass(frozen=True)
class FakeAuthRepository:
    store: InMemoryStore

    async def get_user_by_email(self, session, *, email: str):  # type: ignore[no-untyped-def]
        for user in self.store.users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    async def get_user_by_id(self, session, *, user_id: UUID):  # type: ignore[no-untyped-def]
        return self.store.users.get(user_id)

    async def insert_user(self, session, *, user_id, first_name, last_name, email, password_hash, birth_date, country, phone):  # type: ignore[no-untyped-def]
        now = _utcnow()
        user = User(
            id=user_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.lower(),
            password_hash=password_hash,
            birth_date=birth_date,
            country=country,
            phone=phone,
            profile_picture_url=None,
            is_email_verified=False,
            is_active=True,
            last_login_at=None,
            created_at=now,
            updated_at=now,
        )
        self.store.users[user_id] = user
        return user

    async def touch_last_login(self, session, *, user_id: UUID) -> None:  # type: ignore[no-untyped-def]
        self.store.users[user_id].last_login_at = _utcnow()

    async def update_profile(self, session, *, user_id: UUID, values):  # type: ignore[no-untyped-def]
        user = self.store.users.get(user_id)
        if user is None:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        user.updated_at = _utcnow()
        return user

    async def update_password(self, session, *, user_id: UUID, password_hash: str) -> None:  # type: ignore[no-untyped-def]
        self.store.users[user_id].password_hash = password_hash

    async def count_active_memberships(self, session, *, user_id: UUID) -> int:  # type: ignore[no-untyped-def]
        return sum(
            1 for uid, record in self.store.memberships if uid == user_id and record.is_active
        )


@dataclass(frozen=True)
class FakeSessionStore:
    store: InMemoryStore

    async def create(self, session, *, user_id, expires_at, ip_address, user_agent):  # type: ignore[no-untyped-def]
        session_id = random_uuid()
        self.store.sessions[session_id] = SessionRow(
            id=session_id,
            user_id=user_id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return session_id

    async def validate(self, session, *, session_id, user_id, now):  # type: ignore[no-untyped-def]
        row = self.store.sessions.get(session_id)
        return row is not None and row.user_id == user_id and row.expires_at > now

    async def delete(self, session, *, session_id, user_id):  # type: ignore[no-untyped-def]
        row = self.store.sessions.get(session_id)
        if row is None or row.user_id != user_id:
            return 0
        del self.store.sessions[session_id]
        return 1

    async def delete_all_for_user(self, session, *, user_id, except_session_id=None):  # type: ignore[no-untyped-def]
        doomed = [
            sid
            for sid, row in self.store.sessions.items()
            if row.user_id == user_id and sid != except_session_id
        ]
        for sid in doomed:
            del self.store.sessions[sid]
        return len(doomed)


@dataclass(frozen=True)
class FakeClubsRepository:
    store: InMemoryStore

    async def get_membership(self, session, *, user_id, club_id, active_only=False):  # type: ignore[no-untyped-def]
        rows = [
            record
            for uid, record in self.store.memberships
            if uid == user_id and record.club_id == club_id
            and (record.is_active or not active_only)
        ]
        rows.sort(key=lambda r: not r.is_active)
        return rows[0] if rows else None


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Default AnyIO backend for async tests."""
    return "asyncio"


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def db_session() -> FakeDbSession:
    return FakeDbSession()


@pytest.fixture()
def token_service() -> TokenService:
    return TokenService(secret=TEST_SECRET, issuer=TEST_ISSUER, audience=TEST_AUDIENCE)


@pytest.fixture()
def auth_service(store: InMemoryStore, token_service: TokenService) -> AuthService:
    return AuthService(
        users=FakeAuthRepository(store),
        sessions=FakeSessionStore(store),
        tokens=token_service,
    )


@pytest.fixture()
def club_access_service(store: InMemoryStore) -> ClubAccessService:
    return ClubAccessService(repo=FakeClubsRepository(store))


@pytest.fixture()
def rate_limiter() -> UserRateLimiter:
    return UserRateLimiter(max_requests=1000, window_s=60)


@pytest.fixture()
def client_rate_limiter() -> ClientRateLimiter:
    return ClientRateLimiter(max_requests=1000, window_s=60)


def install_overrides(
    app: FastAPI,
    *,
    db_session: FakeDbSession,
    auth_service: AuthService,
    club_access_service: ClubAccessService,
    rate_limiter: UserRateLimiter,
    client_rate_limiter: ClientRateLimiter,
) -> FastAPI:
    async def _fake_database_session():  # type: ignore[no-untyped-def]
        yield db_session

    app.dependency_overrides[database_session] = _fake_database_session
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_club_access_service] = lambda: club_access_service
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_client_rate_limiter] = lambda: client_rate_limiter
    return app


@pytest.fixture()
def wire(
    db_session: FakeDbSession,
    auth_service: AuthService,
    club_access_service: ClubAccessService,
    rate_limiter: UserRateLimiter,
    client_rate_limiter: ClientRateLimiter,
):  # type: ignore[no-untyped-def]
    """Point an app's DB/service dependencies at this test's fakes."""

    def _wire(app: FastAPI) -> FastAPI:
        return install_overrides(
            app,
            db_session=db_session,
            auth_service=auth_service,
            club_access_service=club_access_service,
            rate_limiter=rate_limiter,
            client_rate_limiter=client_rate_limiter,
        )

    return _wire


@pytest.fixture()
def app(wire) -> FastAPI:  # type: ignore[no-untyped-def]
    """Full application wired to the in-memory fakes."""
    return wire(build_app())


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    """Sync test client (covers most HTTP unit tests)."""
    return TestClient(app)


@pytest.fixture()
async def sql_sessions(tmp_path):  # type: ignore[no-untyped-def]
    """Sessionmaker over a throwaway SQLite file, configured like DatabaseManager's.

    For repository tests that must run the real SQL (and the ORM's attribute
    loading) rather than the in-memory fakes.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gameplan.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()
