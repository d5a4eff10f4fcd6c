from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.auth.crypto import hash_password, verify_password
from gameplan.auth.exceptions import (
    AccountDeactivatedException,
    InvalidCredentialsException,
    InvalidCurrentPasswordException,
    NoUpdateFieldsException,
    ProfileNotFoundException,
    SessionInvalidException,
    TokenRequiredException,
    UserExistsException,
    UserNotFoundException,
)
from gameplan.auth.models import User
from gameplan.auth.repository import AuthRepository
from gameplan.auth.sessions import SessionStore
from gameplan.auth.tokens import TokenService
from gameplan.commons.ids import parse_uuid, uuid7_uuid
from gameplan.commons.logging import logger
from gameplan.core.db_errors import ConstraintKind, classify


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: UUID
    email: str
    is_active: bool
    session_id: UUID | None = None


@dataclass(frozen=True)
class ClientInfo:
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuthResult:
    user: User
    token: str
    session_id: UUID


@dataclass
class AuthService:
    users: AuthRepository
    sessions: SessionStore
    tokens: TokenService

    @classmethod
    def create(cls) -> "AuthService":
        return cls(
            users=AuthRepository(),
            sessions=SessionStore(),
            tokens=TokenService.create(),
        )

    async def register(
        self,
        session: AsyncSession,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        birth_date: dt.date,
        country: str,
        phone: str | None = None,
        client: ClientInfo = ClientInfo(),
    ) -> AuthResult:
        existing = await self.users.get_user_by_email(session, email=email)
        if existing is not None:
            raise UserExistsException("User already exists with this email")

        pw_hash = await asyncio.to_thread(hash_password, password)
        try:
            user = await self.users.insert_user(
                session,
                user_id=uuid7_uuid(),
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=pw_hash,
                birth_date=birth_date,
                country=country,
                phone=phone,
            )
        except IntegrityError as exc:
            # A concurrent registration won the race on users_email_unique.
            violation = classify(exc)
            if violation is not None and violation.kind is ConstraintKind.UNIQUE:
                await session.rollback()
                raise UserExistsException("User already exists with this email") from exc
            raise

        issued = self.tokens.issue(user_id=user.id, email=user.email)
        session_id = await self.sessions.create(
            session,
            user_id=user.id,
            expires_at=issued.expires_at,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        await session.commit()
        logger.info("User registered: %s", user.id)
        return AuthResult(user=user, token=issued.token, session_id=session_id)

    async def login(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        remember_me: bool = False,
        client: ClientInfo = ClientInfo(),
    ) -> AuthResult:
        # Unknown email and wrong password fail identically.
        user = await self.users.get_user_by_email(session, email=email)
        if user is None:
            raise InvalidCredentialsException("Invalid credentials")

        if not user.is_active:
            raise AccountDeactivatedException("Account is deactivated")

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            raise InvalidCredentialsException("Invalid credentials")

        issued = self.tokens.issue(
            user_id=user.id, email=user.email, remember_me=remember_me
        )
        session_id = await self.sessions.create(
            session,
            user_id=user.id,
            expires_at=issued.expires_at,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        await self.users.touch_last_login(session, user_id=user.id)
        await session.commit()
        logger.info("User logged in: %s (session %s)", user.id, session_id)
        return AuthResult(user=user, token=issued.token, session_id=session_id)

    async def logout(
        self, session: AsyncSession, *, identity: AuthenticatedUser
    ) -> None:
        if identity.session_id is None:
            return
        await self.sessions.delete(
            session, session_id=identity.session_id, user_id=identity.user_id
        )
        await session.commit()
        logger.info("User logged out: %s (session %s)", identity.user_id, identity.session_id)

    def refresh(self, *, identity: AuthenticatedUser) -> str:
        # The session record is left as-is; see DESIGN.md.
        return self.tokens.issue(user_id=identity.user_id, email=identity.email).token

    async def authenticate(
        self,
        session: AsyncSession,
        *,
        token: str | None,
        session_id: str | None = None,
    ) -> AuthenticatedUser:
        if not token:
            raise TokenRequiredException("Access token is required")

        payload = self.tokens.verify(token)

        user = await self.users.get_user_by_id(session, user_id=payload.user_id)
        if user is None:
            raise UserNotFoundException("User not found")
        if not user.is_active:
            raise AccountDeactivatedException("Account is deactivated")

        sid: UUID | None = None
        if session_id:
            sid = parse_uuid(session_id)
            valid = sid is not None and await self.sessions.validate(
                session, session_id=sid, user_id=user.id, now=_utcnow()
            )
            if not valid:
                raise SessionInvalidException("Session expired or invalid")

        return AuthenticatedUser(
            user_id=user.id, email=user.email, is_active=user.is_active, session_id=sid
        )

    async def get_profile(
        self, session: AsyncSession, *, identity: AuthenticatedUser
    ) -> tuple[User, int]:
        user = await self.users.get_user_by_id(session, user_id=identity.user_id)
        if user is None:
            raise ProfileNotFoundException("User not found")
        memberships = await self.users.count_active_memberships(
            session, user_id=identity.user_id
        )
        return user, memberships

    async def update_profile(
        self,
        session: AsyncSession,
        *,
        identity: AuthenticatedUser,
        values: dict[str, Any],
    ) -> User:
        if not values:
            raise NoUpdateFieldsException("No fields to update")
        user = await self.users.update_profile(
            session, user_id=identity.user_id, values=values
        )
        if user is None:
            raise ProfileNotFoundException("User not found")
        await session.commit()
        return user

    async def change_password(
        self,
        session: AsyncSession,
        *,
        identity: AuthenticatedUser,
        current_password: str,
        new_password: str,
    ) -> int:
        """Swap the password and revoke every other session. Returns how many were revoked."""
        user = await self.users.get_user_by_id(session, user_id=identity.user_id)
        if user is None:
            raise ProfileNotFoundException("User not found")

        if not await asyncio.to_thread(verify_password, current_password, user.password_hash):
            raise InvalidCurrentPasswordException("Current password is incorrect")

        pw_hash = await asyncio.to_thread(hash_password, new_password)
        await self.users.update_password(
            session, user_id=identity.user_id, password_hash=pw_hash
        )
        revoked = await self.sessions.delete_all_for_user(
            session, user_id=identity.user_id, except_session_id=identity.session_id
        )
        await session.commit()
        logger.info(
            "Password changed for user %s; %d other session(s) revoked",
            identity.user_id,
            revoked,
        )
        return revoked
