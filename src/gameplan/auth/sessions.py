"""
Server-side session records.

A session is an independently revocable handle issued next to each bearer
token. A record past its expiry is treated exactly like a missing one.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.auth.models import UserSession
from gameplan.commons.ids import random_uuid


@dataclass(frozen=True)
class SessionStore:
    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        expires_at: dt.datetime,
        ip_address: str | None,
        user_agent: str | None,
    ) -> UUID:
        session_id = random_uuid()
        session.add(
            UserSession(
                id=session_id,
                user_id=user_id,
                expires_at=expires_at,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        await session.flush()
        return session_id

    async def validate(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        user_id: UUID,
        now: dt.datetime,
    ) -> bool:
        stmt = (
            sa.select(UserSession.id)
            .where(UserSession.id == session_id)
            .where(UserSession.user_id == user_id)
            .where(UserSession.expires_at > now)
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none() is not None

    async def delete(
        self, session: AsyncSession, *, session_id: UUID, user_id: UUID
    ) -> int:
        stmt = (
            sa.delete(UserSession)
            .where(UserSession.id == session_id)
            .where(UserSession.user_id == user_id)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)

    async def delete_all_for_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        except_session_id: UUID | None = None,
    ) -> int:
        stmt = sa.delete(UserSession).where(UserSession.user_id == user_id)
        if except_session_id is not None:
            stmt = stmt.where(UserSession.id != except_session_id)
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)
