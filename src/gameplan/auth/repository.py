from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.auth.models import User
from gameplan.clubs.models import ClubMember


@dataclass(frozen=True)
class AuthRepository:
    async def get_user_by_email(
        self, session: AsyncSession, *, email: str
    ) -> User | None:
        stmt = sa.select(User).where(sa.func.lower(User.email) == email.lower())
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_user_by_id(self, session: AsyncSession, *, user_id: UUID) -> User | None:
        stmt = sa.select(User).where(User.id == user_id)
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        birth_date: dt.date,
        country: str,
        phone: str | None,
    ) -> User:
        user = User(
            id=user_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.lower(),
            password_hash=password_hash,
            birth_date=birth_date,
            country=country,
            phone=phone,
            is_active=True,
            is_email_verified=False,
        )
        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user

    async def touch_last_login(self, session: AsyncSession, *, user_id: UUID) -> None:
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(last_login_at=sa.func.now())
            # The loaded User keeps its previous value; it is returned as-is.
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)
        await session.flush()

    async def update_profile(
        self, session: AsyncSession, *, user_id: UUID, values: dict[str, Any]
    ) -> User | None:
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(**values, updated_at=sa.func.now())
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)
        await session.flush()
        # Reload past the identity map; the row was changed server-side.
        res = await session.execute(
            sa.select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def update_password(
        self, session: AsyncSession, *, user_id: UUID, password_hash: str
    ) -> None:
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash, updated_at=sa.func.now())
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)
        await session.flush()

    async def count_active_memberships(
        self, session: AsyncSession, *, user_id: UUID
    ) -> int:
        stmt = (
            sa.select(sa.func.count(ClubMember.id))
            .where(ClubMember.user_id == user_id)
            .where(ClubMember.is_active.is_(True))
        )
        res = await session.execute(stmt)
        return int(res.scalar_one() or 0)
