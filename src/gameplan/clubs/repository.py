from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.clubs.models import ClubMember, ClubRole


@dataclass(frozen=True)
class MembershipRecord:
    id: UUID
    club_id: UUID
    role_name: str
    category: str
    is_active: bool
    permissions: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClubsRepository:
    async def get_membership(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        club_id: UUID,
        active_only: bool = False,
    ) -> MembershipRecord | None:
        stmt = (
            sa.select(
                ClubMember.id,
                ClubMember.club_id,
                ClubMember.is_active,
                ClubRole.name,
                ClubRole.category,
                ClubRole.permissions,
            )
            .join(ClubRole, ClubMember.role_id == ClubRole.id)
            .where(ClubMember.user_id == user_id)
            .where(ClubMember.club_id == club_id)
            # Active rows first when a user has more than one.
            .order_by(ClubMember.is_active.desc(), ClubMember.joined_at.desc())
            .limit(1)
        )
        if active_only:
            stmt = stmt.where(ClubMember.is_active.is_(True))
        res = await session.execute(stmt)
        row = res.one_or_none()
        if row is None:
            return None
        return MembershipRecord(
            id=row.id,
            club_id=row.club_id,
            role_name=row.name,
            category=row.category,
            is_active=bool(row.is_active),
            permissions=dict(row.permissions or {}),
        )
