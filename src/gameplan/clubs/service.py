"""
Club-scoped authorization.

Every gate loads the caller's membership for one club and either returns the
resolved membership or raises. Role-name and role-category allow-lists are
separate gates: callers pick exact role names when only specific positions may
act (e.g. "President", "Manager"), and categories when any role of a kind may
(e.g. all "coaching_staff").
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.clubs.exceptions import (
    ClubOwnershipRequiredException,
    InsufficientPermissionsException,
    MembershipInactiveException,
    NotActiveMemberException,
    NotClubMemberException,
)
from gameplan.clubs.repository import ClubsRepository, MembershipRecord
from gameplan.clubs.roles import OWNER_ROLE
from gameplan.commons.logging import logger


@dataclass(frozen=True)
class ClubMembership:
    id: UUID
    club_id: UUID
    role: str | None = None
    category: str | None = None
    permissions: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    is_owner: bool = False


def role_allowed(membership: MembershipRecord, roles: Collection[str]) -> bool:
    return membership.role_name in roles


def category_allowed(membership: MembershipRecord, categories: Collection[str]) -> bool:
    return membership.category in categories


def permission_granted(membership: MembershipRecord, permission: str) -> bool:
    return membership.permissions.get(permission) is True


def granted_permissions(membership: MembershipRecord) -> list[str]:
    return sorted(name for name, granted in membership.permissions.items() if granted is True)


def _to_membership(record: MembershipRecord) -> ClubMembership:
    return ClubMembership(
        id=record.id,
        club_id=record.club_id,
        role=record.role_name,
        category=record.category,
        permissions=dict(record.permissions),
        is_active=record.is_active,
        is_owner=record.role_name == OWNER_ROLE and record.is_active,
    )


@dataclass(frozen=True)
class ClubAccessService:
    repo: ClubsRepository

    @classmethod
    def create(cls) -> "ClubAccessService":
        return cls(repo=ClubsRepository())

    async def _load_member(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        club_id: UUID,
        require_active: bool,
    ) -> MembershipRecord:
        record = await self.repo.get_membership(session, user_id=user_id, club_id=club_id)
        if record is None:
            raise NotClubMemberException("Not a member of this club")
        if require_active and not record.is_active:
            raise MembershipInactiveException("Club membership is inactive")
        return record

    async def check_role(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        club_id: UUID,
        roles: Collection[str],
        require_active: bool = True,
    ) -> ClubMembership:
        record = await self._load_member(
            session, user_id=user_id, club_id=club_id, require_active=require_active
        )
        if not role_allowed(record, roles):
            logger.info(
                "Role gate denied user %s in club %s (role %s)",
                user_id,
                club_id,
                record.role_name,
            )
            raise InsufficientPermissionsException(
                "Insufficient permissions",
                {"required": sorted(roles), "current": record.role_name},
            )
        return _to_membership(record)

    async def check_category(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        club_id: UUID,
        categories: Collection[str],
        require_active: bool = True,
    ) -> ClubMembership:
        record = await self._load_member(
            session, user_id=user_id, club_id=club_id, require_active=require_active
        )
        if not category_allowed(record, categories):
            logger.info(
                "Category gate denied user %s in club %s (category %s)",
                user_id,
                club_id,
                record.category,
            )
            raise InsufficientPermissionsException(
                "Insufficient permissions",
                {"required": sorted(categories), "current": record.category},
            )
        return _to_membership(record)

    async def check_permission(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        club_id: UUID,
        permission: str,
    ) -> ClubMembership:
        record = await self.repo.get_membership(
            session, user_id=user_id, club_id=club_id, active_only=True
        )
        if record is None:
            raise NotActiveMemberException("Not an active member of this club")
        if not permission_granted(record, permission):
            logger.info(
                "Permission gate denied user %s in club %s (%s)",
                user_id,
                club_id,
                permission,
            )
            raise InsufficientPermissionsException(
                "Insufficient permissions",
                {"required": permission, "available": granted_permissions(record)},
            )
        return _to_membership(record)

    async def check_ownership(
        self, session: AsyncSession, *, user_id: UUID, club_id: UUID
    ) -> ClubMembership:
        record = await self.repo.get_membership(
            session, user_id=user_id, club_id=club_id, active_only=True
        )
        if record is None or record.role_name != OWNER_ROLE:
            raise ClubOwnershipRequiredException("Club ownership required")
        return _to_membership(record)
