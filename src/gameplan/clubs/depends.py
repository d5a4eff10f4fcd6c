from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.auth.depends import current_user_required
from gameplan.auth.service import AuthenticatedUser
from gameplan.clubs.exceptions import ClubIdRequiredException
from gameplan.clubs.service import ClubAccessService, ClubMembership
from gameplan.commons.depends import database_session
from gameplan.commons.exceptions import ValidationException
from gameplan.commons.ids import parse_uuid

CLUB_ID_PATH_PARAMS = ("club_id", "clubId")
CLUB_ID_FIELD = "clubId"


@lru_cache
def get_club_access_service() -> ClubAccessService:
    return ClubAccessService.create()


async def _club_id_from_body(request: Request) -> str | None:
    if "json" not in request.headers.get("content-type", ""):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    value = body.get(CLUB_ID_FIELD)
    return str(value) if value else None


async def resolve_club_id(request: Request) -> UUID:
    """Target club from the path, then the JSON body, then the query string."""
    raw: str | None = None
    for name in CLUB_ID_PATH_PARAMS:
        if request.path_params.get(name):
            raw = str(request.path_params[name])
            break
    if raw is None:
        raw = await _club_id_from_body(request)
    if raw is None:
        raw = request.query_params.get(CLUB_ID_FIELD) or None
    if raw is None:
        raise ClubIdRequiredException("Club ID is required")

    club_id = parse_uuid(raw)
    if club_id is None:
        raise ValidationException(
            "Validation failed",
            {"errors": [{"field": CLUB_ID_FIELD, "message": "Club ID must be a UUID"}]},
        )
    return club_id


def require_role(*roles: str, require_active: bool = True):
    """Caller's role name must be one of `roles`.

    Usage:
        @router.put("/clubs/{club_id}", dependencies=[Depends(require_role(PRESIDENT, MANAGER))])
    """
    allowed = frozenset(roles)

    async def _dep(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(current_user_required)],
        club_id: Annotated[UUID, Depends(resolve_club_id)],
        session: Annotated[AsyncSession, Depends(database_session)],
        svc: Annotated[ClubAccessService, Depends(get_club_access_service)],
    ) -> ClubMembership:
        membership = await svc.check_role(
            session,
            user_id=user.user_id,
            club_id=club_id,
            roles=allowed,
            require_active=require_active,
        )
        request.state.club_membership = membership
        return membership

    return _dep


def require_role_category(*categories: str, require_active: bool = True):
    """Caller's role category must be one of `categories`."""
    allowed = frozenset(categories)

    async def _dep(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(current_user_required)],
        club_id: Annotated[UUID, Depends(resolve_club_id)],
        session: Annotated[AsyncSession, Depends(database_session)],
        svc: Annotated[ClubAccessService, Depends(get_club_access_service)],
    ) -> ClubMembership:
        membership = await svc.check_category(
            session,
            user_id=user.user_id,
            club_id=club_id,
            categories=allowed,
            require_active=require_active,
        )
        request.state.club_membership = membership
        return membership

    return _dep


def require_permission(permission: str):
    async def _dep(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(current_user_required)],
        club_id: Annotated[UUID, Depends(resolve_club_id)],
        session: Annotated[AsyncSession, Depends(database_session)],
        svc: Annotated[ClubAccessService, Depends(get_club_access_service)],
    ) -> ClubMembership:
        membership = await svc.check_permission(
            session, user_id=user.user_id, club_id=club_id, permission=permission
        )
        request.state.club_membership = membership
        return membership

    return _dep


def require_club_ownership():
    async def _dep(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(current_user_required)],
        club_id: Annotated[UUID, Depends(resolve_club_id)],
        session: Annotated[AsyncSession, Depends(database_session)],
        svc: Annotated[ClubAccessService, Depends(get_club_access_service)],
    ) -> ClubMembership:
        membership = await svc.check_ownership(
            session, user_id=user.user_id, club_id=club_id
        )
        request.state.club_membership = membership
        return membership

    return _dep
