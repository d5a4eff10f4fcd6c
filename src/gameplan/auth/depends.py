from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request  # type: ignore[import-not-found]
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from gameplan.auth.service import AuthenticatedUser, AuthService, ClientInfo
from gameplan.commons.depends import database_session
from gameplan.commons.exceptions import BaseServiceException
from gameplan.commons.ratelimit import ClientRateLimiter, UserRateLimiter
from gameplan.core.settings import settings

_bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_service() -> AuthService:
    return AuthService.create()


@lru_cache
def get_rate_limiter() -> UserRateLimiter:
    return UserRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_s=settings.RATE_LIMIT_WINDOW_S,
        max_users=settings.RATE_LIMIT_MAX_USERS,
    )


@lru_cache
def get_client_rate_limiter() -> ClientRateLimiter:
    return ClientRateLimiter(
        max_requests=settings.CLIENT_RATE_LIMIT_MAX_REQUESTS,
        window_s=settings.CLIENT_RATE_LIMIT_WINDOW_S,
        max_users=settings.CLIENT_RATE_LIMIT_MAX_CLIENTS,
    )


def client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None


async def current_user_required(
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
) -> AuthenticatedUser:
    identity = await svc.authenticate(
        session,
        token=_bearer_token(credentials),
        session_id=request.headers.get(settings.SESSION_HEADER),
    )
    request.state.user = identity
    return identity


async def current_user_optional(
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
) -> AuthenticatedUser | None:
    # Same checks as current_user_required, but any failure means "anonymous".
    token = _bearer_token(credentials)
    if not token:
        return None
    try:
        identity = await svc.authenticate(
            session,
            token=token,
            session_id=request.headers.get(settings.SESSION_HEADER),
        )
    except BaseServiceException:
        return None
    request.state.user = identity
    return identity


async def rate_limited_user(
    user: Annotated[AuthenticatedUser, Depends(current_user_required)],
    limiter: Annotated[UserRateLimiter, Depends(get_rate_limiter)],
) -> AuthenticatedUser:
    limiter.hit(str(user.user_id))
    return user


async def rate_limited_client(
    request: Request,
    limiter: Annotated[ClientRateLimiter, Depends(get_client_rate_limiter)],
) -> None:
    limiter.hit(client_info(request).ip_address or "unknown")
