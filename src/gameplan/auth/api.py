from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]
from starlette import status  # type: ignore[import-not-found]

from gameplan.auth.depends import (
    client_info,
    get_auth_service,
    rate_limited_client,
    rate_limited_user,
)
from gameplan.auth.models import User
from gameplan.auth.schemas import (
    AuthData,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileData,
    ProfileResponse,
    RegisterRequest,
    TokenData,
    TokenResponse,
    UpdateProfileRequest,
    UserData,
    UserProfile,
    UserPublic,
    UserResponse,
)
from gameplan.auth.service import AuthenticatedUser, AuthResult, AuthService
from gameplan.commons.depends import database_session

router = APIRouter(prefix="/auth", tags=["auth"])


def _to_user_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        birth_date=user.birth_date,
        country=user.country,
        phone=user.phone,
        profile_picture_url=user.profile_picture_url,
        is_email_verified=bool(user.is_email_verified),
        last_login=user.last_login_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(
            user=_to_user_public(result.user),
            token=result.token,
            session_id=result.session_id,
        ),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited_client)],
)
async def register(
    req: RegisterRequest,
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    result = await svc.register(
        session,
        first_name=req.first_name,
        last_name=req.last_name,
        email=str(req.email),
        password=req.password,
        birth_date=req.birth_date,
        country=req.country,
        phone=req.phone,
        client=client_info(request),
    )
    return _auth_response("User registered successfully", result)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limited_client)],
)
async def login(
    req: LoginRequest,
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    result = await svc.login(
        session,
        email=str(req.email),
        password=req.password,
        remember_me=req.remember_me,
        client=client_info(request),
    )
    return _auth_response("Login successful", result)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[AuthenticatedUser, Depends(rate_limited_user)],
) -> MessageResponse:
    await svc.logout(session, identity=user)
    return MessageResponse(message="Logged out successfully")


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    svc: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[AuthenticatedUser, Depends(rate_limited_user)],
) -> TokenResponse:
    return TokenResponse(
        message="Token refreshed successfully",
        data=TokenData(token=svc.refresh(identity=user)),
    )


@router.get("/me", response_model=ProfileResponse)
async def me(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[AuthenticatedUser, Depends(rate_limited_user)],
) -> ProfileResponse:
    profile, memberships = await svc.get_profile(session, identity=user)
    return ProfileResponse(
        data=ProfileData(
            user=UserProfile(
                **_to_user_public(profile).model_dump(),
                club_memberships=memberships,
            )
        )
    )


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    req: UpdateProfileRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[AuthenticatedUser, Depends(rate_limited_user)],
) -> UserResponse:
    values = req.model_dump(exclude_unset=True, exclude_none=True)
    updated = await svc.update_profile(session, identity=user, values=values)
    return UserResponse(
        message="Profile updated successfully",
        data=UserData(user=_to_user_public(updated)),
    )


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    req: ChangePasswordRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[AuthenticatedUser, Depends(rate_limited_user)],
) -> MessageResponse:
    await svc.change_password(
        session,
        identity=user,
        current_password=req.current_password,
        new_password=req.new_password,
    )
    return MessageResponse(message="Password changed successfully")
