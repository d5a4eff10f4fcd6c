from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated
from uuid import UUID

from pydantic import (  # type: ignore[import-not-found]
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel  # type: ignore[import-not-found]

# At least one lower, upper, digit and special character; min length checked separately.
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]"
)
PASSWORD_MIN_LENGTH = 8
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")

PersonName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)
]
CountryCode = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=3)
]


def check_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError("Password must be at least 8 characters long")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase "
            "letter, one number, and one special character"
        )
    return value


def check_phone(value: str | None) -> str | None:
    if value is None:
        return None
    compact = re.sub(r"[\s\-()]", "", value)
    if not PHONE_PATTERN.match(compact):
        raise ValueError("Please provide a valid phone number")
    return compact


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    first_name: PersonName
    last_name: PersonName
    email: EmailStr
    password: str = Field(max_length=256)
    birth_date: date
    country: CountryCode
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("phone")
    @classmethod
    def _valid_phone(cls, v: str | None) -> str | None:
        return check_phone(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UpdateProfileRequest(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    phone: str | None = None
    birth_date: date | None = None
    country: CountryCode | None = None

    @field_validator("phone")
    @classmethod
    def _valid_phone(cls, v: str | None) -> str | None:
        return check_phone(v)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1, max_length=256)
    new_password: str = Field(max_length=256)
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordRequest":
        if self.confirm_password != self.new_password:
            raise ValueError("Password confirmation does not match")
        return self


class UserPublic(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    birth_date: date
    country: str
    phone: str | None = None
    profile_picture_url: str | None = None
    is_email_verified: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserProfile(UserPublic):
    club_memberships: int = 0


class AuthData(CamelModel):
    user: UserPublic
    token: str
    session_id: UUID


class TokenData(CamelModel):
    token: str


class UserData(CamelModel):
    user: UserPublic


class ProfileData(CamelModel):
    user: UserProfile


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    data: AuthData


class TokenResponse(CamelModel):
    success: bool = True
    message: str
    data: TokenData


class UserResponse(CamelModel):
    success: bool = True
    message: str | None = None
    data: UserData


class ProfileResponse(CamelModel):
    success: bool = True
    data: ProfileData


class MessageResponse(CamelModel):
    success: bool = True
    message: str
