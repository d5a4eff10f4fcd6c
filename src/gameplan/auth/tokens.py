"""
Bearer token issuing and verification.

HS256 JWTs signed with the process-wide secret, carrying the user id (`sub`)
and email plus issuer, audience, issued-at and expiry claims. Verification is a
pure function of the token and the clock; it never consults the session store.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import jwt  # type: ignore[import-not-found]
from jwt import ExpiredSignatureError, InvalidTokenError  # type: ignore[import-not-found]

from gameplan.auth.exceptions import InvalidTokenException, TokenExpiredException
from gameplan.core.settings import settings


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass(frozen=True)
class TokenPayload:
    user_id: UUID
    email: str
    expires_at: dt.datetime


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: dt.datetime


@dataclass(frozen=True)
class TokenService:
    secret: str
    issuer: str
    audience: str
    algorithm: str = "HS256"
    expires_in: dt.timedelta = dt.timedelta(days=7)
    remember_me_expires_in: dt.timedelta = dt.timedelta(days=30)

    @classmethod
    def create(cls) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            algorithm=settings.JWT_ALGORITHM,
            expires_in=dt.timedelta(days=settings.JWT_EXPIRES_DAYS),
            remember_me_expires_in=dt.timedelta(days=settings.JWT_REMEMBER_ME_DAYS),
        )

    def issue(
        self,
        *,
        user_id: UUID,
        email: str,
        remember_me: bool = False,
        now: dt.datetime | None = None,
    ) -> IssuedToken:
        issued_at = now or _utcnow()
        ttl = self.remember_me_expires_in if remember_me else self.expires_in
        expires_at = issued_at + ttl
        body = {
            "sub": str(user_id),
            "email": email,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(body, self.secret, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "iss", "aud"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredException("Token expired") from exc
        except InvalidTokenError as exc:
            raise InvalidTokenException("Invalid token") from exc

        try:
            user_id = UUID(str(payload["sub"]))
        except ValueError as exc:
            raise InvalidTokenException("Invalid token") from exc
        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise InvalidTokenException("Invalid token")
        return TokenPayload(
            user_id=user_id,
            email=email,
            expires_at=dt.datetime.fromtimestamp(int(payload["exp"]), dt.UTC),
        )
