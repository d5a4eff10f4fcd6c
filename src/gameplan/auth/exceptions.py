from __future__ import annotations

from gameplan.commons.exceptions import (
    BaseServiceBadRequestException,
    BaseServiceConflictException,
    BaseServiceForbiddenException,
    BaseServiceNotFoundException,
    BaseServiceUnauthorizedException,
)


class TokenRequiredException(BaseServiceUnauthorizedException):
    code = "TOKEN_REQUIRED"


class InvalidTokenException(BaseServiceUnauthorizedException):
    code = "INVALID_TOKEN"


class TokenExpiredException(BaseServiceUnauthorizedException):
    code = "TOKEN_EXPIRED"


class UserNotFoundException(BaseServiceUnauthorizedException):
    code = "USER_NOT_FOUND"


class ProfileNotFoundException(BaseServiceNotFoundException):
    code = "USER_NOT_FOUND"


class AccountDeactivatedException(BaseServiceForbiddenException):
    code = "ACCOUNT_DEACTIVATED"


class SessionInvalidException(BaseServiceUnauthorizedException):
    code = "SESSION_INVALID"


class UserExistsException(BaseServiceConflictException):
    code = "USER_EXISTS"


class InvalidCredentialsException(BaseServiceUnauthorizedException):
    code = "INVALID_CREDENTIALS"


class InvalidCurrentPasswordException(BaseServiceUnauthorizedException):
    code = "INVALID_CURRENT_PASSWORD"


class NoUpdateFieldsException(BaseServiceBadRequestException):
    code = "NO_UPDATE_FIELDS"
