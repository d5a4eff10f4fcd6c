"""
Common/base exceptions.

These are intended to be subclassed by feature-level exceptions in
`<feature>/exceptions.py`. Every concrete subclass sets a stable, machine-readable
`code`; the HTTP status follows from the base class it derives from.
"""

from typing import Any


class BaseServiceException(Exception):
    code: str = "BAD_REQUEST"
    status_code: int = 400

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class BaseServiceBadRequestException(BaseServiceException):
    pass


class BaseServiceUnauthorizedException(BaseServiceException):
    code = "UNAUTHORIZED"
    status_code = 401


class BaseServiceForbiddenException(BaseServiceException):
    code = "FORBIDDEN"
    status_code = 403


class BaseServiceNotFoundException(BaseServiceException):
    code = "NOT_FOUND"
    status_code = 404


class BaseServiceConflictException(BaseServiceException):
    code = "CONFLICT"
    status_code = 409


class BaseServiceUnProcessableException(BaseServiceException):
    code = "UNPROCESSABLE_ENTITY"
    status_code = 422


class BaseServiceTooManyRequestsException(BaseServiceException):
    code = "TOO_MANY_REQUESTS"
    status_code = 429


class BaseCoreException(Exception):
    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ValidationException(BaseServiceBadRequestException):
    code = "VALIDATION_ERROR"
