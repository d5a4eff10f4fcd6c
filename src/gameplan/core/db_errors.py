"""
Translation of database constraint violations into client-facing errors.

The driver exposes a SQLSTATE and structured diagnostics (constraint name,
column name) on every error; we classify on those. Human-readable message
text is never parsed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from sqlalchemy.exc import DBAPIError  # type: ignore[import-not-found]

from gameplan.commons.exceptions import BaseServiceBadRequestException


class ConstraintKind(enum.Enum):
    UNIQUE = "23505"
    FOREIGN_KEY = "23503"
    NOT_NULL = "23502"
    INVALID_FORMAT = "22P02"


# Named constraints from the schema, mapped to the API field they guard.
KNOWN_CONSTRAINTS: dict[str, str] = {
    "users_email_unique": "email",
    "users_pkey": "id",
    "user_sessions_pkey": "sessionId",
    "user_sessions_user_id_fkey": "userId",
    "club_members_user_id_fkey": "userId",
    "club_members_club_id_fkey": "clubId",
    "club_members_role_id_fkey": "roleId",
    "club_roles_name_unique": "name",
}


class DuplicateFieldException(BaseServiceBadRequestException):
    code = "DUPLICATE_FIELD"


class ForeignKeyViolationException(BaseServiceBadRequestException):
    code = "FOREIGN_KEY_VIOLATION"


class RequiredFieldMissingException(BaseServiceBadRequestException):
    code = "REQUIRED_FIELD_MISSING"


class InvalidDataFormatException(BaseServiceBadRequestException):
    code = "INVALID_DATA_FORMAT"


@dataclass(frozen=True)
class ConstraintViolation:
    kind: ConstraintKind
    constraint_name: str | None = None
    column_name: str | None = None

    @property
    def field(self) -> str | None:
        if self.constraint_name and self.constraint_name in KNOWN_CONSTRAINTS:
            return KNOWN_CONSTRAINTS[self.constraint_name]
        return self.column_name


def classify(exc: DBAPIError) -> ConstraintViolation | None:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if not sqlstate:
        return None
    try:
        kind = ConstraintKind(sqlstate)
    except ValueError:
        return None
    diag = getattr(orig, "diag", None)
    return ConstraintViolation(
        kind=kind,
        constraint_name=getattr(diag, "constraint_name", None),
        column_name=getattr(diag, "column_name", None),
    )


def translate(violation: ConstraintViolation) -> BaseServiceBadRequestException:
    field = violation.field
    if violation.kind is ConstraintKind.UNIQUE:
        return DuplicateFieldException(
            "Duplicate field value",
            {"field": field, "message": f"{field} already exists"} if field else None,
        )
    if violation.kind is ConstraintKind.FOREIGN_KEY:
        return ForeignKeyViolationException(
            "Referenced resource not found", {"field": field} if field else None
        )
    if violation.kind is ConstraintKind.NOT_NULL:
        return RequiredFieldMissingException(
            "Required field missing",
            {"field": field, "message": f"{field} is required"} if field else None,
        )
    return InvalidDataFormatException("Invalid data format")
