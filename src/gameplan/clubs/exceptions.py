from __future__ import annotations

from gameplan.commons.exceptions import (
    BaseServiceBadRequestException,
    BaseServiceForbiddenException,
)


class ClubIdRequiredException(BaseServiceBadRequestException):
    code = "CLUB_ID_REQUIRED"


class NotClubMemberException(BaseServiceForbiddenException):
    code = "NOT_CLUB_MEMBER"


class NotActiveMemberException(BaseServiceForbiddenException):
    code = "NOT_ACTIVE_MEMBER"


class MembershipInactiveException(BaseServiceForbiddenException):
    code = "MEMBERSHIP_INACTIVE"


class InsufficientPermissionsException(BaseServiceForbiddenException):
    code = "INSUFFICIENT_PERMISSIONS"


class ClubOwnershipRequiredException(BaseServiceForbiddenException):
    code = "CLUB_OWNERSHIP_REQUIRED"
