"""Company, membership and invitation type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class MemberRole(str, Enum):
    """System roles a company member can hold."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    BOARD_MEMBER = "BOARD_MEMBER"
    OBSERVER = "OBSERVER"


class MembershipStatus(str, Enum):
    """Membership status values. Memberships are never hard-deleted."""

    ACTIVE = "ACTIVE"
    FORMER = "FORMER"


class InvitationStatus(str, Enum):
    """Invitation status values matching database enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Company(TypedDict):
    """Company table row representation."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime


class CompanyMember(TypedDict):
    """Company member table row representation.

    One row per (user_id, company_id). ``custom_role_id`` refines the
    permissions of a non-owner member.
    """

    id: str
    company_id: str
    user_id: str
    role: MemberRole
    custom_role_id: str | None
    status: MembershipStatus
    joined_at: datetime


class CustomRole(TypedDict):
    """Company-defined role row."""

    id: str
    company_id: str
    name: str
    description: str | None
    created_at: datetime


class Invitation(TypedDict):
    """Invitation table row representation.

    Represents an invitation to join a company.
    """

    id: str
    company_id: str
    email: str
    role: MemberRole
    custom_role_id: str | None
    invited_by: str
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime
    accepted_at: datetime | None
