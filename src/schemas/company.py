"""Company, member, invitation and custom role Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.company import InvitationStatus, MemberRole, MembershipStatus


class CompanyCreate(BaseModel):
    """Schema for creating a new company."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1, max_length=255, description="Company name")


class CompanyUpdate(BaseModel):
    """Schema for updating company settings."""

    name: str = Field(..., min_length=1, max_length=255, description="Company name")


class CompanyResponse(BaseModel):
    """Schema for company API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Company unique identifier")
    name: str = Field(description="Company name")
    created_at: datetime = Field(description="Company creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    role: MemberRole | None = Field(default=None, description="Caller's role in the company, when listed for a user")


class MemberUser(BaseModel):
    """Embedded user info for company member response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="User id")
    email: str | None = Field(default=None, description="User email")
    first_name: str | None = Field(default=None, description="First name")
    last_name: str | None = Field(default=None, description="Last name")
    image_url: str | None = Field(default=None, description="Avatar URL")


class CompanyMemberResponse(BaseModel):
    """Schema for company member API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Membership record ID")
    company_id: UUID = Field(description="Company ID")
    user_id: str = Field(description="Member's user id")
    role: MemberRole = Field(description="Member's system role")
    custom_role_id: UUID | None = Field(default=None, description="Assigned custom role")
    status: MembershipStatus = Field(description="Membership status")
    joined_at: datetime | None = Field(default=None, description="When member joined")
    user: MemberUser | None = Field(default=None, description="Member's user information")


class MemberUpdate(BaseModel):
    """Schema for changing a member's role or custom role.

    Send ``custom_role_id: null`` explicitly to clear the custom role.
    """

    role: MemberRole | None = Field(default=None, description="New system role")
    custom_role_id: UUID | None = Field(default=None, description="Custom role to assign")


class InvitationCreate(BaseModel):
    """Schema for creating an invitation."""

    model_config = ConfigDict(from_attributes=True)

    email: EmailStr = Field(..., description="Email address to invite")
    role: MemberRole = Field(default=MemberRole.BOARD_MEMBER, description="Role granted on acceptance")
    custom_role_id: UUID | None = Field(default=None, description="Custom role granted on acceptance")


class InvitationResponse(BaseModel):
    """Schema for invitation API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Invitation unique identifier")
    company_id: UUID = Field(description="Company being invited to")
    email: str = Field(description="Invited email address")
    role: MemberRole = Field(description="Role granted on acceptance")
    custom_role_id: UUID | None = Field(default=None, description="Custom role granted on acceptance")
    invited_by: str = Field(description="User id of inviter")
    status: InvitationStatus = Field(description="Current invitation status")
    expires_at: datetime = Field(description="Invitation expiration timestamp")
    created_at: datetime = Field(description="Invitation creation timestamp")
    accepted_at: datetime | None = Field(default=None, description="When invitation was accepted")


class InvitationWithCompany(InvitationResponse):
    """Invitation response with company details."""

    company_name: str | None = Field(default=None, description="Name of the company")


class CustomRoleCreate(BaseModel):
    """Schema for creating a custom role."""

    name: str = Field(..., min_length=2, max_length=50, description="Role name, unique per company")
    description: str | None = Field(default=None, max_length=255, description="Role description")


class CustomRoleUpdate(BaseModel):
    """Schema for updating a custom role."""

    name: str | None = Field(default=None, min_length=2, max_length=50, description="Role name")
    description: str | None = Field(default=None, max_length=255, description="Role description")


class CustomRoleResponse(BaseModel):
    """Schema for custom role API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    name: str
    description: str | None = None
    member_count: int = Field(default=0, description="Members currently assigned this role")
