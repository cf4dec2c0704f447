"""Permission management Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.company import MemberRole


class PermissionResponse(BaseModel):
    """A permission catalog entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str = Field(description="Permission code, e.g. meetings.edit")
    area: str
    action: str
    description: str | None = None


class CustomRolePermissions(BaseModel):
    """Grant map of one custom role."""

    id: UUID
    name: str
    description: str | None = None
    permissions: dict[str, bool] = Field(default_factory=dict)


class CompanyPermissionsResponse(BaseModel):
    """Full permission matrix for a company."""

    permissions: list[PermissionResponse]
    system_roles: dict[str, dict[str, bool]] = Field(description="Role -> code -> granted")
    custom_roles: list[CustomRolePermissions]


class RolePermissionsUpdate(BaseModel):
    """Grants to apply to exactly one system role or custom role."""

    role: MemberRole | None = Field(default=None, description="System role to edit")
    custom_role_id: UUID | None = Field(default=None, description="Custom role to edit")
    permissions: dict[str, bool] = Field(..., description="Code -> granted")


class MyPermissionsResponse(BaseModel):
    """The caller's effective permissions in a company."""

    company_id: UUID
    role: MemberRole | None = None
    custom_role_id: UUID | None = None
    permissions: list[str] = Field(default_factory=list)
