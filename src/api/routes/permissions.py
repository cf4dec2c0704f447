"""Permission matrix and custom role API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import CurrentUser, OwnerUser
from src.schemas.company import CustomRoleCreate, CustomRoleResponse, CustomRoleUpdate
from src.schemas.permission import (
    CompanyPermissionsResponse,
    MyPermissionsResponse,
    RolePermissionsUpdate,
)
from src.services.custom_role_service import CustomRoleService
from src.services.permission_service import PermissionService

router = APIRouter(prefix="/companies/{company_id}", tags=["permissions"])


@router.get(
    "/permissions",
    response_model=CompanyPermissionsResponse,
    summary="Get permission matrix",
    description="Returns the permission catalog and every role's grants. Owner only.",
)
async def get_company_permissions(company_id: UUID, user: OwnerUser) -> CompanyPermissionsResponse:
    """Get the company's permission matrix."""
    matrix = await PermissionService().get_company_permissions(company_id)
    return CompanyPermissionsResponse(**matrix)


@router.put(
    "/permissions",
    response_model=CompanyPermissionsResponse,
    summary="Update role permissions",
    description="Sets grants for one system role or one custom role. Owner only.",
)
async def update_company_permissions(
    company_id: UUID,
    data: RolePermissionsUpdate,
    user: OwnerUser,
) -> CompanyPermissionsResponse:
    """Update grants for a role and return the new matrix."""
    matrix = await PermissionService().update_role_permissions(
        company_id,
        data.permissions,
        role=data.role,
        custom_role_id=data.custom_role_id,
    )
    return CompanyPermissionsResponse(**matrix)


@router.get(
    "/my-permissions",
    response_model=MyPermissionsResponse,
    summary="Get my permissions",
    description="Returns the caller's effective permission codes. Empty for non-members.",
)
async def get_my_permissions(company_id: UUID, user: CurrentUser) -> MyPermissionsResponse:
    """List the caller's effective permissions in a company."""
    service = PermissionService()
    membership = await service.get_role(user.user_id, company_id)
    codes = await service.get_user_permissions(user.user_id, company_id)
    return MyPermissionsResponse(
        company_id=company_id,
        role=membership["role"] if membership else None,
        custom_role_id=membership.get("custom_role_id") if membership else None,
        permissions=codes,
    )


# Custom roles


@router.get(
    "/custom-roles",
    response_model=list[CustomRoleResponse],
    summary="List custom roles",
)
async def list_custom_roles(company_id: UUID, user: OwnerUser) -> list[CustomRoleResponse]:
    """List custom roles with member counts."""
    roles = await CustomRoleService().list_roles(company_id)
    return [CustomRoleResponse(**r) for r in roles]


@router.post(
    "/custom-roles",
    response_model=CustomRoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create custom role",
    description="Creates a custom role. A company may hold at most five.",
)
async def create_custom_role(
    company_id: UUID,
    data: CustomRoleCreate,
    user: OwnerUser,
) -> CustomRoleResponse:
    """Create a custom role."""
    role = await CustomRoleService().create_role(company_id, data)
    return CustomRoleResponse(**role)


@router.put(
    "/custom-roles/{role_id}",
    response_model=CustomRoleResponse,
    summary="Update custom role",
)
async def update_custom_role(
    company_id: UUID,
    role_id: UUID,
    data: CustomRoleUpdate,
    user: OwnerUser,
) -> CustomRoleResponse:
    """Rename or re-describe a custom role."""
    role = await CustomRoleService().update_role(company_id, role_id, data)
    return CustomRoleResponse(**role)


@router.delete(
    "/custom-roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete custom role",
    description="Deletes a custom role. Fails while any member holds it.",
)
async def delete_custom_role(company_id: UUID, role_id: UUID, user: OwnerUser) -> None:
    """Delete a custom role."""
    await CustomRoleService().delete_role(company_id, role_id)
