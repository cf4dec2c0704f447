"""Org chart API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import require_permission
from src.schemas.auth import UserContext
from src.schemas.org_role import OrgRoleCreate, OrgRoleResponse, OrgRoleUpdate, RolePositionsUpdate
from src.services.org_role_service import OrgRoleService

router = APIRouter(prefix="/companies/{company_id}/org-roles", tags=["org-chart"])

ViewUser = Annotated[UserContext, Depends(require_permission("team.view"))]
EditUser = Annotated[UserContext, Depends(require_permission("team.edit"))]


@router.get("", response_model=list[OrgRoleResponse], summary="List org chart roles")
async def list_roles(company_id: UUID, user: ViewUser) -> list[OrgRoleResponse]:
    roles = await OrgRoleService().list_roles(company_id)
    return [OrgRoleResponse(**r) for r in roles]


@router.post(
    "",
    response_model=OrgRoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create org chart role",
)
async def create_role(
    company_id: UUID,
    data: OrgRoleCreate,
    user: Annotated[UserContext, Depends(require_permission("team.create"))],
) -> OrgRoleResponse:
    role = await OrgRoleService().create_role(company_id, data)
    return OrgRoleResponse(**role)


@router.put("/positions", response_model=list[OrgRoleResponse], summary="Save org chart layout")
async def update_positions(
    company_id: UUID,
    data: RolePositionsUpdate,
    user: EditUser,
) -> list[OrgRoleResponse]:
    roles = await OrgRoleService().update_positions(company_id, data.positions)
    return [OrgRoleResponse(**r) for r in roles]


@router.get("/{role_id}", response_model=OrgRoleResponse, summary="Get org chart role")
async def get_role(company_id: UUID, role_id: UUID, user: ViewUser) -> OrgRoleResponse:
    role = await OrgRoleService().get_role(company_id, role_id)
    return OrgRoleResponse(**role)


@router.put(
    "/{role_id}",
    response_model=OrgRoleResponse,
    summary="Update org chart role",
    description="Rejects a parent that would create a cycle.",
)
async def update_role(company_id: UUID, role_id: UUID, data: OrgRoleUpdate, user: EditUser) -> OrgRoleResponse:
    role = await OrgRoleService().update_role(company_id, role_id, data)
    return OrgRoleResponse(**role)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete org chart role",
    description="Direct reports move up to the deleted role's parent.",
)
async def delete_role(
    company_id: UUID,
    role_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("team.delete"))],
) -> None:
    await OrgRoleService().delete_role(company_id, role_id)
