"""Company, member and invitation API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import CurrentUser, require_permission
from src.api.middleware.error_handler import NotFoundError
from src.models.company import InvitationStatus
from src.schemas.auth import UserContext
from src.schemas.company import (
    CompanyCreate,
    CompanyMemberResponse,
    CompanyResponse,
    CompanyUpdate,
    InvitationCreate,
    InvitationResponse,
    MemberUpdate,
)
from src.services.company_service import CompanyService
from src.services.email_service import EmailService
from src.services.invitation_service import InvitationService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
    description="Creates a new company with the authenticated user as owner.",
)
async def create_company(
    data: CompanyCreate,
    user: CurrentUser,
) -> CompanyResponse:
    """Create a new company.

    The authenticated user becomes the OWNER and first member.

    Args:
        data: Company creation data.
        user: The authenticated user context.

    Returns:
        CompanyResponse: The created company.
    """
    service = CompanyService()
    company = await service.create_company(data, user.user_id)
    return CompanyResponse(**company, role="OWNER")


@router.get(
    "",
    response_model=list[CompanyResponse],
    summary="List my companies",
    description="Returns every company the authenticated user is an active member of.",
)
async def list_my_companies(user: CurrentUser) -> list[CompanyResponse]:
    """List the caller's companies with their role in each."""
    service = CompanyService()
    return [CompanyResponse(**c) for c in await service.list_user_companies(user.user_id)]


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Get company details",
    description="Returns company details. Requires members.view.",
)
async def get_company(
    company_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("members.view"))],
) -> CompanyResponse:
    """Get company details.

    Args:
        company_id: The company's UUID.
        user: The authorized user context.

    Returns:
        CompanyResponse: The company details.

    Raises:
        NotFoundError: If the company does not exist.
    """
    company = await CompanyService().get_company(company_id)
    if not company:
        raise NotFoundError("Company not found")
    return CompanyResponse(**company)


@router.put(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Update company settings",
)
async def update_company(
    company_id: UUID,
    data: CompanyUpdate,
    user: Annotated[UserContext, Depends(require_permission("company.edit_settings"))],
) -> CompanyResponse:
    """Rename a company."""
    company = await CompanyService().update_company(company_id, data)
    return CompanyResponse(**company)


@router.get(
    "/{company_id}/members",
    response_model=list[CompanyMemberResponse],
    summary="List company members",
    description="Returns active members of a company. Requires members.view.",
)
async def list_company_members(
    company_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("members.view"))],
    include_former: bool = False,
) -> list[CompanyMemberResponse]:
    """List members of a company.

    Args:
        company_id: The company's UUID.
        user: The authorized user context.
        include_former: Also list FORMER members.

    Returns:
        list[CompanyMemberResponse]: Members with their user records.
    """
    members = await CompanyService().get_members(company_id, include_former=include_former)
    return [CompanyMemberResponse(**m) for m in members]


@router.put(
    "/{company_id}/members/{member_id}",
    response_model=CompanyMemberResponse,
    summary="Change member role",
    description="Changes a member's system role or custom role. Requires members.change_roles.",
)
async def update_company_member(
    company_id: UUID,
    member_id: UUID,
    data: MemberUpdate,
    user: Annotated[UserContext, Depends(require_permission("members.change_roles"))],
) -> CompanyMemberResponse:
    """Change a member's role."""
    member = await CompanyService().update_member(company_id, member_id, data, user.user_id)
    return CompanyMemberResponse(**member)


@router.delete(
    "/{company_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove company member",
    description="Marks a member FORMER. Requires members.remove.",
)
async def remove_company_member(
    company_id: UUID,
    member_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("members.remove"))],
) -> None:
    """Remove a member from a company.

    Args:
        company_id: The company's UUID.
        member_id: The membership id to remove.
        user: The authorized user context.
    """
    await CompanyService().remove_member(company_id, member_id, user.user_id)


# Invitation endpoints


@router.post(
    "/{company_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invitation",
    description="Invites a user by email to join the company. Requires members.invite.",
)
async def create_invitation(
    company_id: UUID,
    data: InvitationCreate,
    user: Annotated[UserContext, Depends(require_permission("members.invite"))],
) -> InvitationResponse:
    """Create an invitation and email it.

    Email delivery is best-effort; the invitation exists either way.

    Args:
        company_id: The company's UUID.
        data: Invitation data.
        user: The authorized user context.

    Returns:
        InvitationResponse: The created invitation.
    """
    invitation = await InvitationService().create_invitation(company_id, data, user.user_id)

    company = await CompanyService().get_company(company_id)
    await EmailService().send_invitation_email(
        to_email=invitation["email"],
        inviter_name=user.email or "A board member",
        company_name=company["name"] if company else "your company",
        invitation_id=invitation["id"],
    )

    return InvitationResponse(**invitation)


@router.get(
    "/{company_id}/invitations",
    response_model=list[InvitationResponse],
    summary="List company invitations",
    description="Returns invitations for a company. Requires members.view.",
)
async def list_invitations(
    company_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("members.view"))],
    invitation_status: InvitationStatus | None = None,
) -> list[InvitationResponse]:
    """List a company's invitations, newest first."""
    invitations = await InvitationService().list_company_invitations(company_id, invitation_status)
    return [InvitationResponse(**i) for i in invitations]
