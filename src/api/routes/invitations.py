"""Invitation API routes for accepting/declining invitations."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from src.api.deps import CurrentUser
from src.schemas.company import InvitationResponse, InvitationWithCompany
from src.services.invitation_service import InvitationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get(
    "",
    response_model=list[InvitationWithCompany],
    summary="List my invitations",
    description="Returns all pending invitations for the authenticated user's email.",
)
async def list_my_invitations(user: CurrentUser) -> list[InvitationWithCompany]:
    """List all pending invitations for the current user.

    Args:
        user: The authenticated user context.

    Returns:
        list[InvitationWithCompany]: Pending invitations with company names.
    """
    if not user.email:
        return []

    invitations = await InvitationService().list_user_invitations(user.email)
    return [InvitationWithCompany(**inv) for inv in invitations]


@router.post(
    "/{invitation_id}/accept",
    response_model=InvitationResponse,
    summary="Accept invitation",
    description="Accepts an invitation and joins the company.",
)
async def accept_invitation(
    invitation_id: UUID,
    user: CurrentUser,
) -> InvitationResponse:
    """Accept an invitation to join a company.

    Args:
        invitation_id: The invitation's UUID.
        user: The authenticated user context.

    Returns:
        InvitationResponse: The updated invitation.

    Raises:
        HTTPException: 400 if the token carries no email.
    """
    if not user.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email address required to accept invitation",
        )

    invitation = await InvitationService().accept_invitation(invitation_id, user.user_id, user.email)
    return InvitationResponse(**invitation)


@router.post(
    "/{invitation_id}/decline",
    response_model=InvitationResponse,
    summary="Decline invitation",
    description="Declines an invitation.",
)
async def decline_invitation(
    invitation_id: UUID,
    user: CurrentUser,
) -> InvitationResponse:
    """Decline an invitation to join a company.

    Args:
        invitation_id: The invitation's UUID.
        user: The authenticated user context.

    Returns:
        InvitationResponse: The updated invitation.
    """
    if not user.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email address required to decline invitation",
        )

    invitation = await InvitationService().decline_invitation(invitation_id, user.email)
    return InvitationResponse(**invitation)
