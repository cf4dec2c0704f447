"""FastAPI dependency injection functions."""

from typing import Annotated, Any, Awaitable, Callable
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.api.middleware.error_handler import AuthorizationError
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier
from src.schemas.auth import UserContext
from src.services.permission_service import PermissionService
from src.services.user_service import UserService


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    This dependency requires a valid JWT token in the Authorization header.
    A user row is provisioned on first sight if the identity webhook has not
    created it yet.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Extract the token from "Bearer <token>" format
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = parts[1]

    try:
        payload = decode_jwt(token)
    except AuthError as e:
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = payload.to_user_context()
    await UserService().ensure_user(user.user_id, user.email)
    return user


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def get_room_notifier(request: Request) -> RoomNotifier:
    """The live-meeting gateway, or a no-op when real-time is not mounted."""
    gateway = getattr(request.app.state, "gateway", None)
    return gateway if gateway is not None else NoopRoomNotifier()


Notifier = Annotated[RoomNotifier, Depends(get_room_notifier)]


# Company authorization


def require_permission(*codes: str) -> Callable[..., Awaitable[UserContext]]:
    """Build a dependency that allows callers holding any of ``codes``.

    The company comes from the ``company_id`` path parameter. Non-members and
    members without the permission both get 403.

    Example:
        ``user: Annotated[UserContext, Depends(require_permission("meetings.edit"))]``
    """

    async def dependency(company_id: UUID, user: CurrentUser) -> UserContext:
        allowed = await PermissionService().has_any_permission(user.user_id, company_id, list(codes))
        if not allowed:
            raise AuthorizationError(f"Missing permission: {' or '.join(codes)}")
        return user

    return dependency


async def require_owner(company_id: UUID, user: CurrentUser) -> UserContext:
    """Allow only the company's OWNER."""
    await PermissionService().verify_owner(user.user_id, company_id)
    return user


async def require_member(company_id: UUID, user: CurrentUser) -> dict[str, Any]:
    """Allow any active member and return their membership row."""
    membership = await PermissionService().get_role(user.user_id, company_id)
    if not membership:
        raise AuthorizationError("You are not a member of this company")
    return membership


OwnerUser = Annotated[UserContext, Depends(require_owner)]
Membership = Annotated[dict[str, Any], Depends(require_member)]
