"""Permission catalog and grant type definitions."""

from typing import TypedDict


class Permission(TypedDict):
    """Permission catalog row."""

    id: str
    code: str
    area: str
    action: str
    description: str


class RolePermission(TypedDict):
    """Grant of a permission to a system role or a custom role within a company.

    Exactly one of ``role`` and ``custom_role_id`` is set.
    """

    id: str
    company_id: str
    role: str | None
    custom_role_id: str | None
    permission_id: str
    granted: bool
