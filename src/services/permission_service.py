"""Permission resolution engine.

Every authorization decision in the application, HTTP and real-time, goes
through :class:`PermissionService`. Missing memberships and unknown codes are
silent denies; only ``verify_owner`` and the management operations raise.
"""

import asyncio
import logging
from typing import Any, ClassVar
from uuid import UUID

from src.api.middleware.error_handler import AuthorizationError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.company import MemberRole, MembershipStatus
from src.services.permission_constants import DEFAULT_ROLE_PERMISSIONS, EDITABLE_SYSTEM_ROLES

logger = logging.getLogger(__name__)


class PermissionService:
    """Service for resolving and managing per-company permissions."""

    # Single-flight guard for default grant initialization, keyed by company id.
    _init_locks: ClassVar[dict[str, asyncio.Lock]] = {}
    # Companies whose default grants this process has already ensured.
    _initialized: ClassVar[set[str]] = set()

    def __init__(self) -> None:
        """Initialize permission service with Supabase client."""
        self.client = get_supabase_client()

    # Membership lookups

    async def get_role(self, user_id: str, company_id: UUID | str) -> dict[str, Any] | None:
        """Get the caller's active membership in a company.

        Args:
            user_id: Identity provider subject.
            company_id: The company's UUID.

        Returns:
            dict | None: The ACTIVE membership row, or None.
        """
        response = (
            self.client.table("company_members")
            .select("*")
            .eq("user_id", user_id)
            .eq("company_id", str(company_id))
            .eq("status", MembershipStatus.ACTIVE.value)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def has_role(
        self,
        user_id: str,
        company_id: UUID | str,
        roles: list[MemberRole],
    ) -> bool:
        """Check whether the caller holds one of the given system roles."""
        membership = await self.get_role(user_id, company_id)
        if not membership:
            return False
        return membership["role"] in {r.value for r in roles}

    async def verify_owner(self, user_id: str, company_id: UUID | str) -> dict[str, Any]:
        """Require the caller to be the company owner.

        Returns:
            dict: The owner's membership row.

        Raises:
            AuthorizationError: If the caller is not an active OWNER.
        """
        membership = await self.get_role(user_id, company_id)
        if not membership or membership["role"] != MemberRole.OWNER.value:
            raise AuthorizationError("Only the company owner can perform this action")
        return membership

    # Resolution

    async def has_permission(self, user_id: str, company_id: UUID | str, code: str) -> bool:
        """Decide whether a user holds a permission in a company.

        Resolution order:
            1. No ACTIVE membership denies.
            2. OWNER allows without consulting grants.
            3. An unknown code denies.
            4. The custom-role grant, when present, decides; otherwise the
               system-role grant decides; no grant denies.

        Args:
            user_id: Identity provider subject.
            company_id: The company's UUID.
            code: Permission code such as ``meetings.edit``.

        Returns:
            bool: True if allowed.
        """
        membership = await self.get_role(user_id, company_id)
        if not membership:
            return False

        if membership["role"] == MemberRole.OWNER.value:
            return True

        permission = await self._get_permission(code)
        if not permission:
            logger.debug("Unknown permission code %s", code)
            return False

        await self.ensure_company_initialized(company_id)

        rows = (
            self.client.table("role_permissions")
            .select("*")
            .eq("company_id", str(company_id))
            .eq("permission_id", permission["id"])
            .execute()
        ).data or []

        return self._resolve_grant(membership, rows)

    async def has_any_permission(
        self,
        user_id: str,
        company_id: UUID | str,
        codes: list[str],
    ) -> bool:
        """Return True if the user holds at least one of the codes."""
        for code in codes:
            if await self.has_permission(user_id, company_id, code):
                return True
        return False

    async def get_user_permissions(self, user_id: str, company_id: UUID | str) -> list[str]:
        """List the permission codes a user holds in a company.

        Returns:
            list[str]: Full catalog for owners, granted codes otherwise, empty
            for non-members.
        """
        membership = await self.get_role(user_id, company_id)
        if not membership:
            return []

        catalog = await self._get_catalog()
        if membership["role"] == MemberRole.OWNER.value:
            return [p["code"] for p in catalog]

        await self.ensure_company_initialized(company_id)

        rows = (
            self.client.table("role_permissions")
            .select("*")
            .eq("company_id", str(company_id))
            .execute()
        ).data or []

        by_permission: dict[str, list[dict[str, Any]]] = {}
        for row in rows:
            by_permission.setdefault(row["permission_id"], []).append(row)

        return [
            p["code"]
            for p in catalog
            if self._resolve_grant(membership, by_permission.get(p["id"], []))
        ]

    @staticmethod
    def _resolve_grant(membership: dict[str, Any], rows: list[dict[str, Any]]) -> bool:
        """Pick the grant that applies to a membership from one permission's rows."""
        custom_role_id = membership.get("custom_role_id")
        if custom_role_id:
            for row in rows:
                if row.get("custom_role_id") == custom_role_id:
                    return bool(row["granted"])

        for row in rows:
            if row.get("role") == membership["role"] and not row.get("custom_role_id"):
                return bool(row["granted"])

        return False

    # Initialization

    async def ensure_company_initialized(self, company_id: UUID | str) -> None:
        """Write any missing default system-role grants for a company.

        Runs once per company per process. Concurrent callers for the same
        company wait on one lock and then return once the first has finished;
        the lock is dropped afterwards. The write is an upsert that ignores
        existing keys: edited grants survive and concurrent processes cannot
        duplicate rows. Codes added to the catalog since the company was
        first seen get their default grants on the next run.
        """
        key = str(company_id)
        if key in self._initialized:
            return

        lock = self._init_locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._initialized:
                return

            catalog = await self._get_catalog()
            ids_by_code = {p["code"]: p["id"] for p in catalog}

            rows = []
            for role in EDITABLE_SYSTEM_ROLES:
                for code in DEFAULT_ROLE_PERMISSIONS[role]:
                    permission_id = ids_by_code.get(code)
                    if permission_id is None:
                        continue
                    rows.append(
                        {
                            "company_id": key,
                            "role": role.value,
                            "custom_role_id": None,
                            "permission_id": permission_id,
                            "granted": True,
                        }
                    )

            if not rows:
                logger.warning("Permission catalog is empty; company %s left uninitialized", key)
                return

            self.client.table("role_permissions").upsert(
                rows,
                on_conflict="company_id,role,permission_id",
                ignore_duplicates=True,
            ).execute()
            self._initialized.add(key)
            self._init_locks.pop(key, None)
            logger.info("Ensured %d default permission grants for company %s", len(rows), key)

    # Management

    async def get_company_permissions(self, company_id: UUID | str) -> dict[str, Any]:
        """Build the permission matrix for the management UI.

        Returns:
            dict: ``permissions`` (catalog), ``system_roles`` (role -> code ->
            granted) and ``custom_roles`` (list with their own code map).
        """
        await self.ensure_company_initialized(company_id)

        catalog = await self._get_catalog()
        codes_by_id = {p["id"]: p["code"] for p in catalog}

        rows = (
            self.client.table("role_permissions")
            .select("*")
            .eq("company_id", str(company_id))
            .execute()
        ).data or []

        custom_roles = (
            self.client.table("custom_roles")
            .select("*")
            .eq("company_id", str(company_id))
            .order("created_at")
            .execute()
        ).data or []

        system_roles: dict[str, dict[str, bool]] = {
            role.value: {p["code"]: False for p in catalog} for role in EDITABLE_SYSTEM_ROLES
        }
        custom_matrix: dict[str, dict[str, bool]] = {
            r["id"]: {p["code"]: False for p in catalog} for r in custom_roles
        }

        for row in rows:
            code = codes_by_id.get(row["permission_id"])
            if code is None:
                continue
            if row.get("custom_role_id"):
                if row["custom_role_id"] in custom_matrix:
                    custom_matrix[row["custom_role_id"]][code] = bool(row["granted"])
            elif row.get("role") in system_roles:
                system_roles[row["role"]][code] = bool(row["granted"])

        return {
            "permissions": catalog,
            "system_roles": system_roles,
            "custom_roles": [
                {
                    "id": r["id"],
                    "name": r["name"],
                    "description": r.get("description"),
                    "permissions": custom_matrix[r["id"]],
                }
                for r in custom_roles
            ],
        }

    async def update_role_permissions(
        self,
        company_id: UUID | str,
        permissions: dict[str, bool],
        role: MemberRole | None = None,
        custom_role_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """Set grants for one system role or one custom role.

        Unknown codes are skipped.

        Raises:
            ValidationError: If both or neither target is given, or the
                target is OWNER.
            NotFoundError: If the custom role is not in this company.
        """
        if (role is None) == (custom_role_id is None):
            raise ValidationError("Specify exactly one of role or custom_role_id")

        if role == MemberRole.OWNER:
            raise ValidationError("OWNER permissions cannot be modified")

        if custom_role_id is not None:
            custom_role = (
                self.client.table("custom_roles")
                .select("id")
                .eq("id", str(custom_role_id))
                .eq("company_id", str(company_id))
                .maybe_single()
                .execute()
            )
            if not custom_role or not custom_role.data:
                raise NotFoundError("Custom role not found")

        await self.ensure_company_initialized(company_id)

        catalog = await self._get_catalog()
        ids_by_code = {p["code"]: p["id"] for p in catalog}

        rows = []
        for code, granted in permissions.items():
            permission_id = ids_by_code.get(code)
            if permission_id is None:
                logger.debug("Skipping unknown permission code %s", code)
                continue
            rows.append(
                {
                    "company_id": str(company_id),
                    "role": role.value if role else None,
                    "custom_role_id": str(custom_role_id) if custom_role_id else None,
                    "permission_id": permission_id,
                    "granted": granted,
                }
            )

        if rows:
            conflict = "company_id,role,permission_id" if role else "company_id,custom_role_id,permission_id"
            self.client.table("role_permissions").upsert(rows, on_conflict=conflict).execute()

        return await self.get_company_permissions(company_id)

    # Catalog

    async def _get_permission(self, code: str) -> dict[str, Any] | None:
        response = (
            self.client.table("permissions")
            .select("*")
            .eq("code", code)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def _get_catalog(self) -> list[dict[str, Any]]:
        response = self.client.table("permissions").select("*").order("code").execute()
        return response.data or []
