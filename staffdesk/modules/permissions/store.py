"""
Read side of the permission data: role grants and per-user overrides.

PermissionStore is the contract the resolver depends on. SupabasePermissionStore
implements it with two queries against the service-role client. Both methods are
synchronous (the Supabase client is); the resolver runs them in worker threads.
"""

import logging
from typing import List, Optional, Protocol

from supabase import Client

from staffdesk.database.supabase_client import get_service_supabase
from staffdesk.modules.permissions.codes import normalize_code
from staffdesk.modules.permissions.exceptions import InvalidPermissionCode
from staffdesk.modules.permissions.schemas import (
    OverrideRow,
    PermissionOverride,
    RoleGrant,
    UserRoleRow,
)

logger = logging.getLogger(__name__)

ROLE_GRANTS_SELECT = "role_id, location_id, roles(code, role_permissions(permissions(code)))"


class PermissionStore(Protocol):
    def fetch_role_permissions(
        self, user_id: str, org_id: str, location_id: Optional[str] = None
    ) -> List[RoleGrant]:
        """Role assignments of user in org, each expanded to its permission codes."""
        ...

    def fetch_overrides(self, user_id: str, org_id: str) -> List[PermissionOverride]:
        """Allow/deny override rows of user in org."""
        ...


def _canonical_or_none(raw: Optional[str], source: str) -> Optional[str]:
    if raw is None:
        return None
    try:
        return normalize_code(raw)
    except InvalidPermissionCode as e:
        logger.warning("Skipping %s row with invalid permission code: %s", source, e)
        return None


class SupabasePermissionStore:
    def __init__(self, supabase: Optional[Client] = None):
        self._supabase = supabase

    @property
    def supabase(self) -> Client:
        # Resolved on first query so the app can start before Supabase is configured.
        if self._supabase is None:
            self._supabase = get_service_supabase()
        return self._supabase

    def fetch_role_permissions(
        self, user_id: str, org_id: str, location_id: Optional[str] = None
    ) -> List[RoleGrant]:
        # location_id is accepted but not used as a filter: role assignments are
        # organization-wide. Add .eq("location_id", ...) here to scope them.
        result = self.supabase.table("user_roles")\
            .select(ROLE_GRANTS_SELECT)\
            .eq("user_id", user_id)\
            .eq("org_id", org_id)\
            .execute()

        grants = []
        for raw in result.data or []:
            row = UserRoleRow.model_validate(raw)
            codes = []
            if row.roles:
                for link in row.roles.role_permissions:
                    if link.permissions is None:
                        continue
                    code = _canonical_or_none(link.permissions.code, "role_permissions")
                    if code:
                        codes.append(code)
            grants.append(RoleGrant(
                role_id=row.role_id,
                role_code=row.roles.code if row.roles else None,
                location_id=row.location_id,
                permission_codes=codes,
            ))
        return grants

    def fetch_overrides(self, user_id: str, org_id: str) -> List[PermissionOverride]:
        result = self.supabase.table("user_permission_overrides")\
            .select("permission_code, allow")\
            .eq("user_id", user_id)\
            .eq("org_id", org_id)\
            .execute()

        overrides = []
        for raw in result.data or []:
            row = OverrideRow.model_validate(raw)
            code = _canonical_or_none(row.permission_code, "user_permission_overrides")
            if code is None or row.allow is None:
                continue
            overrides.append(PermissionOverride(permission_code=code, allow=row.allow))
        return overrides
