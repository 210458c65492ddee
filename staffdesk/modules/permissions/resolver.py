"""Computes a user's effective permission set from role grants and overrides."""

import asyncio
import logging
from typing import FrozenSet, Iterable, Optional

from staffdesk.modules.permissions.codes import PermissionSet
from staffdesk.modules.permissions.exceptions import PermissionResolutionError
from staffdesk.modules.permissions.schemas import PermissionOverride, RoleGrant
from staffdesk.modules.permissions.store import PermissionStore

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 3.0


def compute_effective_permissions(
    grants: Iterable[RoleGrant],
    overrides: Iterable[PermissionOverride],
) -> FrozenSet[str]:
    """Union of role codes, then overrides applied as one final pass.

    Allows are added and denies removed after the union, so the result does
    not depend on row order. A code that is both allowed and denied is denied.
    Denied codes travel with the result so wildcard grants cannot cover them.
    """
    effective = set()
    for grant in grants:
        effective.update(grant.permission_codes)

    allowed = set()
    denied = set()
    for override in overrides:
        (allowed if override.allow else denied).add(override.permission_code)

    effective |= allowed
    effective -= denied
    return PermissionSet(effective, denied)


class PermissionResolver:
    def __init__(self, store: PermissionStore, timeout: float = DEFAULT_QUERY_TIMEOUT):
        self.store = store
        self.timeout = timeout

    async def _fetch(self, user_id: str, org_id: str, location_id: Optional[str]):
        return await asyncio.gather(
            asyncio.to_thread(self.store.fetch_role_permissions, user_id, org_id, location_id),
            asyncio.to_thread(self.store.fetch_overrides, user_id, org_id),
        )

    async def resolve(
        self, user_id: str, org_id: str, location_id: Optional[str] = None
    ) -> FrozenSet[str]:
        """Effective permission codes of user in org.

        Raises PermissionResolutionError when the store fails or does not answer
        within the timeout. An empty result is a normal outcome.
        """
        try:
            grants, overrides = await asyncio.wait_for(
                self._fetch(user_id, org_id, location_id), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise PermissionResolutionError(
                user_id, org_id, f"permission store timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            raise PermissionResolutionError(user_id, org_id, str(e)) from e

        permissions = compute_effective_permissions(grants, overrides)
        logger.debug(
            "Resolved %s permissions for user %s in org %s (%s roles, %s overrides)",
            len(permissions), user_id, org_id, len(grants), len(overrides),
        )
        return permissions
