from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from staffdesk.config.permissions_config import get_permission_matrix
from staffdesk.core.dependencies import get_current_user, get_optional_user, get_permission_cache
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.codes import WILDCARD, module_wildcard, normalize_code
from staffdesk.modules.permissions.exceptions import InvalidPermissionCode
from staffdesk.modules.permissions.schemas import (
    EffectivePermissionsResponse,
    PermissionCatalogResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionContext,
)
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/permissions", tags=["permissions"])


def _covered_denials(permissions) -> Optional[List[str]]:
    """Denied codes that a held wildcard would otherwise grant, for client-side matching."""
    denied = getattr(permissions, "denied", frozenset())
    covered = sorted(
        code for code in denied
        if code != WILDCARD and (WILDCARD in permissions or module_wildcard(code) in permissions)
    )
    return covered or None


@router.get("", response_model=EffectivePermissionsResponse, response_model_exclude_none=True)
async def get_effective_permissions(
    org_id: Optional[str] = Query(None, alias="orgId"),
    location_id: Optional[str] = Query(None, alias="locationId"),
    user_data: Optional[Dict] = Depends(get_optional_user),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Effective permission codes of the caller in an organization (and optional location).

    Unauthenticated callers get 401 with an empty body. Any failure past
    authentication yields an empty list so the client can hide actions
    instead of erroring.
    """
    if user_data is None:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)
    if not org_id:
        return EffectivePermissionsResponse(permissions=[])
    try:
        context = PermissionContext(org_id=org_id, location_id=location_id or None)
        permissions = await cache.get_permissions(user_data["id"], context)
    except Exception:
        logger.exception("Failed to load permissions for user %s in org %s", user_data.get("id"), org_id)
        permissions = frozenset()
    return EffectivePermissionsResponse(
        permissions=sorted(permissions),
        denied=_covered_denials(permissions),
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permissions(
    body: PermissionCheckRequest,
    user_data: Dict = Depends(get_current_user),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Evaluate several permission codes at once. Results are keyed by the codes as sent."""
    try:
        canonical = {code: normalize_code(code) for code in body.codes}
    except InvalidPermissionCode as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    context = PermissionContext(org_id=body.org_id or None, location_id=body.location_id or None)
    results = await cache.check_many(user_data["id"], set(canonical.values()), context)
    return PermissionCheckResponse(results={code: results[c] for code, c in canonical.items()})


@router.get("/catalog", response_model=PermissionCatalogResponse)
async def get_catalog(user_data: Dict = Depends(get_current_user)):
    """Static permission catalog and role templates"""
    return get_permission_matrix()
