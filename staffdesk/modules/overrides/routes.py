from fastapi import APIRouter, Depends, HTTPException, status
from staffdesk.database.supabase_client import get_service_supabase
from staffdesk.modules.overrides.schemas import OverrideSet, OverrideResponse
from staffdesk.modules.overrides.service import OverrideService
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.codes import normalize_code
from staffdesk.modules.permissions.exceptions import InvalidPermissionCode
from staffdesk.core.dependencies import require_permission, get_permission_cache
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/orgs/{org_id}/users/{user_id}/overrides", tags=["overrides"])


def get_override_service(supabase: Client = Depends(get_service_supabase)) -> OverrideService:
    return OverrideService(supabase)


def _canonical(permission_code: str) -> str:
    try:
        return normalize_code(permission_code)
    except InvalidPermissionCode as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("", response_model=List[OverrideResponse])
async def list_overrides(
    org_id: str,
    user_id: str,
    user_data: Dict = Depends(require_permission("users:view")),
    service: OverrideService = Depends(get_override_service)
):
    """List permission overrides of a user"""
    return service.list_overrides(org_id, user_id)


@router.put("/{permission_code}", response_model=OverrideResponse)
async def set_override(
    org_id: str,
    user_id: str,
    permission_code: str,
    body: OverrideSet,
    user_data: Dict = Depends(require_permission("users:manage")),
    service: OverrideService = Depends(get_override_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Grant (allow=true) or revoke (allow=false) one permission regardless of roles"""
    result = service.set_override(org_id, user_id, _canonical(permission_code), body.allow)
    cache.invalidate_user(user_id, org_id)
    return result


@router.delete("/{permission_code}", status_code=204)
async def delete_override(
    org_id: str,
    user_id: str,
    permission_code: str,
    user_data: Dict = Depends(require_permission("users:manage")),
    service: OverrideService = Depends(get_override_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Remove an override so the user's roles decide again"""
    service.delete_override(org_id, user_id, _canonical(permission_code))
    cache.invalidate_user(user_id, org_id)
    return None
