from fastapi import APIRouter, Depends, HTTPException, status
from staffdesk.config.settings import settings
from staffdesk.database.supabase_client import get_service_supabase
from staffdesk.modules.onboarding.schemas import (
    BootstrapResponse, ContextSelect, ContextResponse, Membership
)
from staffdesk.modules.onboarding.service import OnboardingService
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.schemas import PermissionContext
from staffdesk.core.dependencies import get_current_user, get_permission_cache
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["onboarding"])


def get_onboarding_service(supabase: Client = Depends(get_service_supabase)) -> OnboardingService:
    return OnboardingService(supabase)


@router.post("/admin/bootstrap", response_model=BootstrapResponse)
async def bootstrap(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Onboard the caller into the configured organization and location with the admin role.

    Idempotent. The caller's cached permissions are dropped so the new role
    applies on the next check.
    """
    result = service.bootstrap(
        user_data["id"],
        settings.bootstrap_org_id,
        settings.bootstrap_location_id,
        settings.bootstrap_role_code,
    )
    cache.invalidate_user(user_data["id"], settings.bootstrap_org_id)
    result.memberships = [
        m for m in service.list_memberships(user_data["id"]) if m.org_id == settings.bootstrap_org_id
    ]
    return result


@router.get("/context", response_model=List[Membership])
async def list_contexts(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Organizations and locations the caller can select"""
    return service.list_memberships(user_data["id"])


@router.post("/context", response_model=ContextResponse)
async def select_context(
    body: ContextSelect,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Select the active organization and location.

    The caller must be a member of that location. The response carries the
    effective permissions for the selected context.
    """
    if not service.is_member(user_data["id"], body.org_id, body.location_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not authorized for this org/location combination"
        )
    context = PermissionContext(org_id=body.org_id, location_id=body.location_id)
    permissions = await cache.get_permissions(user_data["id"], context)
    return ContextResponse(
        user_id=user_data["id"],
        org_id=body.org_id,
        location_id=body.location_id,
        permissions=sorted(permissions)
    )
