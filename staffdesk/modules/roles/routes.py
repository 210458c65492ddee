from fastapi import APIRouter, Depends, HTTPException, status
from staffdesk.database.supabase_client import get_service_supabase
from staffdesk.modules.roles.schemas import (
    RoleCreate, RoleResponse, RolePermissionsUpdate, RolePermissionsResponse,
    UserRoleAssign, UserRoleResponse
)
from staffdesk.modules.roles.service import RoleService
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.codes import normalize_codes
from staffdesk.modules.permissions.exceptions import InvalidPermissionCode
from staffdesk.core.dependencies import require_permission, get_permission_cache
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/orgs/{org_id}", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_service_supabase)) -> RoleService:
    return RoleService(supabase)


# Role endpoints
@router.get("/roles", response_model=List[RoleResponse])
async def list_roles(
    org_id: str,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("roles:view")),
    service: RoleService = Depends(get_role_service)
):
    """List roles of the organization"""
    return service.list_roles(org_id, limit=limit, offset=offset)


@router.post("/roles", response_model=RoleResponse, status_code=201)
async def create_role(
    org_id: str,
    role_data: RoleCreate,
    user_data: Dict = Depends(require_permission("roles:manage")),
    service: RoleService = Depends(get_role_service)
):
    """Create a new role"""
    return service.create_role(org_id, role_data)


@router.put("/roles/{role_id}/permissions", response_model=RolePermissionsResponse)
async def replace_role_permissions(
    org_id: str,
    role_id: str,
    body: RolePermissionsUpdate,
    user_data: Dict = Depends(require_permission("roles:manage")),
    service: RoleService = Depends(get_role_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Replace all permissions of a role. Every cached permission set is dropped."""
    try:
        codes = normalize_codes(body.permission_codes)
    except InvalidPermissionCode as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    result = service.replace_role_permissions(org_id, role_id, codes)
    cache.invalidate_all()
    return result


# User role assignment endpoints
@router.get("/users/{user_id}/roles", response_model=List[UserRoleResponse])
async def list_user_roles(
    org_id: str,
    user_id: str,
    user_data: Dict = Depends(require_permission("users:view")),
    service: RoleService = Depends(get_role_service)
):
    """Roles assigned to a user in the organization"""
    return service.list_user_roles(org_id, user_id)


@router.post("/users/{user_id}/roles", response_model=UserRoleResponse, status_code=201)
async def assign_role(
    org_id: str,
    user_id: str,
    assign: UserRoleAssign,
    user_data: Dict = Depends(require_permission("users:manage")),
    service: RoleService = Depends(get_role_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Assign a role to a user"""
    result = service.assign_role(org_id, user_id, assign)
    cache.invalidate_user(user_id, org_id)
    return result


@router.delete("/users/{user_id}/roles/{role_id}", status_code=204)
async def remove_role(
    org_id: str,
    user_id: str,
    role_id: str,
    user_data: Dict = Depends(require_permission("users:manage")),
    service: RoleService = Depends(get_role_service),
    cache: PermissionCache = Depends(get_permission_cache)
):
    """Remove a role from a user"""
    service.remove_role(org_id, user_id, role_id)
    cache.invalidate_user(user_id, org_id)
    return None
