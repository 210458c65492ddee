"""
Core dependencies for authentication, the permission cache and route protection
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from staffdesk.config.settings import settings
from staffdesk.database.supabase_client import get_supabase
from staffdesk.modules.auth.service import AuthService
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.resolver import PermissionResolver
from staffdesk.modules.permissions.schemas import PermissionContext
from staffdesk.modules.permissions.store import SupabasePermissionStore
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def build_permission_cache(supabase: Optional[Client] = None) -> PermissionCache:
    """Wire store -> resolver -> cache from settings."""
    store = SupabasePermissionStore(supabase)
    resolver = PermissionResolver(store, timeout=settings.permission_query_timeout_seconds)
    return PermissionCache(
        resolver,
        ttl_seconds=settings.permission_cache_ttl_seconds,
        failure_ttl_seconds=settings.permission_cache_failure_ttl_seconds,
        max_entries=settings.permission_cache_max_entries,
    )


def get_permission_cache(request: Request) -> PermissionCache:
    """Process-wide cache created at startup (see main.py)."""
    cache = getattr(request.app.state, "permission_cache", None)
    if cache is None:
        cache = build_permission_cache()
        request.app.state.permission_cache = cache
    return cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict[str, Any]]:
    """User from the bearer token, or None when there is no valid session"""
    if credentials is None:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except HTTPException as e:
        if e.status_code == status.HTTP_401_UNAUTHORIZED:
            return None
        raise


def get_current_user(
    user_data: Optional[Dict[str, Any]] = Depends(get_optional_user)
) -> Dict[str, Any]:
    """Extract current user info from JWT token"""
    if user_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_data


def require_permission(required_permission: str):
    """Factory function to create permission check dependency.

    The organization comes from the route's org_id path parameter.
    """
    async def check_permission(
        org_id: str,
        user_data: Dict = Depends(get_current_user),
        cache: PermissionCache = Depends(get_permission_cache)
    ) -> dict:
        """Dependency to check if user has required permission in org_id"""
        context = PermissionContext(org_id=org_id)
        if not await cache.check(user_data["id"], required_permission, context):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission
