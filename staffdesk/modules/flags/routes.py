from fastapi import APIRouter, Depends
from staffdesk.database.supabase_client import get_service_supabase
from staffdesk.modules.flags.schemas import FlagUpdate, FlagResponse
from staffdesk.modules.flags.service import FlagService
from staffdesk.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/orgs/{org_id}/flags", tags=["flags"])


def get_flag_service(supabase: Client = Depends(get_service_supabase)) -> FlagService:
    return FlagService(supabase)


@router.get("", response_model=List[FlagResponse])
async def list_flags(
    org_id: str,
    module: Optional[str] = None,
    user_data: Dict = Depends(require_permission("flags:view")),
    service: FlagService = Depends(get_flag_service)
):
    """List feature flags"""
    return service.list_flags(org_id, module_code=module)


@router.put("/{module_code}/{flag_code}", response_model=FlagResponse)
async def set_flag(
    org_id: str,
    module_code: str,
    flag_code: str,
    body: FlagUpdate,
    user_data: Dict = Depends(require_permission("flags:manage")),
    service: FlagService = Depends(get_flag_service)
):
    """Enable or disable a feature flag"""
    return service.set_flag(org_id, module_code, flag_code, body.enabled)
