from supabase import Client
from staffdesk.modules.flags.schemas import FlagResponse
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone


class FlagService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_flags(self, org_id: str, module_code: Optional[str] = None) -> List[FlagResponse]:
        """List feature flags of an organization, optionally for one module"""
        try:
            query = self.supabase.table("feature_flags").select("*").eq("org_id", org_id)
            if module_code:
                query = query.eq("module_code", module_code)
            result = query.order("module_code").order("flag_code").execute()
            return [FlagResponse(**flag) for flag in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_flag(self, org_id: str, module_code: str, flag_code: str, enabled: bool) -> FlagResponse:
        """Turn a feature flag on or off (created if missing)"""
        try:
            result = self.supabase.table("feature_flags").upsert(
                {
                    "org_id": org_id,
                    "module_code": module_code,
                    "flag_code": flag_code,
                    "enabled": enabled,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                },
                on_conflict="org_id,module_code,flag_code"
            ).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update flag")

            return FlagResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
