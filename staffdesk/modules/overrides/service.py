from supabase import Client
from staffdesk.modules.overrides.schemas import OverrideResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime, timezone


class OverrideService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_overrides(self, org_id: str, user_id: str) -> List[OverrideResponse]:
        """Permission overrides of a user in an organization"""
        try:
            result = self.supabase.table("user_permission_overrides")\
                .select("*")\
                .eq("org_id", org_id)\
                .eq("user_id", user_id)\
                .order("permission_code")\
                .execute()
            return [OverrideResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_override(self, org_id: str, user_id: str, permission_code: str, allow: bool) -> OverrideResponse:
        """Create or replace the override for one permission code"""
        try:
            result = self.supabase.table("user_permission_overrides").upsert(
                {
                    "user_id": user_id,
                    "org_id": org_id,
                    "permission_code": permission_code,
                    "allow": allow,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                },
                on_conflict="user_id,org_id,permission_code"
            ).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save override")

            return OverrideResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_override(self, org_id: str, user_id: str, permission_code: str) -> bool:
        """Delete the override for one permission code"""
        try:
            result = self.supabase.table("user_permission_overrides")\
                .delete()\
                .eq("org_id", org_id)\
                .eq("user_id", user_id)\
                .eq("permission_code", permission_code)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Override not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
