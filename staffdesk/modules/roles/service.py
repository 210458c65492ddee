from supabase import Client
from staffdesk.modules.roles.schemas import (
    RoleCreate, RoleResponse, RolePermissionsResponse,
    UserRoleAssign, UserRoleResponse
)
from typing import List
from fastapi import HTTPException


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_role(self, org_id: str, role_data: RoleCreate) -> RoleResponse:
        """Create a new role in an organization"""
        try:
            result = self.supabase.table("roles").insert({
                "org_id": org_id,
                "code": role_data.code,
                "name": role_data.name,
                "description": role_data.description
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create role")

            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_role(self, org_id: str, role_id: str) -> RoleResponse:
        """Get role by ID, scoped to the organization"""
        try:
            result = self.supabase.table("roles")\
                .select("*")\
                .eq("id", role_id)\
                .eq("org_id", org_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Role not found")

            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_roles(self, org_id: str, limit: int = 100, offset: int = 0) -> List[RoleResponse]:
        """List roles of an organization"""
        try:
            result = self.supabase.table("roles")\
                .select("*")\
                .eq("org_id", org_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [RoleResponse(**role) for role in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def replace_role_permissions(self, org_id: str, role_id: str, permission_codes: List[str]) -> RolePermissionsResponse:
        """Replace the permission set of a role. Codes must already be canonical."""
        try:
            self.get_role(org_id, role_id)

            codes = sorted(set(permission_codes))
            permission_ids = []
            if codes:
                permissions_result = self.supabase.table("permissions")\
                    .select("id, code")\
                    .in_("code", codes)\
                    .execute()
                found = {p["code"]: p["id"] for p in permissions_result.data or []}
                missing = [c for c in codes if c not in found]
                if missing:
                    raise HTTPException(status_code=400, detail=f"Unknown permission codes: {', '.join(missing)}")
                permission_ids = [found[c] for c in codes]

            self.supabase.table("role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()

            if permission_ids:
                self.supabase.table("role_permissions").insert([
                    {"role_id": role_id, "permission_id": pid} for pid in permission_ids
                ]).execute()

            return RolePermissionsResponse(
                role_id=role_id,
                permission_codes=codes,
                message=f"Role now grants {len(codes)} permission(s)"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_roles(self, org_id: str, user_id: str) -> List[UserRoleResponse]:
        """Role assignments of a user in an organization"""
        try:
            result = self.supabase.table("user_roles")\
                .select("*")\
                .eq("org_id", org_id)\
                .eq("user_id", user_id)\
                .execute()
            return [UserRoleResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def assign_role(self, org_id: str, user_id: str, assign: UserRoleAssign) -> UserRoleResponse:
        """Assign a role to a user (idempotent)"""
        try:
            self.get_role(org_id, assign.role_id)

            result = self.supabase.table("user_roles").upsert(
                {
                    "user_id": user_id,
                    "org_id": org_id,
                    "role_id": assign.role_id,
                    "location_id": assign.location_id
                },
                on_conflict="user_id,org_id,role_id"
            ).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to assign role")

            return UserRoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_role(self, org_id: str, user_id: str, role_id: str) -> bool:
        """Remove a role from a user"""
        try:
            result = self.supabase.table("user_roles")\
                .delete()\
                .eq("org_id", org_id)\
                .eq("user_id", user_id)\
                .eq("role_id", role_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Role assignment not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
