from supabase import Client
from staffdesk.modules.onboarding.schemas import BootstrapResponse, Membership
from typing import List
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

MEMBERSHIP_SELECT = "org_id, location_id, orgs(id, name), locations(id, name)"


class OnboardingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def bootstrap(self, user_id: str, org_id: str, location_id: str, role_code: str) -> BootstrapResponse:
        """Idempotently place a user in an organization location with a role.

        Safe to call repeatedly: every write is an upsert on its natural key.
        """
        operations = []
        try:
            now = datetime.now(timezone.utc).isoformat()

            self.supabase.table("users").upsert(
                {"id": user_id, "updated_at": now},
                on_conflict="id"
            ).execute()
            operations.append("User record created/updated")

            self.supabase.table("users_locations").upsert(
                {"user_id": user_id, "org_id": org_id, "location_id": location_id},
                on_conflict="user_id,org_id,location_id",
                ignore_duplicates=True
            ).execute()
            operations.append(f"User mapped to location {location_id}")

            role = self.supabase.table("roles")\
                .select("id, code")\
                .eq("org_id", org_id)\
                .eq("code", role_code)\
                .execute()
            if not role.data:
                raise HTTPException(
                    status_code=404,
                    detail=f"Role '{role_code}' not found in organization {org_id}"
                )
            role_id = role.data[0]["id"]

            self.supabase.table("user_roles").upsert(
                {"user_id": user_id, "org_id": org_id, "role_id": role_id},
                on_conflict="user_id,org_id,role_id",
                ignore_duplicates=True
            ).execute()
            operations.append(f"Role {role_code} assigned")
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Bootstrap failed for user %s after %s: %s", user_id, operations, e)
            raise HTTPException(status_code=500, detail=f"Bootstrap failed: {e}")

        logger.info("Bootstrapped user %s into org %s (role %s)", user_id, org_id, role_code)
        return BootstrapResponse(
            user_id=user_id,
            org_id=org_id,
            location_id=location_id,
            role_id=role_id,
            role_code=role_code,
            operations=operations,
            message="User bootstrap completed successfully"
        )

    def list_memberships(self, user_id: str) -> List[Membership]:
        """Organization/location pairs the user belongs to"""
        try:
            result = self.supabase.table("users_locations")\
                .select(MEMBERSHIP_SELECT)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        memberships = []
        for row in result.data or []:
            memberships.append(Membership(
                org_id=row["org_id"],
                org_name=(row.get("orgs") or {}).get("name"),
                location_id=row["location_id"],
                location_name=(row.get("locations") or {}).get("name"),
            ))
        return memberships

    def is_member(self, user_id: str, org_id: str, location_id: str) -> bool:
        try:
            result = self.supabase.table("users_locations")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("org_id", org_id)\
                .eq("location_id", location_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return bool(result.data)
