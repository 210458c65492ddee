"""
Seed Permissions and Roles Script
Populates the permissions catalog and one organization's role templates from
staffdesk.config.permissions_config. Safe to re-run: rows are matched by code
and updated in place.

Usage: python -m staffdesk.scripts.seed_permissions_roles <org_id>

This is an offline job; a running service picks role changes up once its
cached permission sets expire.
"""

import sys
from staffdesk.config.permissions_config import PERMISSION_MATRIX
from staffdesk.database.supabase_client import get_service_supabase
from supabase import Client
from typing import Dict, List, Tuple
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _sync_row(supabase: Client, table: str, match: Dict[str, str], values: Dict[str, str]) -> Tuple[str, bool]:
    """Update the row matching `match` or insert it. Returns (row id, created)."""
    query = supabase.table(table).select("id")
    for column, value in match.items():
        query = query.eq(column, value)
    existing = query.execute()

    if existing.data:
        row_id = existing.data[0]["id"]
        supabase.table(table).update(values).eq("id", row_id).execute()
        return row_id, False

    result = supabase.table(table).insert({**match, **values}).execute()
    return result.data[0]["id"], True


def seed_permissions(supabase: Client) -> int:
    """Seed the permission catalog"""
    logger.info("Seeding permissions...")
    created = updated = 0

    for perm in PERMISSION_MATRIX["permissions"]:
        try:
            _, was_created = _sync_row(
                supabase,
                "permissions",
                {"code": perm["code"]},
                {"module": perm["module"], "action": perm["action"], "description": perm["description"]},
            )
        except Exception as e:
            logger.error("Error processing permission %s: %s", perm["code"], e)
            continue
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info("Permissions seeded: %s created, %s updated", created, updated)
    return created + updated


def seed_roles(supabase: Client, org_id: str) -> int:
    """Seed the organization's role templates and their permission links"""
    logger.info("Seeding roles for org %s...", org_id)
    created = updated = 0

    for role in PERMISSION_MATRIX["roles"]:
        try:
            role_id, was_created = _sync_row(
                supabase,
                "roles",
                {"org_id": org_id, "code": role["code"]},
                {"name": role["name"], "description": role["description"]},
            )
            assign_permissions_to_role(supabase, role_id, role["code"], role["permissions"])
        except Exception as e:
            logger.error("Error processing role %s: %s", role["code"], e)
            continue
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info("Roles seeded: %s created, %s updated", created, updated)
    return created + updated


def assign_permissions_to_role(supabase: Client, role_id: str, role_code: str, permission_codes: List[str]):
    """Make the role's permission links match the config exactly"""
    wanted = supabase.table("permissions")\
        .select("id")\
        .in_("code", permission_codes)\
        .execute()
    wanted_ids = [p["id"] for p in wanted.data or []]
    if not wanted_ids:
        logger.warning("No permissions found for role %s; removing its links", role_code)

    current = supabase.table("role_permissions")\
        .select("permission_id")\
        .eq("role_id", role_id)\
        .execute()
    current_ids = {p["permission_id"] for p in current.data or []}

    to_add = [pid for pid in wanted_ids if pid not in current_ids]
    if to_add:
        supabase.table("role_permissions")\
            .insert([{"role_id": role_id, "permission_id": pid} for pid in to_add])\
            .execute()
        logger.debug("Linked %s permissions to role %s", len(to_add), role_code)

    to_remove = current_ids - set(wanted_ids)
    if to_remove:
        supabase.table("role_permissions")\
            .delete()\
            .eq("role_id", role_id)\
            .in_("permission_id", sorted(to_remove))\
            .execute()
        logger.debug("Unlinked %s permissions from role %s", len(to_remove), role_code)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        logger.error("Usage: python -m staffdesk.scripts.seed_permissions_roles <org_id>")
        sys.exit(2)
    org_id = argv[0]

    try:
        supabase = get_service_supabase()
        # Roles link to permissions by id, so the catalog goes first
        perm_count = seed_permissions(supabase)
        role_count = seed_roles(supabase, org_id)
    except Exception as e:
        logger.error("Error during seeding: %s", e)
        sys.exit(1)

    logger.info("Seeding completed: %s permissions, %s roles processed", perm_count, role_count)


if __name__ == "__main__":
    main()
