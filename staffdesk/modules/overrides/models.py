# Supabase table: user_permission_overrides
# The schema is documented in staffdesk/modules/permissions/models.py
# Actual operations are handled via Supabase SDK in service.py

"""
Every successful upsert/delete here is followed by
PermissionCache.invalidate_user(user_id, org_id) in routes.py.
"""
