# Supabase tables: roles, role_permissions, user_roles
# The full schema of the permission tables is documented in
# staffdesk/modules/permissions/models.py
# Actual operations are handled via Supabase SDK in service.py

"""
Write paths in this module and the cache invalidation they trigger:

- roles insert: none (a new role has no members yet)
- role_permissions replace: PermissionCache.invalidate_all() (affects every member of the role)
- user_roles insert/delete: PermissionCache.invalidate_user(user_id, org_id)
"""
