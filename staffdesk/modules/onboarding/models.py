# Supabase tables: users, users_locations (plus user_roles and roles from the roles module)
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, same as auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

users_locations:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id, not null)
- org_id: uuid (foreign key to orgs.id, not null)
- location_id: uuid (foreign key to locations.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, org_id, location_id)

orgs(id, name) and locations(id, org_id, name) are read through the nested
select in OnboardingService.list_memberships.

Bootstrap writes a user_roles row, so it is followed by
PermissionCache.invalidate_user(user_id, org_id). Membership rows do not
change permission sets.
"""
