# Supabase tables: roles, permissions, role_permissions, user_roles, user_permission_overrides
# This file documents the expected database schema
# Actual reads are done by SupabasePermissionStore in store.py

"""
Expected Supabase table structure:

roles:
- id: uuid (primary key)
- org_id: uuid (foreign key to orgs.id, not null)
- code: text (not null) - e.g., "admin", "staff"
- name: text (not null)
- description: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (org_id, code)

permissions:
- id: uuid (primary key)
- code: text (not null, unique) - e.g., "orders:approve", "users:*", "*"
- module: text (not null) - e.g., "orders"
- action: text (not null) - e.g., "approve"
- description: text (nullable)
- created_at: timestamp (default: now())

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, not null)
- permission_id: uuid (foreign key to permissions.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- org_id: uuid (foreign key to orgs.id, not null)
- role_id: uuid (foreign key to roles.id, not null)
- location_id: uuid (nullable) - stored but not used to filter permission lookups
- created_at: timestamp (default: now())
- unique constraint on (user_id, org_id, role_id)

user_permission_overrides:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- org_id: uuid (foreign key to orgs.id, not null)
- permission_code: text (not null)
- allow: boolean (not null) - true grants the code, false revokes it
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (user_id, org_id, permission_code)
"""
