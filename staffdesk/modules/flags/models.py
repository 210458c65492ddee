# Supabase table: feature_flags
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

feature_flags:
- id: uuid (primary key)
- org_id: uuid (foreign key to orgs.id, not null)
- module_code: text (not null) - e.g., "orders"
- flag_code: text (not null) - e.g., "auto_approve"
- enabled: boolean (not null, default false)
- updated_at: timestamp (nullable)
- unique constraint on (org_id, module_code, flag_code)
"""
