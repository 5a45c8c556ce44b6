# Supabase tables: dashboard_features, dashboard_role_permissions, dashboard_user_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and app/core/dependencies.py

"""
Expected Supabase table structure:

dashboard_features:
- feature_key: text (primary key) - e.g. "view_all_leads", "delete_leads"
- feature_name: text (not null)
- category: text (nullable)
- is_active: boolean (default: true)

dashboard_role_permissions:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- role: text (not null) - employee | manager | super_admin
- feature_key: text (not null)
- is_enabled: boolean (not null)
- updated_at: timestamp (nullable)
- unique constraint on (organization_id, role, feature_key)

dashboard_user_permissions:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- organization_id: uuid (not null)
- feature_key: text (not null)
- is_enabled: boolean (not null) - true grants, false revokes relative to the role
- granted_by: uuid (nullable)
- created_at: timestamp (default: now())
- unique constraint on (user_id, feature_key)
"""
