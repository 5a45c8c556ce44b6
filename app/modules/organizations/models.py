# Supabase table: organizations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

organizations:
- id: uuid (primary key)
- name: text (not null)
- slug: text (unique, nullable) - used by the public profile page
- onboarding_status: text (default: 'pending') - pending | completed
- tier: text (default: 'free')
- is_public: boolean (default: false) - public profile visibility
- tagline: text (nullable)
- description: text (nullable)
- contact_email: text (nullable)
- contact_phone: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Every tenant-scoped table (leads, properties, call_logs, audit_logs,
dashboard_role_permissions, dashboard_user_permissions, profiles) carries
organization_id referencing this table.
"""
