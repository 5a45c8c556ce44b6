# Supabase table: audit_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in app/core/audit.py and service.py

"""
Expected Supabase table structure:

audit_logs:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, nullable for platform actions)
- user_id: uuid (foreign key to profiles.id)
- user_name: text (nullable)
- action: text (not null) - e.g. "lead.create", "permissions.update"
- entity_type: text (not null) - e.g. "lead", "user", "organization"
- entity_id: text (nullable)
- metadata: jsonb (default: {})
- created_at: timestamp (default: now())
"""
