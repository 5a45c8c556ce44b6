# Supabase table: leads
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

leads:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- name: text (not null)
- email: text (nullable)
- phone: text (nullable)
- status: text (default: 'new') - new | contacted | qualified | transferred | converted | lost
- call_status: text (nullable) - last call outcome, written by telephony webhooks
- last_call_attempt: timestamp (nullable)
- project_id: uuid (nullable)
- property_id: uuid (foreign key to properties.id, nullable)
- notes: text (nullable)
- source: text (default: 'manual')
- assigned_to: uuid (foreign key to profiles.id, nullable)
- created_by: uuid (foreign key to profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Linking a lead to a property reserves the property (status 'reserved');
unlinking releases a reserved property back to 'available'.
"""
