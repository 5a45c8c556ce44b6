# Supabase table: projects
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- name: text (not null)
- description: text (nullable)
- address: text (nullable)
- project_type: text (nullable) - e.g. "residential", "commercial"
- project_status: text (default: 'planning') - planning | under_construction | ready | completed
- total_units: integer (default: 0)
- price_range: text (nullable)
- show_in_inventory: boolean (default: true)
- public_visibility: boolean (default: false)
- created_by: uuid (foreign key to profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

properties.project_id and leads.project_id point here.
"""
