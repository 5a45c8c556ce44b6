# Supabase table: properties
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

properties:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- project_id: uuid (nullable)
- title: text (not null) - unit name, e.g. "Tower A - 1204"
- unit_type: text (nullable) - e.g. "2BHK", "villa"
- price: numeric (nullable)
- status: text (default: 'available') - available | reserved | sold | blocked
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
