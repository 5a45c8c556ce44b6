# Supabase table: call_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and app/modules/webhooks/service.py

"""
Expected Supabase table structure:

call_logs:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, nullable for logs created by webhooks)
- lead_id: uuid (foreign key to leads.id, nullable)
- call_sid: text (unique) - telephony provider call UUID
- call_status: text - ringing | in_progress | completed | called | no_answer | busy | failed | cancelled
- duration: integer (seconds, default 0)
- recording_url: text (nullable)
- recording_duration: integer (nullable)
- recording_format: text (nullable)
- notes: text (nullable)
- metadata: jsonb (default: {})
- created_at: timestamp (default: now())
- ended_at: timestamp (nullable)
"""
