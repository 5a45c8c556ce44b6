# Supabase Auth + profiles
# Identities live in Supabase's auth.users table:
# - registration, sign in, session cookies and JWT validation
# - password hashing and reset emails
# The application-level record is the profiles table below.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text
- full_name: text (nullable)
- organization_id: uuid (foreign key to organizations.id, nullable until onboarding/invite)
- role: text (not null, default 'employee') - employee | manager | super_admin | platform_admin
- is_platform_admin: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
