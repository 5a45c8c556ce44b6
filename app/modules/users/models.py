# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Team members are profiles rows (see app/modules/auth/models.py) that share
an organization_id. Invites create the auth.users row through the Admin API
and the profile row in the inviter's organization.

Deleting a member removes, in order:
- profiles row
- dashboard_user_permissions rows
- auth.users row (Admin API)
"""
