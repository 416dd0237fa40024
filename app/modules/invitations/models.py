# Supabase table: invitations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- email: text (not null) - stored lower-cased
- organization_id: uuid (foreign key to organizations.id, not null)
- invited_by: text (nullable) - email of the inviting user
- accepted: boolean (not null, default: false)
- auto_join: boolean (not null, default: true) - join the organization on first login
- created_at: timestamp (default: now())
- expires_at: timestamp (nullable) - pending invitations past this point are ignored

Rows with the same (email, organization_id) are not inserted twice by this
service, but no unique constraint is assumed.

Invitation emails are delivered through Supabase Auth's password-reset mail:
the reset link's redirect points at the frontend's /register page with the
invitation parameters in the query string.
"""
