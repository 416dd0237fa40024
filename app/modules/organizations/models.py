# Supabase tables: organizations, organization_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

organizations:
- id: uuid (primary key)
- name: text (not null)
- domain: text (nullable) - email domain used to find the organization for new users
- logo_url: text (nullable) - public URL in the `organizations` storage bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

organization_members:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- organization_id: uuid (foreign key to organizations.id, not null)
- role: text (not null, default: 'member') - values: owner, member
- is_owner: boolean (not null, default: false)
- created_at: timestamp (default: now())
- unique constraint on (user_id, organization_id)
"""
