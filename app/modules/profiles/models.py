# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null)
- organization_id: uuid (foreign key to organizations.id, not null)
- name: text (not null) - full name as entered in the wizard
- first_name: text (nullable) - first token of name
- last_name: text (nullable) - remaining tokens of name
- email: text (not null) - synced from auth.users
- job_title: text (nullable)
- avatar_url: text (nullable) - public URL in the `avatars` storage bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
