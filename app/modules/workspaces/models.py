# Supabase table: workspaces
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- organization_id: uuid (foreign key to organizations.id, not null)
- created_by: uuid (foreign key to auth.users.id, not null)
- logo_url: text (nullable) - public URL in the `workspace-assets` storage bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
