# Supabase table: onboarding_progress
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null) - upsert conflict target
- current_step: text (not null) - organization | profile | invite | workspace | complete
- completed_steps: text[] (not null, default: '{}')
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

The row is the only state of the wizard: it is upserted after every step and
read back when the frontend loads.
"""
