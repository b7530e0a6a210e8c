# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- user_id: uuid (primary key, references auth.users.id)
- email: text (nullable)
- full_name: text (nullable until the user fills it in)
- description: text (nullable)

Rows are created by the on_user_created_create_profile trigger when a user
signs up, and only ever updated by their owner afterwards.
"""
