# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - Passwordless sign-in (email OTP / magic link)
# - Session management and JWT issuing
# - User rows in auth.users

"""
Supabase Auth provides:
- auth.sign_in_with_otp() - Send a one-time login code / magic link by email
- auth.verify_otp() - Exchange the emailed code for a session
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

A profile row in public.profiles is created for every new auth.users row
by the on_user_created_create_profile trigger (see app/database/sql/triggers.sql).
"""
