# Supabase Auth
# Qwenzy accounts live in Supabase's auth.users table; no custom tables here.
# Profile data collected during onboarding is stored in `profiles`
# (see app/modules/profiles/models.py).

"""
Supabase Auth calls used by this module:
- auth.sign_up() - Register new users (confirmation mail redirects to /verify-email)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a bearer JWT
- auth.sign_out() - Logout users
- auth.reset_password_for_email() - Password recovery mail (redirects to /reset-password)

The same reset_password_for_email() call doubles as the delivery channel for
invitation emails, see app/modules/invitations/service.py.
"""
