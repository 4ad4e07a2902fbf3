# Supabase Auth (auth.users) owns identities; this service keeps no user table of its own.
# Sessions reach us as a Supabase access token, either in the Authorization header
# or in the session cookie set by /api/auth/login (settings.session_cookie_name).

"""
Signup metadata written to auth.users.raw_user_meta_data by /api/auth/register:
- role: "talent" | "client" (admin is only ever set directly in the database)
- first_name, last_name

The handle_new_user trigger on auth.users reads that metadata and inserts
public.profiles (+ public.talent_profiles for talent). When the trigger did not
run or failed half way, ProfileService.ensure_profile_exists rebuilds the rows
on the next login, callback or boot-state request.

email_confirmed_at drives profiles.email_verified (synced on every repair).
"""
