# Supabase tables: profiles, talent_profiles, client_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles (one row per auth user, created by the signup trigger or lazily repaired):
- id: uuid (primary key, references auth.users.id)
- role: user_role enum (talent | client | admin, nullable)
- account_type: account_type_enum (talent | client | unassigned, nullable)
- display_name: text (nullable)
- avatar_url: text (nullable)
- is_suspended: boolean (default: false)
- email_verified: boolean (default: false) - mirrors auth.users.email_confirmed_at
- stripe_customer_id: text (nullable, unique)
- stripe_subscription_id: text (nullable)
- subscription_status: subscription_status enum (none | active | past_due | canceled, default: none)
- subscription_plan: text (monthly | annual, nullable)
- subscription_current_period_end: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

talent_profiles (one row per talent user):
- user_id: uuid (primary key, references profiles.id)
- first_name: text (not null, may be '' until onboarding)
- last_name: text (not null, may be '' until onboarding)
- location: text (nullable)
- experience: text (nullable)
- portfolio_url: text (nullable)
- height, measurements, hair_color, eye_color: text (nullable)
- specialties: text[] (nullable)

client_profiles (one row per client / career builder):
- user_id: uuid (primary key, references profiles.id)
- company_name: text (nullable until profile completion)
- industry, website, contact_name, contact_email, contact_phone: text (nullable)

Row-level security limits writes to the caller's own rows.
"""
