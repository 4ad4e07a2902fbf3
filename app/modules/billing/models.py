# Supabase table: stripe_webhook_events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in webhook.py

"""
Expected Supabase table structure:

stripe_webhook_events (idempotency ledger, written only with the service-role client):
- event_id: text (primary key / unique) - Stripe's globally unique event id
- type: text (not null)
- stripe_created: bigint (not null) - event.created, used for out-of-order protection
- livemode: boolean (not null)
- status: text (not null) - values: processing, processed, failed, ignored, orphaned
- customer_id: text (nullable)
- subscription_id: text (nullable)
- checkout_session_id: text (nullable)
- customer_email: text (nullable)
- attempt_count: integer (default: 1)
- error: text (nullable)
- last_error: text (nullable)
- processed_at: timestamp (nullable)
- created_at: timestamp (default: now())

Profile subscription columns updated here live on profiles (see profiles/models.py):
stripe_customer_id, stripe_subscription_id, subscription_status,
subscription_plan, subscription_current_period_end.
"""
