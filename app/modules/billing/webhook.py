"""
Stripe webhook processing with an idempotency ledger.

Every delivery is first recorded in stripe_webhook_events (unique event_id).
A duplicate-key violation means another delivery already owns the event, so
side effects run at most once per event. Events older than the newest
processed event for the same customer are recorded as ignored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from supabase import Client
from typing import Any, Dict, Optional
from app.database.supabase_client import is_unique_violation, maybe_row
from app.modules.billing.stripe_client import StripeGateway
from app.modules.billing.subscription import (
    PLANS, determine_plan, get_current_period_end, map_stripe_status_to_local
)

logger = logging.getLogger(__name__)

LEDGER_TABLE = "stripe_webhook_events"
HANDLED_EVENT_TYPES = (
    "checkout.session.completed",
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
    "invoice.payment_failed",
)
TERMINAL_STATUSES = ("processed", "ignored", "orphaned")
MAX_ORPHAN_ATTEMPTS = 5


@dataclass
class WebhookOutcome:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **extra) -> "WebhookOutcome":
        return cls(200, {"received": True, **extra})

    @classmethod
    def failed(cls, error: str) -> "WebhookOutcome":
        return cls(500, {"error": error})


@dataclass
class LedgerContext:
    event_id: str
    type: str
    stripe_created: int
    livemode: bool
    customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    checkout_session_id: Optional[str] = None
    customer_email: Optional[str] = None


@dataclass
class LedgerClaim:
    short_circuit: bool = False
    in_flight: bool = False
    error: Optional[Exception] = None


class ProfileNotFoundError(Exception):
    pass


def _object_id(value) -> Optional[str]:
    """Stripe fields like customer/subscription are either an id or an expanded object."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("id")
    return None


def extract_ledger_context(event: Dict[str, Any]) -> LedgerContext:
    obj = (event.get("data") or {}).get("object") or {}
    event_type = event.get("type") or ""
    created = event.get("created")
    context = LedgerContext(
        event_id=event.get("id"),
        type=event_type,
        stripe_created=created if isinstance(created, int) else 0,
        livemode=bool(event.get("livemode")),
    )
    if event_type == "checkout.session.completed":
        context.checkout_session_id = obj.get("id")
        context.customer_id = _object_id(obj.get("customer"))
        context.subscription_id = _object_id(obj.get("subscription"))
        context.customer_email = (obj.get("customer_details") or {}).get("email")
    elif event_type.startswith("customer.subscription."):
        context.subscription_id = obj.get("id")
        context.customer_id = _object_id(obj.get("customer"))
        if isinstance(obj.get("customer"), dict):
            context.customer_email = obj["customer"].get("email")
    elif event_type.startswith("invoice."):
        context.customer_id = _object_id(obj.get("customer"))
        context.customer_email = obj.get("customer_email")
    return context


class WebhookService:
    def __init__(self, supabase: Client, gateway: StripeGateway):
        # Service-role client: the ledger and other users' profiles are outside RLS reach
        self.supabase = supabase
        self.gateway = gateway

    # Ledger

    def _claim(self, context: LedgerContext) -> LedgerClaim:
        try:
            self.supabase.table(LEDGER_TABLE).insert({
                "event_id": context.event_id,
                "type": context.type,
                "stripe_created": context.stripe_created,
                "livemode": context.livemode,
                "status": "processing",
                "customer_id": context.customer_id,
                "subscription_id": context.subscription_id,
                "checkout_session_id": context.checkout_session_id,
                "customer_email": context.customer_email,
                "attempt_count": 1,
            }).execute()
            return LedgerClaim()
        except Exception as e:
            if not is_unique_violation(e):
                logger.error(f"Failed to insert Stripe webhook ledger row {context.event_id}: {e}")
                return LedgerClaim(error=e)

        try:
            result = self.supabase.table(LEDGER_TABLE)\
                .select("status, attempt_count")\
                .eq("event_id", context.event_id)\
                .maybe_single()\
                .execute()
            existing = maybe_row(result) or {}
        except Exception as e:
            logger.error(f"Failed to read existing Stripe webhook ledger row {context.event_id}: {e}")
            return LedgerClaim(error=e)

        status = existing.get("status")
        if status in TERMINAL_STATUSES:
            return LedgerClaim(short_circuit=True)
        if status == "processing":
            return LedgerClaim(short_circuit=True, in_flight=True)

        # Previous attempt failed: take it over and try again
        self.supabase.table(LEDGER_TABLE).update({
            "status": "processing",
            "error": None,
            "last_error": None,
            "processed_at": None,
            "attempt_count": (existing.get("attempt_count") or 0) + 1,
            "customer_email": context.customer_email,
        }).eq("event_id", context.event_id).execute()
        return LedgerClaim()

    def _mark(self, event_id: str, status: str, error: Optional[str] = None) -> None:
        processed_at = None if status == "processing" else datetime.now(timezone.utc).isoformat()
        try:
            self.supabase.table(LEDGER_TABLE).update({
                "status": status,
                "error": error,
                "last_error": error,
                "processed_at": processed_at,
            }).eq("event_id", event_id).execute()
        except Exception as e:
            logger.error(f"Failed to update Stripe webhook ledger row {event_id}: {e}")

    def _latest_processed_created(self, customer_id: str) -> Optional[int]:
        try:
            result = self.supabase.table(LEDGER_TABLE)\
                .select("stripe_created")\
                .eq("customer_id", customer_id)\
                .eq("status", "processed")\
                .order("stripe_created", desc=True)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to read latest processed Stripe event for {customer_id}: {e}")
            return None
        rows = result.data or []
        created = rows[0].get("stripe_created") if rows else None
        return created if isinstance(created, int) else None

    def _ledger_row(self, event_id: str) -> Dict[str, Any]:
        result = self.supabase.table(LEDGER_TABLE)\
            .select("attempt_count, livemode")\
            .eq("event_id", event_id)\
            .maybe_single()\
            .execute()
        return maybe_row(result) or {}

    # Profile resolution

    def _profile_by(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("profiles")\
                .select("id, subscription_plan")\
                .eq(column, value)\
                .maybe_single()\
                .execute()
            return maybe_row(result)
        except Exception as e:
            logger.error(f"Error finding profile by {column}: {e}")
            return None

    def _resolve_profile(self, obj: Dict[str, Any], customer_id: str,
                         subscription: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """supabase_user_id from Stripe metadata first, then profiles.stripe_customer_id."""
        user_id = obj.get("client_reference_id") or (obj.get("metadata") or {}).get("supabase_user_id")
        if not user_id and subscription:
            user_id = (subscription.get("metadata") or {}).get("supabase_user_id")
        if not user_id and isinstance(obj.get("customer"), dict):
            user_id = (obj["customer"].get("metadata") or {}).get("supabase_user_id")

        if user_id:
            profile = self._profile_by("id", user_id)
            if profile:
                logger.info(f"Resolved profile {profile['id']} via metadata.supabase_user_id (customer {customer_id})")
                return profile

        profile = self._profile_by("stripe_customer_id", customer_id)
        if profile:
            logger.info(f"Resolved profile {profile['id']} via stripe_customer_id (customer {customer_id})")
        return profile

    # Handlers

    def _apply_subscription(self, subscription: Dict[str, Any], source: Dict[str, Any]) -> str:
        """Write subscription state onto the owning profile. Raises ProfileNotFoundError or the write error."""
        customer_id = _object_id(subscription.get("customer"))
        if not customer_id:
            raise ProfileNotFoundError(f"No customer ID found in subscription {subscription.get('id')}")

        profile = self._resolve_profile(source, customer_id, subscription)
        if not profile:
            raise ProfileNotFoundError(f"No profile found for customer {customer_id}")

        plan = determine_plan(subscription)
        if not plan:
            logger.warning(f"Unable to determine plan for subscription {subscription.get('id')}")
        existing_plan = profile.get("subscription_plan") if profile.get("subscription_plan") in PLANS else None
        status = map_stripe_status_to_local(subscription.get("status"))

        self.supabase.table("profiles").update({
            "subscription_status": status,
            "stripe_subscription_id": subscription.get("id"),
            "subscription_plan": plan or existing_plan,
            "subscription_current_period_end": get_current_period_end(subscription),
        }).eq("id", profile["id"]).execute()

        logger.info(f"Updated subscription for profile {profile['id']}: {status}")
        return profile["id"]

    def _handle_checkout_completed(self, event: Dict[str, Any]) -> Optional[WebhookOutcome]:
        session = event["data"]["object"]
        logger.info(f"Checkout session completed: {session.get('id')}")
        subscription_id = _object_id(session.get("subscription"))
        if session.get("mode") != "subscription" or not subscription_id:
            return None
        subscription = self.gateway.retrieve_subscription(subscription_id)
        try:
            self._apply_subscription(subscription, session)
        except ProfileNotFoundError as e:
            # A completed checkout must map to a profile; retry until the mapping is fixed
            self._mark(event["id"], "failed", f"checkout.session.completed: {e}")
            return WebhookOutcome.failed("Failed to process subscription update")
        return None

    def _handle_subscription_updated(self, event: Dict[str, Any]) -> Optional[WebhookOutcome]:
        subscription = event["data"]["object"]
        logger.info(f"Subscription {subscription.get('id')} updated: {subscription.get('status')}")
        try:
            self._apply_subscription(subscription, subscription)
        except ProfileNotFoundError as e:
            try:
                ledger_row = self._ledger_row(event["id"])
            except Exception as read_error:
                self._mark(event["id"], "failed", f"Failed to read webhook ledger row: {read_error}")
                return WebhookOutcome.failed("Failed to process subscription update")

            attempt_count = ledger_row.get("attempt_count") or 0
            livemode = ledger_row.get("livemode", True)
            if not livemode or attempt_count >= MAX_ORPHAN_ATTEMPTS:
                self._mark(event["id"], "orphaned", f"{e} after {attempt_count} attempts")
                return WebhookOutcome.ok(orphaned=True)

            self._mark(event["id"], "failed", f"customer.subscription.*: {e}")
            return WebhookOutcome.failed("Failed to process subscription update")
        return None

    def _handle_subscription_deleted(self, event: Dict[str, Any]) -> Optional[WebhookOutcome]:
        subscription = event["data"]["object"]
        logger.info(f"Subscription deleted: {subscription.get('id')}")
        customer_id = _object_id(subscription.get("customer"))
        if not customer_id:
            self._mark(event["id"], "failed", "No customer ID found for subscription deletion")
            return WebhookOutcome.failed("Failed to process subscription deletion")

        profile = self._resolve_profile(subscription, customer_id, subscription)
        if not profile:
            # The user may have been deleted; nothing left to cancel
            self._mark(event["id"], "orphaned", f"No profile found for deleted subscription customer {customer_id}")
            return WebhookOutcome.ok(orphaned=True)

        self.supabase.table("profiles").update({
            "subscription_status": "canceled",
            "stripe_subscription_id": None,
            "subscription_plan": None,
            "subscription_current_period_end": None,
        }).eq("id", profile["id"]).execute()
        logger.info(f"Canceled subscription for profile {profile['id']}")
        return None

    def process(self, event: Dict[str, Any]) -> WebhookOutcome:
        """Apply a verified Stripe event at most once. 5xx responses make Stripe retry."""
        context = extract_ledger_context(event)

        try:
            claim = self._claim(context)
            if claim.short_circuit:
                logger.info(f"Duplicate Stripe event {context.event_id} (in_flight={claim.in_flight})")
                return WebhookOutcome.ok(duplicate=True, in_flight=claim.in_flight)
            if claim.error is not None:
                # Idempotency cannot be proven without the ledger row
                return WebhookOutcome.failed("Failed to write webhook ledger")

            if context.type not in HANDLED_EVENT_TYPES:
                self._mark(context.event_id, "ignored", f"Unhandled event type: {context.type}")
                return WebhookOutcome.ok()

            if context.customer_id:
                latest = self._latest_processed_created(context.customer_id)
                if latest is not None and context.stripe_created < latest:
                    self._mark(
                        context.event_id,
                        "ignored",
                        f"Out-of-order event ignored (stripe_created={context.stripe_created} < latest_processed={latest})",
                    )
                    logger.info(f"Ignored out-of-order Stripe event {context.event_id}")
                    return WebhookOutcome.ok(ignored="out_of_order")

            outcome = None
            if context.type == "checkout.session.completed":
                outcome = self._handle_checkout_completed(event)
            elif context.type in ("customer.subscription.created", "customer.subscription.updated"):
                outcome = self._handle_subscription_updated(event)
            elif context.type == "customer.subscription.deleted":
                outcome = self._handle_subscription_deleted(event)
            elif context.type == "invoice.payment_failed":
                # Status follows via customer.subscription.updated
                logger.warning(f"Payment failed for invoice {event['data']['object'].get('id')}")

            if outcome is not None:
                return outcome

            self._mark(context.event_id, "processed")
            return WebhookOutcome.ok()
        except Exception as e:
            logger.exception(f"Webhook handler error for {context.event_id}: {e}")
            self._mark(context.event_id, "failed", str(e))
            return WebhookOutcome.failed("Webhook handler failed")
