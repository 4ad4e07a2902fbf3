import logging
from fastapi import HTTPException
from supabase import Client
from typing import Any, Dict
from app.database.supabase_client import maybe_row
from app.modules.auth.schemas import AuthUser
from app.modules.billing.schemas import SubscriptionSummary
from app.modules.billing.stripe_client import StripeGateway
from app.modules.billing.subscription import (
    has_payment_issues, is_active_subscriber, needs_subscription, price_id_for_plan
)

logger = logging.getLogger(__name__)

BILLING_SETTINGS_PATH = "/talent/settings/billing"


class BillingService:
    def __init__(self, supabase: Client, service_supabase: Client, user: AuthUser, gateway: StripeGateway):
        self.supabase = supabase
        # Only used to write stripe_customer_id, which RLS keeps out of users' hands
        self.service_supabase = service_supabase
        self.user = user
        self.gateway = gateway

    def _get_talent_profile(self, action: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("profiles")\
                .select("role, subscription_status, subscription_plan, subscription_current_period_end, stripe_customer_id")\
                .eq("id", self.user.id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profile for {self.user.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user profile")

        profile = maybe_row(result)
        if not profile or profile.get("role") != "talent":
            raise HTTPException(status_code=403, detail=f"Only talent users can {action}")
        return profile

    def get_subscription(self) -> SubscriptionSummary:
        """Current subscription state of the talent user"""
        profile = self._get_talent_profile("access billing")
        return SubscriptionSummary(
            subscription_status=profile.get("subscription_status") or "none",
            subscription_plan=profile.get("subscription_plan"),
            subscription_current_period_end=profile.get("subscription_current_period_end"),
            is_active=is_active_subscriber(profile),
            needs_subscription=needs_subscription(profile),
            has_payment_issues=has_payment_issues(profile),
        )

    def _ensure_customer(self, profile: Dict[str, Any]) -> str:
        customer_id = profile.get("stripe_customer_id")
        if customer_id:
            return customer_id

        customer_id = self.gateway.create_customer(self.user.email, self.user.id)
        try:
            self.service_supabase.table("profiles")\
                .update({"stripe_customer_id": customer_id})\
                .eq("id", self.user.id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating customer ID for {self.user.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create customer")
        logger.info(f"Created Stripe customer {customer_id} for {self.user.id}")
        return customer_id

    def create_checkout_session(self, plan: str) -> str:
        """Checkout url for a talent subscription. Active subscribers are sent to billing settings."""
        profile = self._get_talent_profile("subscribe")
        if is_active_subscriber(profile):
            return BILLING_SETTINGS_PATH

        price_id = price_id_for_plan(plan)
        if not price_id:
            raise HTTPException(status_code=500, detail=f"Stripe price for the {plan} plan is not configured")

        customer_id = self._ensure_customer(profile)
        url = self.gateway.create_checkout_session(customer_id, price_id, self.user.id, plan)
        if not url:
            raise HTTPException(status_code=500, detail="Failed to create checkout session")
        return url

    def create_portal_session(self) -> str:
        profile = self._get_talent_profile("access billing")
        if not profile.get("stripe_customer_id"):
            raise HTTPException(status_code=400, detail="No Stripe customer found. Please subscribe first.")
        url = self.gateway.create_portal_session(profile["stripe_customer_id"])
        if not url:
            raise HTTPException(status_code=500, detail="Failed to create billing portal session")
        return url
