import json
import logging
import stripe
from typing import Any, Dict, Optional
from app.config.settings import settings

logger = logging.getLogger(__name__)


class StripeNotConfiguredError(Exception):
    pass


def _as_dict(obj) -> Dict[str, Any]:
    if isinstance(obj, stripe.StripeObject):
        return obj.to_dict()
    return dict(obj)


class StripeGateway:
    """Thin wrapper over the Stripe SDK returning plain dicts."""

    _client: Optional[stripe.StripeClient] = None

    @classmethod
    def get_client(cls) -> stripe.StripeClient:
        if cls._client is None:
            if not settings.stripe_secret_key:
                raise StripeNotConfiguredError("STRIPE_SECRET_KEY is required")
            cls._client = stripe.StripeClient(settings.stripe_secret_key)
        return cls._client

    def verify_event(self, payload: str, signature: str) -> Dict[str, Any]:
        """Verify the stripe-signature header and decode the event. Raises ValueError or stripe.SignatureVerificationError."""
        if not settings.stripe_webhook_secret:
            raise StripeNotConfiguredError("STRIPE_WEBHOOK_SECRET is required")
        stripe.WebhookSignature.verify_header(payload, signature, settings.stripe_webhook_secret)
        return json.loads(payload)

    def retrieve_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return _as_dict(self.get_client().subscriptions.retrieve(subscription_id))

    def create_customer(self, email: Optional[str], user_id: str) -> str:
        customer = self.get_client().customers.create(params={
            "email": email,
            "metadata": {"supabase_user_id": user_id},
        })
        return customer.id

    def create_checkout_session(self, customer_id: str, price_id: str, user_id: str, plan: str) -> Optional[str]:
        session = self.get_client().checkout.sessions.create(params={
            "mode": "subscription",
            "customer": customer_id,
            "client_reference_id": user_id,
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": f"{settings.site_url}/talent/subscribe/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{settings.site_url}/talent/subscribe/cancelled",
            "metadata": {"supabase_user_id": user_id, "plan": plan},
            "subscription_data": {"metadata": {"supabase_user_id": user_id, "plan": plan}},
            "allow_promotion_codes": True,
            "billing_address_collection": "required",
        })
        return session.url

    def create_portal_session(self, customer_id: str) -> Optional[str]:
        session = self.get_client().billing_portal.sessions.create(params={
            "customer": customer_id,
            "return_url": f"{settings.site_url}/talent/settings/billing",
        })
        return session.url


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()
