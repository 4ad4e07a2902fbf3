import logging
import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from supabase import Client
from app.core.dependencies import get_current_user, get_user_supabase
from app.database.supabase_client import get_service_supabase
from app.modules.auth.schemas import AuthUser
from app.modules.billing.schemas import BillingSessionResponse, CheckoutRequest, SubscriptionSummary
from app.modules.billing.service import BillingService
from app.modules.billing.stripe_client import StripeGateway, StripeNotConfiguredError, get_stripe_gateway
from app.modules.billing.webhook import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing"])


def get_billing_service(
    user: AuthUser = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase),
    service_supabase: Client = Depends(get_service_supabase),
    gateway: StripeGateway = Depends(get_stripe_gateway),
) -> BillingService:
    return BillingService(supabase, service_supabase, user, gateway)


@router.get("/billing/subscription", response_model=SubscriptionSummary)
async def get_subscription(service: BillingService = Depends(get_billing_service)):
    """Subscription state of the current talent user"""
    return service.get_subscription()


@router.post("/billing/checkout", response_model=BillingSessionResponse)
async def create_checkout(
    request: CheckoutRequest,
    service: BillingService = Depends(get_billing_service),
):
    """Start a Stripe Checkout session for a talent subscription"""
    return BillingSessionResponse(url=service.create_checkout_session(request.plan))


@router.post("/billing/portal", response_model=BillingSessionResponse)
async def create_portal(service: BillingService = Depends(get_billing_service)):
    """Open the Stripe billing portal for the current talent user"""
    return BillingSessionResponse(url=service.create_portal_session())


@router.post("/stripe/webhook")
async def stripe_webhook(
    request: Request,
    service_supabase: Client = Depends(get_service_supabase),
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    """Stripe event receiver. Signature checked against the raw body."""
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    payload = (await request.body()).decode("utf-8")
    try:
        event = gateway.verify_event(payload, signature)
    except StripeNotConfiguredError as e:
        logger.error(f"Stripe webhook received but not configured: {e}")
        raise HTTPException(status_code=500, detail="Webhook not configured")
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")

    outcome = WebhookService(service_supabase, gateway).process(event)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
