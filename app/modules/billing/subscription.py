from datetime import datetime, timezone
from typing import Any, Dict, Optional
from app.config.settings import settings

PLANS = ("monthly", "annual")


def map_stripe_status_to_local(stripe_status: Optional[str]) -> str:
    """Collapse Stripe's subscription states onto none/active/past_due/canceled."""
    if stripe_status in ("active", "trialing"):
        return "active"
    if stripe_status == "past_due":
        return "past_due"
    return "canceled"


def is_active_subscriber(profile: Optional[Dict[str, Any]]) -> bool:
    return bool(profile) and profile.get("subscription_status") == "active"


def needs_subscription(profile: Optional[Dict[str, Any]]) -> bool:
    if not profile:
        return True
    return profile.get("subscription_status") in (None, "none", "canceled")


def has_payment_issues(profile: Optional[Dict[str, Any]]) -> bool:
    return bool(profile) and profile.get("subscription_status") == "past_due"


def price_id_for_plan(plan: str) -> Optional[str]:
    if plan == "monthly":
        return settings.stripe_price_talent_monthly
    if plan == "annual":
        return settings.stripe_price_talent_annual
    return None


def determine_plan(subscription: Dict[str, Any]) -> Optional[str]:
    """Plan from the configured price ids, then from subscription metadata."""
    items = (subscription.get("items") or {}).get("data") or []
    for item in items:
        price_id = (item.get("price") or {}).get("id")
        if not price_id:
            continue
        if settings.stripe_price_talent_monthly and price_id == settings.stripe_price_talent_monthly:
            return "monthly"
        if settings.stripe_price_talent_annual and price_id == settings.stripe_price_talent_annual:
            return "annual"
    metadata_plan = (subscription.get("metadata") or {}).get("plan")
    if metadata_plan in PLANS:
        return metadata_plan
    return None


def get_current_period_end(subscription: Dict[str, Any]) -> Optional[str]:
    """Newer API versions carry current_period_end on the items, older ones on the subscription."""
    items = (subscription.get("items") or {}).get("data") or []
    for item in items:
        if isinstance(item.get("current_period_end"), int):
            return datetime.fromtimestamp(item["current_period_end"], tz=timezone.utc).isoformat()
    legacy = subscription.get("current_period_end")
    if isinstance(legacy, int):
        return datetime.fromtimestamp(legacy, tz=timezone.utc).isoformat()
    return None
