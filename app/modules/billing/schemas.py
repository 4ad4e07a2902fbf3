from pydantic import BaseModel
from typing import Literal, Optional


class CheckoutRequest(BaseModel):
    plan: Literal["monthly", "annual"]


class BillingSessionResponse(BaseModel):
    url: str


class SubscriptionSummary(BaseModel):
    subscription_status: Optional[str] = "none"
    subscription_plan: Optional[str] = None
    subscription_current_period_end: Optional[str] = None
    is_active: bool = False
    needs_subscription: bool = True
    has_payment_issues: bool = False
