from functools import partial

import anyio
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from app.config import Settings
from app.dependencies.dependencies_main import get_app_settings, get_gateway
from app.schemas.billing_schema import (
    CheckoutSessionCreate, CheckoutSessionResponse,
    PortalSessionCreate, PortalSessionResponse,
    SubscriptionStatusResponse,
)
from app.stripe.stripe_utils import StripeGateway
from app.utils.enums import CheckoutMode, SubscriptionTier

router = APIRouter(tags=["Billing"])


# ============================================================
# CREATE CHECKOUT SESSION
# ============================================================
@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    data: CheckoutSessionCreate,
    settings: Settings = Depends(get_app_settings),
    gateway: StripeGateway = Depends(get_gateway),
):
    session_id = await anyio.to_thread.run_sync(
        partial(
            gateway.create_checkout_session,
            price_id=data.price_id,
            customer_email=data.customer_email,
            success_url=settings.checkout_success_url,
            cancel_url=settings.checkout_cancel_url,
            mode=data.mode or CheckoutMode.subscription,
        )
    )
    return {"id": session_id}


# ============================================================
# CREATE BILLING PORTAL SESSION
# ============================================================
@router.post(
    "/create-portal-session",
    response_model=PortalSessionResponse,
    responses={404: {"description": "Customer not found"}},
)
async def create_portal_session(
    data: PortalSessionCreate,
    settings: Settings = Depends(get_app_settings),
    gateway: StripeGateway = Depends(get_gateway),
):
    customer = await anyio.to_thread.run_sync(
        gateway.find_customer_by_email, data.customer_email
    )
    if customer is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Customer not found"},
        )

    url = await anyio.to_thread.run_sync(
        gateway.create_portal_session, customer.id, settings.portal_return_url
    )
    return {"url": url}


# ============================================================
# SUBSCRIPTION STATUS
# ============================================================
@router.get(
    "/subscription-status/{email}",
    response_model=SubscriptionStatusResponse,
    response_model_exclude_none=True,
)
async def get_subscription_status(
    email: str,
    gateway: StripeGateway = Depends(get_gateway),
):
    free = SubscriptionStatusResponse(tier=SubscriptionTier.free, active=False)

    customer = await anyio.to_thread.run_sync(gateway.find_customer_by_email, email)
    if customer is None:
        return free

    subscription = await anyio.to_thread.run_sync(
        gateway.get_active_subscription, customer.id
    )
    if subscription is None:
        return free

    return SubscriptionStatusResponse(
        tier=SubscriptionTier.paid,
        active=True,
        status=subscription.status,
        current_period_end=subscription.current_period_end,
        cancel_at_period_end=subscription.cancel_at_period_end,
    )
