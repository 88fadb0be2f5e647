import stripe
from dataclasses import dataclass
from typing import Optional

from app.stripe.errors import ProviderError
from app.utils.enums import CheckoutMode
from app.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class ActiveSubscription:
    status: str
    current_period_end: Optional[int]
    cancel_at_period_end: Optional[bool]


class StripeGateway:
    """Blocking Stripe SDK calls. Run them with anyio.to_thread.run_sync from async code."""

    def __init__(self, api_key: str):
        self._api_key = api_key

    def _call(self, fn, *args, **kwargs):
        try:
            return fn(*args, api_key=self._api_key, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe request failed: {e}")
            raise ProviderError(e.user_message or str(e)) from e

    def get_customer_email(self, customer_id: str) -> Optional[str]:
        customer = self._call(stripe.Customer.retrieve, customer_id)
        # deleted customers come back without an email
        return getattr(customer, "email", None)

    def find_customer_by_email(self, email: str):
        customers = self._call(stripe.Customer.list, email=email, limit=1)
        if not customers.data:
            return None
        return customers.data[0]

    def create_checkout_session(
        self,
        price_id: str,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        mode: CheckoutMode = CheckoutMode.subscription,
    ) -> str:
        session = self._call(
            stripe.checkout.Session.create,
            mode=mode.value,
            payment_method_types=["card"],
            customer_email=customer_email,
            line_items=[
                {
                    "price": price_id,
                    "quantity": 1,
                },
            ],
            success_url=success_url,
            cancel_url=cancel_url,
            allow_promotion_codes=True,
            billing_address_collection="auto",
            metadata={"userEmail": customer_email},
        )
        return session.id

    def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = self._call(
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        return session.url

    def get_active_subscription(self, customer_id: str) -> Optional[ActiveSubscription]:
        subscriptions = self._call(
            stripe.Subscription.list,
            customer=customer_id,
            status="active",
            limit=1,
        )
        if not subscriptions.data:
            return None

        subscription = subscriptions.data[0]
        return ActiveSubscription(
            status=subscription.status,
            current_period_end=_current_period_end(subscription),
            cancel_at_period_end=getattr(subscription, "cancel_at_period_end", None),
        )


def _current_period_end(subscription) -> Optional[int]:
    # Newer API versions report the period on subscription items instead
    period_end = getattr(subscription, "current_period_end", None)
    if period_end is not None:
        return period_end

    try:
        items = subscription["items"]["data"]
    except (KeyError, TypeError):
        return None
    if items:
        return getattr(items[0], "current_period_end", None)
    return None
