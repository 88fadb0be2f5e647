"""Webhook ingestion: verify, decode, dispatch, acknowledge.

Each delivery is handled on its own; nothing is shared between requests
and nothing is deduplicated, so a redelivered event runs its branch again.
"""
from typing import Optional

import anyio

from app.schemas.webhook_schema import (
    CheckoutSessionCompleted,
    InvoicePaymentFailed,
    SubscriptionCancelled,
    UnrecognizedEvent,
    VerifiedEvent,
    WebhookAck,
)
from app.services.account_store import AccountStore
from app.stripe.errors import ProviderError
from app.stripe.stripe_utils import StripeGateway
from app.stripe.verification import construct_event
from app.utils.logger import setup_logger

logger = setup_logger(__name__)


class WebhookHandler:
    def __init__(
        self,
        secret: str,
        gateway: StripeGateway,
        account_store: AccountStore,
        tolerance: int,
    ):
        if not secret:
            raise ValueError("Webhook signing secret is not configured")

        self._secret = secret
        self._gateway = gateway
        self._account_store = account_store
        self._tolerance = tolerance

        # One entry per VerifiedEvent variant
        self._dispatch_table = {
            CheckoutSessionCompleted: self._handle_successful_payment,
            SubscriptionCancelled: self._handle_cancellation,
            InvoicePaymentFailed: self._handle_failed_payment,
            UnrecognizedEvent: self._handle_unrecognized,
        }

    async def handle(self, raw_body: bytes, signature_header: Optional[str]) -> WebhookAck:
        """Verify and dispatch one delivery.

        Raises VerificationError before anything is dispatched if the body is
        not authentic. Any verified event is acknowledged, handled or not, so
        Stripe stops retrying it.
        """
        event = self.verify(raw_body, signature_header)
        await self.dispatch(event)
        return WebhookAck(received=True)

    def verify(self, raw_body: bytes, signature_header: Optional[str]) -> VerifiedEvent:
        return construct_event(raw_body, signature_header, self._secret, self._tolerance)

    async def dispatch(self, event: VerifiedEvent) -> None:
        branch = self._dispatch_table[type(event)]
        await branch(event)

    # ============================================================
    # BRANCHES
    # ============================================================
    async def _handle_successful_payment(self, event: CheckoutSessionCompleted) -> None:
        session = event.session
        customer_email = session.payer_email
        if customer_email is None:
            logger.warning(f"Checkout session {session.id} has no payer email")

        await self._account_store.payment_succeeded(
            customer_email, session.subscription, session.customer
        )

    async def _handle_cancellation(self, event: SubscriptionCancelled) -> None:
        subscription = event.subscription
        customer_email = None

        if subscription.customer is None:
            logger.warning(f"Subscription {subscription.id} has no customer")
        else:
            try:
                customer_email = await anyio.to_thread.run_sync(
                    self._gateway.get_customer_email, subscription.customer
                )
            except ProviderError as e:
                logger.error(
                    f"Could not look up customer {subscription.customer} "
                    f"for cancelled subscription {subscription.id}: {e.message}"
                )

        await self._account_store.subscription_cancelled(
            customer_email, subscription.id, subscription.customer
        )

    async def _handle_failed_payment(self, event: InvoicePaymentFailed) -> None:
        invoice = event.invoice
        if invoice.customer_email is None:
            logger.warning(f"Invoice {invoice.id} has no customer email")

        await self._account_store.payment_failed(
            invoice.customer_email, invoice.id, invoice.customer
        )

    async def _handle_unrecognized(self, event: UnrecognizedEvent) -> None:
        logger.info(f"Unhandled event type: {event.raw_kind}")
