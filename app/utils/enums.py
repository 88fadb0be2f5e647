from enum import Enum


class EventKind(Enum):
    checkout_session_completed = "checkout.session.completed"
    subscription_deleted = "customer.subscription.deleted"
    invoice_payment_failed = "invoice.payment_failed"


class SubscriptionTier(Enum):
    free = "free"
    paid = "paid"


class CheckoutMode(Enum):
    payment = "payment"
    setup = "setup"
    subscription = "subscription"
