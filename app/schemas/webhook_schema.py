from pydantic import BaseModel, ConfigDict
from typing import Any, ClassVar, Dict, Optional, Union
from app.utils.enums import EventKind


# ============================================================
# STRIPE OBJECTS (only the fields the handlers read)
# ============================================================
class CheckoutSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    customer: Optional[str] = None
    customer_email: Optional[str] = None
    subscription: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def payer_email(self) -> Optional[str]:
        """Explicit customer email first, then the email stamped into metadata at checkout."""
        if self.customer_email:
            return self.customer_email
        return (self.metadata or {}).get("userEmail")


class Subscription(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    customer: Optional[str] = None


class Invoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    customer: Optional[str] = None
    customer_email: Optional[str] = None


# ============================================================
# VERIFIED EVENTS (tagged union)
# ============================================================
class CheckoutSessionCompleted(BaseModel):
    kind: ClassVar[EventKind] = EventKind.checkout_session_completed

    event_id: Optional[str] = None
    session: CheckoutSession


class SubscriptionCancelled(BaseModel):
    kind: ClassVar[EventKind] = EventKind.subscription_deleted

    event_id: Optional[str] = None
    subscription: Subscription


class InvoicePaymentFailed(BaseModel):
    kind: ClassVar[EventKind] = EventKind.invoice_payment_failed

    event_id: Optional[str] = None
    invoice: Invoice


class UnrecognizedEvent(BaseModel):
    event_id: Optional[str] = None
    raw_kind: str


VerifiedEvent = Union[
    CheckoutSessionCompleted,
    SubscriptionCancelled,
    InvoicePaymentFailed,
    UnrecognizedEvent,
]


class StripeEventEnvelope(BaseModel):
    """Outer shape shared by every Stripe event."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    data: Any = None

    @property
    def data_object(self) -> Any:
        return self.data.get("object") if isinstance(self.data, dict) else None


class WebhookAck(BaseModel):
    received: bool = True
