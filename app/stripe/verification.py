"""Stripe webhook verification and decoding.

The signature is checked by the Stripe SDK over the raw request body
(HMAC-SHA256 of "<timestamp>.<body>", constant-time compare, timestamp
tolerance). Only a verified body is parsed into a VerifiedEvent.
"""
from typing import Any, Dict, Optional

import stripe
from pydantic import BaseModel, ValidationError

from app.schemas.webhook_schema import (
    CheckoutSession,
    CheckoutSessionCompleted,
    Invoice,
    InvoicePaymentFailed,
    StripeEventEnvelope,
    Subscription,
    SubscriptionCancelled,
    UnrecognizedEvent,
    VerifiedEvent,
)
from app.stripe.errors import InvalidPayloadError, VerificationError
from app.utils.enums import EventKind
from app.utils.logger import setup_logger

logger = setup_logger(__name__)

# event type -> (event model, field holding the data object, data object model)
EVENT_MODELS = {
    EventKind.checkout_session_completed.value: (CheckoutSessionCompleted, "session", CheckoutSession),
    EventKind.subscription_deleted.value: (SubscriptionCancelled, "subscription", Subscription),
    EventKind.invoice_payment_failed.value: (InvoicePaymentFailed, "invoice", Invoice),
}


def verify_signature(
    raw_body: bytes,
    signature_header: Optional[str],
    secret: str,
    tolerance: int,
) -> str:
    """Check the Stripe-Signature header against the untouched body.

    Returns the body decoded as text. Raises VerificationError on a missing,
    malformed, stale or mismatching signature.
    """
    if not signature_header:
        raise VerificationError("Missing stripe-signature header")

    try:
        payload = raw_body.decode("utf-8")
    except UnicodeDecodeError:
        raise VerificationError("Payload is not valid UTF-8")

    try:
        stripe.WebhookSignature.verify_header(
            payload, signature_header, secret, tolerance=tolerance
        )
    except stripe.SignatureVerificationError as e:
        raise VerificationError(e.user_message or str(e)) from e

    return payload


def decode_event(payload: str) -> VerifiedEvent:
    """Parse a verified body.

    Unknown event types decode to UnrecognizedEvent. Fields of a known event
    that do not have the expected shape are dropped and logged; only a body
    that is not an event at all raises InvalidPayloadError.
    """
    try:
        envelope = StripeEventEnvelope.model_validate_json(payload)
    except ValidationError as e:
        raise InvalidPayloadError(f"Invalid payload: {_first_error(e)}") from e

    entry = EVENT_MODELS.get(envelope.type)
    if entry is None:
        return UnrecognizedEvent(event_id=envelope.id, raw_kind=envelope.type)

    event_model, field_name, object_model = entry
    data_object = _read_object(object_model, envelope.data_object, envelope)
    return event_model(event_id=envelope.id, **{field_name: data_object})


def construct_event(
    raw_body: bytes,
    signature_header: Optional[str],
    secret: str,
    tolerance: int,
) -> VerifiedEvent:
    payload = verify_signature(raw_body, signature_header, secret, tolerance)
    return decode_event(payload)


def _read_object(object_model, raw: Any, envelope: StripeEventEnvelope) -> BaseModel:
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"Event {envelope.id} ({envelope.type}) has a non-object data.object, ignoring it")
        raw = {}

    try:
        return object_model.model_validate(raw)
    except ValidationError as e:
        unreadable = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
        logger.warning(
            f"Event {envelope.id} ({envelope.type}): dropping unreadable fields {sorted(unreadable)}"
        )
        readable: Dict[str, Any] = {k: v for k, v in raw.items() if k not in unreadable}
        return object_model.model_validate(readable)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(map(str, err["loc"]))
    return f"{loc}: {err['msg']}" if loc else err["msg"]
