from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from app.dependencies.dependencies_main import get_webhook_handler
from app.schemas.webhook_schema import WebhookAck
from app.services.webhook_handler import WebhookHandler
from app.stripe.errors import InvalidPayloadError, VerificationError
from app.utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(tags=["Webhooks"])


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
):
    # Raw bytes: re-serialized JSON would no longer match the signature
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    try:
        return await handler.handle(payload, sig_header)
    except InvalidPayloadError as e:
        logger.warning(f"Webhook body is not a Stripe event: {e.reason}")
        return _rejected(e)
    except VerificationError as e:
        logger.warning(f"Webhook signature verification failed: {e.reason}")
        return _rejected(e)


def _rejected(e: VerificationError) -> PlainTextResponse:
    return PlainTextResponse(
        f"Webhook Error: {e.reason}",
        status_code=status.HTTP_400_BAD_REQUEST,
    )
