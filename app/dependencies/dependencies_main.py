from fastapi import Request
from app.config import Settings
from app.services.webhook_handler import WebhookHandler
from app.stripe.stripe_utils import StripeGateway


# Everything below is built once in create_app and parked on app.state


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> StripeGateway:
    return request.app.state.gateway


def get_webhook_handler(request: Request) -> WebhookHandler:
    return request.app.state.webhook_handler
