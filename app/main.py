from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from app.config import Settings, get_settings
from app.routers import billing, webhooks
from app.services.account_store import AccountStore, LoggingAccountStore
from app.services.webhook_handler import WebhookHandler
from app.stripe.errors import ProviderError
from app.stripe.stripe_utils import StripeGateway
from app.utils.logger import setup_logger

logger = setup_logger(__name__)


def create_app(
    settings: Settings,
    gateway: Optional[StripeGateway] = None,
    account_store: Optional[AccountStore] = None,
) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Stripe checkout, billing portal and webhook API",
        version="1.0.0",
        debug=settings.DEBUG,
    )

    # Collaborators are built once and shared by every request
    app.state.settings = settings
    app.state.gateway = gateway or StripeGateway(settings.STRIPE_SECRET_KEY)
    app.state.account_store = account_store or LoggingAccountStore()
    app.state.webhook_handler = WebhookHandler(
        secret=settings.STRIPE_WEBHOOK_SECRET,
        gateway=app.state.gateway,
        account_store=app.state.account_store,
        tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(webhooks.router)
    app.include_router(billing.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Extract messages from the list of errors
        errors = [f"{'.'.join(map(str, e['loc'][1:]))}: {e['msg']}" for e in exc.errors()]
        return JSONResponse(
            status_code=422,
            content={"detail": ", ".join(errors)}  # Join them into a single string
        )

    @app.exception_handler(ProviderError)
    async def provider_exception_handler(request: Request, exc: ProviderError):
        logger.error(f"Error handling {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"error": exc.message}
        )

    @app.get("/")
    async def root():
        return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


def get_application() -> FastAPI:
    """App factory for servers: uvicorn --factory app.main:get_application"""
    return create_app(get_settings())


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info(f"Payment API running on port {settings.PORT}")
    uvicorn.run("app.main:get_application", factory=True, host="0.0.0.0", port=settings.PORT)
