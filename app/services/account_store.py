from typing import Optional, Protocol

from app.utils.logger import setup_logger

logger = setup_logger(__name__)


class AccountStore(Protocol):
    """Where payment outcomes land. Swap in a persistent implementation to update account state."""

    async def payment_succeeded(
        self,
        email: Optional[str],
        subscription_id: Optional[str],
        customer_id: Optional[str],
    ) -> None: ...

    async def subscription_cancelled(
        self,
        email: Optional[str],
        subscription_id: Optional[str],
        customer_id: Optional[str],
    ) -> None: ...

    async def payment_failed(
        self,
        email: Optional[str],
        invoice_id: Optional[str],
        customer_id: Optional[str],
    ) -> None: ...


class LoggingAccountStore:
    """Records payment outcomes in the log only."""

    async def payment_succeeded(self, email, subscription_id, customer_id) -> None:
        logger.info(f"Payment successful for: {email}")
        logger.info(f"Subscription ID: {subscription_id}")

    async def subscription_cancelled(self, email, subscription_id, customer_id) -> None:
        logger.info(f"Subscription cancelled for: {email}")

    async def payment_failed(self, email, invoice_id, customer_id) -> None:
        logger.info(f"Payment failed for: {email}")
