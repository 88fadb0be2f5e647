"""HTTP-level tests for the Stripe proxy endpoints and health checks."""

from __future__ import annotations

from types import SimpleNamespace

from app.stripe.errors import ProviderError
from app.stripe.stripe_utils import ActiveSubscription
from app.utils.enums import CheckoutMode


# ── Health ────────────────────────────────────────────────────────────────


class TestHealth:
    def test_root(self, client, settings):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": f"{settings.APP_NAME} is running"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


# ── Checkout ──────────────────────────────────────────────────────────────


class TestCreateCheckoutSession:
    def test_defaults_to_subscription_mode(self, client, gateway):
        gateway.create_checkout_session.return_value = "cs_test_123"

        response = client.post(
            "/create-checkout-session",
            json={"priceId": "price_1", "customerEmail": "a@example.com"},
        )

        assert response.status_code == 200
        assert response.json() == {"id": "cs_test_123"}
        gateway.create_checkout_session.assert_called_once_with(
            price_id="price_1",
            customer_email="a@example.com",
            success_url="https://app.example.com/success?session_id={CHECKOUT_SESSION_ID}",
            cancel_url="https://app.example.com/upgrade",
            mode=CheckoutMode.subscription,
        )

    def test_explicit_mode(self, client, gateway):
        gateway.create_checkout_session.return_value = "cs_test_456"

        client.post(
            "/create-checkout-session",
            json={"priceId": "price_1", "customerEmail": "a@example.com", "mode": "payment"},
        )

        assert gateway.create_checkout_session.call_args.kwargs["mode"] == CheckoutMode.payment

    def test_provider_error_relayed_as_500(self, client, gateway):
        gateway.create_checkout_session.side_effect = ProviderError("No such price: 'price_x'")

        response = client.post(
            "/create-checkout-session",
            json={"priceId": "price_x", "customerEmail": "a@example.com"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "No such price: 'price_x'"}

    def test_missing_price_is_422(self, client, gateway):
        response = client.post("/create-checkout-session", json={"customerEmail": "a@example.com"})

        assert response.status_code == 422
        assert "priceId" in response.json()["detail"]
        gateway.create_checkout_session.assert_not_called()

    def test_email_forwarded_as_typed(self, client, gateway):
        """Stripe matches emails case-sensitively, so the caller's spelling is kept."""
        gateway.create_checkout_session.return_value = "cs_test_789"

        response = client.post(
            "/create-checkout-session",
            json={"priceId": "price_1", "customerEmail": "Jane.Doe@Example.COM"},
        )

        assert response.status_code == 200
        assert gateway.create_checkout_session.call_args.kwargs["customer_email"] == "Jane.Doe@Example.COM"

    def test_invalid_email_is_422(self, client, gateway):
        response = client.post(
            "/create-checkout-session",
            json={"priceId": "price_1", "customerEmail": "not-an-email"},
        )

        assert response.status_code == 422
        assert "customerEmail" in response.json()["detail"]
        gateway.create_checkout_session.assert_not_called()


# ── Billing portal ────────────────────────────────────────────────────────


class TestCreatePortalSession:
    def test_returns_portal_url(self, client, gateway):
        gateway.find_customer_by_email.return_value = SimpleNamespace(id="cus_1")
        gateway.create_portal_session.return_value = "https://billing.stripe.com/p/session/test"

        response = client.post("/create-portal-session", json={"customerEmail": "a@example.com"})

        assert response.status_code == 200
        assert response.json() == {"url": "https://billing.stripe.com/p/session/test"}
        gateway.create_portal_session.assert_called_once_with("cus_1", "https://app.example.com/account")

    def test_unknown_customer_is_404(self, client, gateway):
        gateway.find_customer_by_email.return_value = None

        response = client.post("/create-portal-session", json={"customerEmail": "nobody@example.com"})

        assert response.status_code == 404
        assert response.json() == {"error": "Customer not found"}
        gateway.create_portal_session.assert_not_called()

    def test_lookup_uses_email_as_typed(self, client, gateway):
        gateway.find_customer_by_email.return_value = SimpleNamespace(id="cus_1")
        gateway.create_portal_session.return_value = "https://billing.stripe.com/p/session/test"

        response = client.post("/create-portal-session", json={"customerEmail": "Jane.Doe@Example.COM"})

        assert response.status_code == 200
        gateway.find_customer_by_email.assert_called_once_with("Jane.Doe@Example.COM")


# ── Subscription status ───────────────────────────────────────────────────


class TestSubscriptionStatus:
    def test_unknown_customer_is_free(self, client, gateway):
        gateway.find_customer_by_email.return_value = None

        response = client.get("/subscription-status/nobody@example.com")

        assert response.status_code == 200
        assert response.json() == {"tier": "free", "active": False}

    def test_no_active_subscription_is_free(self, client, gateway):
        gateway.find_customer_by_email.return_value = SimpleNamespace(id="cus_1")
        gateway.get_active_subscription.return_value = None

        response = client.get("/subscription-status/a@example.com")

        assert response.json() == {"tier": "free", "active": False}
        gateway.get_active_subscription.assert_called_once_with("cus_1")

    def test_active_subscription_is_paid(self, client, gateway):
        gateway.find_customer_by_email.return_value = SimpleNamespace(id="cus_1")
        gateway.get_active_subscription.return_value = ActiveSubscription(
            status="active",
            current_period_end=1767225600,
            cancel_at_period_end=False,
        )

        response = client.get("/subscription-status/a@example.com")

        assert response.json() == {
            "tier": "paid",
            "active": True,
            "status": "active",
            "currentPeriodEnd": 1767225600,
            "cancelAtPeriodEnd": False,
        }

    def test_provider_error_relayed_as_500(self, client, gateway):
        gateway.find_customer_by_email.side_effect = ProviderError("Invalid API Key provided")

        response = client.get("/subscription-status/a@example.com")

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid API Key provided"}
