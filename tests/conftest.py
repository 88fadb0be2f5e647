"""Shared fixtures for the payment API test suite."""

from __future__ import annotations

import os

# Console-only logging while testing; must be set before app modules import
os.environ.setdefault("LOG_DIR", "")

import hashlib
import hmac
import json
import time
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.services.account_store import LoggingAccountStore
from app.stripe.stripe_utils import StripeGateway

WEBHOOK_SECRET = "whsec_test_secret"


def _sign(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header: t=<ts>,v1=<hex hmac of '<ts>.<body>'>."""
    ts = timestamp or int(time.time())
    signed_payload = f"{ts}.".encode() + body
    sig = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def _event_body(event_type: str, obj: dict[str, Any] | None = None, event_id: str = "evt_test") -> bytes:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {"object": obj or {}},
        }
    ).encode()


@pytest.fixture()
def sign() -> Callable[..., str]:
    return _sign


@pytest.fixture()
def event_body() -> Callable[..., bytes]:
    return _event_body


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        STRIPE_SECRET_KEY="sk_test_dummy",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        FRONTEND_URL="https://app.example.com",
    )


@pytest.fixture()
def gateway() -> MagicMock:
    return MagicMock(spec=StripeGateway)


@pytest.fixture()
def account_store() -> AsyncMock:
    return AsyncMock(spec=LoggingAccountStore)


@pytest.fixture()
def client(settings, gateway, account_store) -> TestClient:
    app = create_app(settings, gateway=gateway, account_store=account_store)
    with TestClient(app) as c:
        yield c
