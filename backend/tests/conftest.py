"""
MindWell Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any mindwell import so the
       settings singleton never sees production values.

Fixture Hierarchy (all function-scoped):
    ├── store_clock:  stepping clock, one minute per call
    ├── store:        fresh InMemoryStore per test
    ├── processor:    FakePaymentProcessor (no network)
    ├── app:          create_app() wired to the three above
    ├── client:       HTTPX AsyncClient over ASGITransport
    └── make_user:    factory returning (User, Authorization headers)
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mindwell.exceptions import ExternalServiceError, ValidationError
from mindwell.main import create_app
from mindwell.repositories.memory import InMemoryStore
from mindwell.repositories.records import NewUser
from mindwell.security import create_access_token, hash_password
from mindwell.services.payment_base import PaymentEvent, PaymentIntent, PaymentProcessor

# Wednesday; the week started on Sunday 2026-10-11
TODAY = datetime(2026, 10, 14, 18, 0, tzinfo=timezone.utc)
STORE_START = datetime(2026, 10, 14, 8, 0, tzinfo=timezone.utc)


class StepClock:
    """Returns `start`, then advances by `step` on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now


class FakePaymentProcessor(PaymentProcessor):
    """
    In-process stand-in for Stripe.

    construct_event accepts only the signature "valid-signature" and reads
    the payload as a Stripe event JSON document.
    """

    VALID_SIGNATURE = "valid-signature"

    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self.configured = configured
        self.error = error
        self.intents: List[Dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def create_payment_intent(self, amount, currency, metadata):
        if not self.configured:
            raise ExternalServiceError(message="Stripe is not configured")
        if self.error is not None:
            raise self.error
        number = len(self.intents) + 1
        self.intents.append({"amount": amount, "currency": currency, "metadata": metadata})
        return PaymentIntent(
            id=f"pi_test_{number}",
            client_secret=f"pi_test_{number}_secret_abc",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
        )

    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        if signature != self.VALID_SIGNATURE:
            raise ValidationError(field="Stripe-Signature")
        event = json.loads(payload)
        obj = event["data"]["object"]
        return PaymentEvent(
            id=event["id"],
            type=event["type"],
            intent_id=obj.get("id"),
            customer_id=obj.get("customer"),
            metadata=obj.get("metadata") or {},
        )


def stripe_event(event_type: str, intent_id: str, customer: Optional[str] = None) -> bytes:
    """Minimal Stripe event document for `intent_id`."""
    obj = {"id": intent_id, "object": "payment_intent", "metadata": {}}
    if customer:
        obj["customer"] = customer
    return json.dumps({
        "id": f"evt_{intent_id}_{event_type}",
        "type": event_type,
        "data": {"object": obj},
    }).encode()


def sign_payload(payload: bytes, secret: str, timestamp: int) -> str:
    """Stripe-Signature header value for `payload`."""
    digest = hmac.new(
        secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={digest}"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store_clock():
    return StepClock(STORE_START)


@pytest.fixture
def store(store_clock):
    return InMemoryStore(clock=store_clock)


@pytest.fixture
def processor():
    return FakePaymentProcessor()


@pytest.fixture
def app(store, processor):
    return create_app(store=store, payment_processor=processor, clock=lambda: TODAY)


@pytest_asyncio.fixture
async def client(app):
    """
    Async HTTP client talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(store):
    """Factory: `user, headers = await make_user("alice")`."""

    async def _make_user(username: str, password: str = "s3cret-pass"):
        user = await store.create_user(
            NewUser(username=username, password=hash_password(password), email=f"{username}@example.com")
        )
        headers = {"Authorization": f"Bearer {create_access_token(user.id)}"}
        return user, headers

    return _make_user
