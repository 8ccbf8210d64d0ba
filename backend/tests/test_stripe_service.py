"""
MindWell Backend — Stripe Service Tests
=======================================

What:  Unit tests for StripeService and its circuit breaker.
How:   A stand-in for `stripe.StripeClient` (AsyncMock) answers with real
       `stripe.PaymentIntent` objects or raises the library's own errors;
       retries use tenacity's wait_none() so nothing sleeps. Webhook tests
       sign payloads and let `stripe.Webhook` verify them. No network access.

What we test:
    ✅ Circuit breaker state machine (closed → open → half-open → closed)
    ✅ Payment intent parameters and idempotency key
    ✅ Retries on connection errors and 5xx, none on 4xx
    ✅ Breaker opens after exhausted calls
    ✅ Webhook signature verification
"""

import time
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import stripe
from tenacity import wait_none

from conftest import sign_payload, stripe_event
from mindwell.config import settings
from mindwell.exceptions import CircuitBreakerOpenError, ExternalServiceError, ValidationError
from mindwell.services.stripe_service import CircuitBreaker, StripeService, is_transient

WEBHOOK_SECRET = "whsec_test"


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeStripeClient:
    """`v1.payment_intents.create_async` returns or raises `outcomes` in order."""

    def __init__(self, *outcomes):
        self.create_async = AsyncMock(side_effect=list(outcomes))
        self.v1 = SimpleNamespace(
            payment_intents=SimpleNamespace(create_async=self.create_async)
        )


def payment_intent(intent_id: str = "pi_123") -> stripe.PaymentIntent:
    return stripe.PaymentIntent.construct_from(
        {
            "id": intent_id,
            "object": "payment_intent",
            "client_secret": f"{intent_id}_secret_xyz",
            "amount": 499,
            "currency": "usd",
            "status": "requires_payment_method",
            "customer": None,
        },
        "sk_test_123",
    )


def server_error() -> stripe.APIError:
    return stripe.APIError("upstream failure", http_status=502)


def connection_error() -> stripe.APIConnectionError:
    return stripe.APIConnectionError("connection refused")


def make_service(client, breaker=None) -> StripeService:
    return StripeService(
        secret_key="sk_test_123",
        webhook_secret=WEBHOOK_SECRET,
        client=client,
        retry_wait=wait_none(),
        circuit_breaker=breaker or CircuitBreaker(failure_threshold=2, recovery_timeout=60),
    )


class TestCircuitBreaker:

    def test_opens_after_threshold(self):
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60, clock=clock)
        breaker.record_failure()
        assert breaker.can_execute() is True
        breaker.record_failure()
        assert breaker.state == CircuitBreaker.OPEN

        clock.now = 15
        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            breaker.can_execute()
        assert exc_info.value.recovery_time == 45

    def test_half_open_then_recovers(self):
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60, clock=clock)
        breaker.record_failure()

        clock.now = 60
        assert breaker.can_execute() is True
        assert breaker.state == CircuitBreaker.HALF_OPEN
        breaker.record_success()
        assert breaker.state == CircuitBreaker.CLOSED
        assert breaker.failure_count == 0

    def test_half_open_failure_reopens(self):
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=60, clock=clock)
        for _ in range(3):
            breaker.record_failure()
        clock.now = 61
        breaker.can_execute()
        breaker.record_failure()
        assert breaker.state == CircuitBreaker.OPEN


class TestTransientErrors:

    @pytest.mark.parametrize("error,expected", [
        (connection_error(), True),
        (server_error(), True),
        (stripe.InvalidRequestError("bad currency", "currency", http_status=400), False),
        (stripe.CardError("declined", None, "card_declined", http_status=402), False),
        (RuntimeError("boom"), False),
    ])
    def test_classification(self, error, expected):
        assert is_transient(error) is expected


class TestCreatePaymentIntent:

    @pytest.mark.asyncio
    async def test_parameters(self):
        client = FakeStripeClient(payment_intent())
        intent = await make_service(client).create_payment_intent(499, "usd", {"userId": "7"})

        assert intent.id == "pi_123"
        assert intent.client_secret == "pi_123_secret_xyz"
        assert intent.customer_id is None

        call = client.create_async.call_args
        assert call.kwargs["params"] == {
            "amount": 499,
            "currency": "usd",
            "automatic_payment_methods": {"enabled": True},
            "metadata": {"userId": "7"},
        }
        assert call.kwargs["options"]["idempotency_key"]

    @pytest.mark.asyncio
    async def test_5xx_is_retried_with_same_idempotency_key(self):
        client = FakeStripeClient(server_error(), payment_intent())
        service = make_service(client)

        intent = await service.create_payment_intent(499, "usd", {"userId": "7"})

        assert intent.id == "pi_123"
        first, second = client.create_async.call_args_list
        assert first.kwargs["options"] == second.kwargs["options"]
        assert service.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_4xx_is_not_retried(self):
        client = FakeStripeClient(
            stripe.InvalidRequestError("Invalid currency", "currency", http_status=400)
        )
        service = make_service(client)

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.create_payment_intent(499, "zzz", {})

        assert exc_info.value.message == "Payment processor rejected the request"
        assert client.create_async.await_count == 1
        assert service.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_exhausted_retries_count_against_breaker(self):
        attempts = 2 * settings.retry_max_attempts
        client = FakeStripeClient(*[connection_error() for _ in range(attempts)])
        service = make_service(client)

        for _ in range(2):
            with pytest.raises(ExternalServiceError):
                await service.create_payment_intent(499, "usd", {})
        assert client.create_async.await_count == attempts
        assert service.circuit_breaker.state == CircuitBreaker.OPEN

        with pytest.raises(CircuitBreakerOpenError):
            await service.create_payment_intent(499, "usd", {})
        assert client.create_async.await_count == attempts
        assert await service.health_check() == "circuit_open"

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        service = StripeService(secret_key="", webhook_secret="")
        assert service.is_configured is False
        assert await service.health_check() == "unconfigured"
        with pytest.raises(ExternalServiceError) as exc_info:
            await service.create_payment_intent(499, "usd", {})
        assert exc_info.value.message == "Stripe is not configured"

    def test_configured_service_builds_library_client(self):
        service = StripeService(secret_key="sk_test_123", webhook_secret="")
        assert service.is_configured is True
        assert isinstance(service._client, stripe.StripeClient)


class TestConstructEvent:

    def service(self) -> StripeService:
        return make_service(FakeStripeClient())

    def test_valid_signature(self):
        payload = stripe_event("payment_intent.succeeded", "pi_9", customer="cus_1")
        header = sign_payload(payload, WEBHOOK_SECRET, int(time.time()))

        event = self.service().construct_event(payload, header)

        assert event.type == "payment_intent.succeeded"
        assert event.intent_id == "pi_9"
        assert event.customer_id == "cus_1"
        assert event.metadata == {}

    def test_any_matching_v1_is_accepted(self):
        payload = stripe_event("payment_intent.succeeded", "pi_9")
        now = int(time.time())
        header = sign_payload(payload, WEBHOOK_SECRET, now)
        rotated = f"t={now},v1=deadbeef," + header.split(",", 1)[1]
        assert self.service().construct_event(payload, rotated).intent_id == "pi_9"

    @pytest.mark.parametrize("header", [
        None,
        "",
        "v1=abc",
        "t=notanumber,v1=abc",
    ])
    def test_malformed_header(self, header):
        payload = stripe_event("payment_intent.succeeded", "pi_9")
        with pytest.raises(ValidationError):
            self.service().construct_event(payload, header)

    def test_tampered_payload(self):
        payload = stripe_event("payment_intent.succeeded", "pi_9")
        header = sign_payload(payload, WEBHOOK_SECRET, int(time.time()))
        tampered = stripe_event("payment_intent.succeeded", "pi_other")
        with pytest.raises(ValidationError):
            self.service().construct_event(tampered, header)

    def test_wrong_secret(self):
        payload = stripe_event("payment_intent.succeeded", "pi_9")
        header = sign_payload(payload, "whsec_other", int(time.time()))
        with pytest.raises(ValidationError):
            self.service().construct_event(payload, header)

    def test_stale_timestamp(self):
        payload = stripe_event("payment_intent.succeeded", "pi_9")
        header = sign_payload(payload, WEBHOOK_SECRET, int(time.time()) - 301)
        with pytest.raises(ValidationError):
            self.service().construct_event(payload, header)

    def test_signed_non_json_is_rejected(self):
        payload = b"not json"
        header = sign_payload(payload, WEBHOOK_SECRET, int(time.time()))
        with pytest.raises(ValidationError):
            self.service().construct_event(payload, header)

    def test_signed_event_without_data_is_rejected(self):
        payload = b'{"id": "evt_1", "type": "payment_intent.succeeded"}'
        header = sign_payload(payload, WEBHOOK_SECRET, int(time.time()))
        with pytest.raises(ValidationError):
            self.service().construct_event(payload, header)

    def test_missing_webhook_secret(self):
        service = StripeService(secret_key="sk_test_123", webhook_secret="", client=FakeStripeClient())
        with pytest.raises(ExternalServiceError):
            service.construct_event(b"{}", "t=1,v1=abc")
