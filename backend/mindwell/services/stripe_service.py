"""
MindWell Backend — Stripe Payment Processor
===========================================

What:  PaymentProcessor implementation on the official `stripe` library.
How:   `stripe.StripeClient` (async calls over its httpx client) wrapped in
       tenacity retries and a circuit breaker. Webhook payloads are verified
       with `stripe.Webhook.construct_event`.
Who:   Built once by `create_app()`; called by BillingService.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter on connection errors
       and 5xx API errors. The library's own network retries are disabled so
       tenacity is the only retry layer. One idempotency key is reused across
       the attempts of a call, so a retry never creates a second intent.
    2. 4xx errors are final: the request itself is wrong, retrying won't help.
    3. Circuit breaker opens after cb_failure_threshold consecutive failed
       calls and rejects further calls until cb_recovery_timeout has passed.

Webhook Signature:
    Checked by the library against STRIPE_WEBHOOK_SECRET with a 300 second
    timestamp tolerance. Any verification or parse failure is a 400.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional

import stripe
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from mindwell.config import settings
from mindwell.exceptions import CircuitBreakerOpenError, ExternalServiceError, ValidationError
from mindwell.services.payment_base import PaymentEvent, PaymentIntent, PaymentProcessor

logger = logging.getLogger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


def is_transient(error: BaseException) -> bool:
    """Connection failures and 5xx answers are worth another attempt."""
    if isinstance(error, stripe.APIConnectionError):
        return True
    if isinstance(error, stripe.StripeError):
        return (error.http_status or 0) >= 500
    return False


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Stops calling the processor after repeated failures.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe; uvicorn async workers share a single process.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None
        self._clock = clock

    def can_execute(self) -> bool:
        """
        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = self._clock() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = max(int(self.recovery_timeout - elapsed), 1)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = self._clock()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════


# ══════════════════════════════════════════════════════════════════════════
# Stripe Service
# ══════════════════════════════════════════════════════════════════════════

def _field(obj: Any, key: str) -> Any:
    return obj[key] if key in obj else None


class StripeService(PaymentProcessor):
    """
    Stripe-backed payment processor.

    Every argument defaults to the matching setting; tests pass a stand-in
    for `stripe.StripeClient`, a no-wait retry policy and a fake breaker clock.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        client: Optional[stripe.StripeClient] = None,
        retry_wait: Optional[wait_base] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        self._secret_key = settings.stripe_secret_key if secret_key is None else secret_key
        self._webhook_secret = (
            settings.stripe_webhook_secret if webhook_secret is None else webhook_secret
        )
        self._client = client
        if self._client is None and self._secret_key:
            self._client = stripe.StripeClient(
                self._secret_key,
                base_addresses={"api": settings.stripe_api_base},
                http_client=stripe.HTTPXClient(timeout=settings.stripe_timeout),
                max_network_retries=0,
            )
        self._retry_wait = retry_wait or wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        )
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "StripeService initialized (configured=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds))",
            self.is_configured,
            self.circuit_breaker.failure_threshold,
            self.circuit_breaker.recovery_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._secret_key) and self._client is not None

    async def health_check(self) -> str:
        if not self.is_configured:
            return "unconfigured"
        if self.circuit_breaker.state == CircuitBreaker.OPEN:
            return "circuit_open"
        return "configured"

    # ── Payment intents ───────────────────────────────────────────────────

    async def create_payment_intent(
        self, amount: int, currency: str, metadata: Dict[str, str]
    ) -> PaymentIntent:
        if not self.is_configured:
            raise ExternalServiceError(message="Stripe is not configured")

        self.circuit_breaker.can_execute()

        params = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": metadata,
        }
        try:
            intent = await self._create_with_retry(params)
        except stripe.StripeError as e:
            if not is_transient(e):
                logger.warning(
                    "Stripe rejected payment intent creation (HTTP %s): %s",
                    e.http_status, e.user_message or str(e),
                )
                raise ExternalServiceError(
                    message="Payment processor rejected the request",
                    context={"status_code": e.http_status, "code": e.code},
                )
            self.circuit_breaker.record_failure()
            logger.error("Stripe payment intent creation failed after retries: %s", str(e))
            raise ExternalServiceError(
                context={"error_type": type(e).__name__, "attempts": settings.retry_max_attempts}
            )

        self.circuit_breaker.record_success()
        result = PaymentIntent(
            id=intent["id"],
            client_secret=intent["client_secret"],
            amount=_field(intent, "amount") or amount,
            currency=_field(intent, "currency") or currency,
            status=_field(intent, "status") or "requires_payment_method",
            customer_id=_field(intent, "customer"),
        )
        logger.info("Created payment intent %s for %d %s", result.id, amount, currency)
        return result

    async def _create_with_retry(self, params: Dict[str, Any]) -> stripe.PaymentIntent:
        options = {"idempotency_key": str(uuid.uuid4())}
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(settings.retry_max_attempts),
            wait=self._retry_wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                start_time = time.perf_counter()
                intent = await self._client.v1.payment_intents.create_async(
                    params=params, options=options
                )
                logger.debug(
                    "Stripe payment intent created in %.0fms",
                    (time.perf_counter() - start_time) * 1000,
                )
        return intent

    # ── Webhooks ──────────────────────────────────────────────────────────

    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        if not self._webhook_secret:
            raise ExternalServiceError(message="Stripe webhook secret is not configured")
        if not signature:
            raise ValidationError(field="Stripe-Signature")

        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self._webhook_secret, tolerance=SIGNATURE_TOLERANCE_SECONDS
            )
        except stripe.SignatureVerificationError as e:
            raise ValidationError(field="Stripe-Signature", context={"reason": str(e)})
        except ValueError:
            raise ValidationError(context={"reason": "payload is not JSON"})

        try:
            obj = event["data"]["object"]
            metadata = _field(obj, "metadata") or {}
            return PaymentEvent(
                id=event["id"],
                type=event["type"],
                intent_id=_field(obj, "id"),
                customer_id=_field(obj, "customer"),
                metadata={key: str(value) for key, value in metadata.items()},
            )
        except (KeyError, TypeError, AttributeError):
            raise ValidationError(context={"reason": "malformed event payload"})
