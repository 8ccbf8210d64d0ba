"""
MindWell Backend — Abstract Payment Processor Interface
=======================================================

What:  Contract for the external payment processor behind the premium upgrade.
How:   Concrete processors inherit from PaymentProcessor. StripeService is the
       production implementation; tests substitute an in-process fake.
Who:   Called by BillingService; checked by GET /health.

Contract:
    - Implementations handle their own retries and translate every transport
      or API failure into ExternalServiceError.
    - An unconfigured processor reports is_configured=False and raises
      ExternalServiceError("Stripe is not configured") from every call.
    - construct_event() verifies the payload signature before parsing it;
      a bad signature raises ValidationError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

# Webhook event types BillingService acts on
EVENT_PAYMENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str
    status: str
    customer_id: Optional[str] = None


@dataclass(frozen=True)
class PaymentEvent:
    """A verified processor notification about one payment intent."""
    id: str
    type: str
    intent_id: Optional[str]
    customer_id: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


class PaymentProcessor(ABC):

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        ...

    @abstractmethod
    async def create_payment_intent(
        self, amount: int, currency: str, metadata: Dict[str, str]
    ) -> PaymentIntent:
        """
        Create a payment intent for `amount` (smallest currency unit).

        Raises:
            ExternalServiceError: unconfigured, rejected, or failed after retries.
            CircuitBreakerOpenError: too many recent failures.
        """
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        """
        Verify and parse a webhook payload.

        Raises:
            ValidationError: missing/invalid signature or malformed payload.
            ExternalServiceError: webhook secret not configured.
        """
        ...

    async def health_check(self) -> str:
        """One of: configured, unconfigured, circuit_open."""
        return "configured" if self.is_configured else "unconfigured"
