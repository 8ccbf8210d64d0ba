"""
MindWell Backend — Billing Service (Premium Upgrade)
====================================================

What:  Orchestrates the premium upgrade between the entity store and the
       payment processor.
How:   A Payment record follows the intent through its lifecycle:

           pending ──succeeded──▶ confirmed ──▶ premium_granted
              │                      ▲
              └──failed──▶ failed ───┘ (customer retried on the same intent)

       Premium is granted only after the processor confirms the payment
       (webhook), unless PREMIUM_GRANT_MODE=on_intent, which grants as soon
       as the intent is created.
Who:   POST /api/create-subscription, POST /api/stripe-webhook,
       POST /api/mock-premium.

Failure isolation:
    The premium flag is never written before the processor has answered. A
    processor failure leaves both the user and the payment table untouched.
"""

import logging
from typing import Optional

from mindwell.config import settings
from mindwell.exceptions import ExternalServiceError, ValidationError
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import Payment, PaymentStatus, User
from mindwell.services.payment_base import (
    EVENT_PAYMENT_FAILED,
    EVENT_PAYMENT_SUCCEEDED,
    PaymentEvent,
    PaymentProcessor,
)

logger = logging.getLogger(__name__)


class BillingService:

    def __init__(
        self,
        store: EntityStore,
        processor: PaymentProcessor,
        grant_mode: Optional[str] = None,
    ):
        self.store = store
        self.processor = processor
        self.grant_mode = grant_mode or settings.premium_grant_mode

    async def create_subscription(self, user: User) -> str:
        """
        Start a premium purchase for `user` and return the intent's client secret.

        Raises:
            ExternalServiceError: processor unconfigured or failing.
            ValidationError: the user is already premium.
        """
        if not self.processor.is_configured:
            raise ExternalServiceError(message="Stripe is not configured")
        # Added rule: a premium user cannot start a second purchase
        if user.is_premium:
            raise ValidationError(
                message="User already has premium access", context={"user_id": user.id}
            )

        intent = await self.processor.create_payment_intent(
            amount=settings.subscription_amount,
            currency=settings.subscription_currency,
            metadata={"userId": str(user.id)},
        )
        payment = await self.store.create_payment(
            user.id, intent.id, intent.amount, intent.currency
        )
        logger.info(
            "Payment %d (%s) pending for user %d", payment.id, intent.id, user.id
        )

        if self.grant_mode == "on_intent":
            await self.store.update_user_premium_status(user.id, True)
            logger.info("Premium granted to user %d on intent creation", user.id)

        return intent.client_secret

    async def handle_event(self, event: PaymentEvent) -> Optional[Payment]:
        """
        Apply a verified processor event. Returns the updated payment, or None
        when the event is not about a payment this service created.
        """
        if event.type not in (EVENT_PAYMENT_SUCCEEDED, EVENT_PAYMENT_FAILED):
            logger.debug("Ignoring event %s of type %s", event.id, event.type)
            return None

        payment = (
            await self.store.get_payment_by_intent_id(event.intent_id)
            if event.intent_id else None
        )
        if payment is None:
            logger.warning("Event %s references unknown intent %s", event.id, event.intent_id)
            return None

        if event.type == EVENT_PAYMENT_FAILED:
            return await self._mark_failed(payment)
        return await self._confirm(payment, event.customer_id)

    async def _mark_failed(self, payment: Payment) -> Payment:
        if payment.status == PaymentStatus.FAILED:
            return payment
        payment = await self.store.update_payment_status(payment.id, PaymentStatus.FAILED)
        logger.info("Payment %d (%s) failed", payment.id, payment.intent_id)
        return payment

    async def _confirm(self, payment: Payment, customer_id: Optional[str]) -> Payment:
        if payment.status == PaymentStatus.PREMIUM_GRANTED:
            # Stripe redelivers events; the grant already happened
            return payment

        if payment.status != PaymentStatus.CONFIRMED:
            payment = await self.store.update_payment_status(payment.id, PaymentStatus.CONFIRMED)

        if customer_id:
            # A one-off payment intent is not a subscription; the intent id
            # stays on the Payment record only
            await self.store.update_user_stripe_info(payment.user_id, customer_id)
        else:
            await self.store.update_user_premium_status(payment.user_id, True)

        payment = await self.store.update_payment_status(
            payment.id, PaymentStatus.PREMIUM_GRANTED
        )
        logger.info(
            "Premium granted to user %d by payment %d (%s)",
            payment.user_id, payment.id, payment.intent_id,
        )
        return payment

    async def grant_without_payment(self, user: User) -> User:
        """Development shortcut behind POST /api/mock-premium."""
        updated = await self.store.update_user_premium_status(user.id, True)
        logger.info("Premium granted to user %d without payment", user.id)
        return updated
