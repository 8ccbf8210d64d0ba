"""
MindWell Backend — Billing Routes
=================================

What:  Premium upgrade endpoints.

    POST /api/create-subscription  start a payment, return the client secret
    POST /api/stripe-webhook       verified processor callback (no bearer token;
                                   authenticated by the Stripe-Signature header)
    POST /api/mock-premium         grant premium without paying; mounted only
                                   outside production
"""

import logging

from fastapi import APIRouter, Depends, Request

from mindwell.dependencies import get_current_user, get_payment_processor, get_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import User
from mindwell.schemas.billing import SubscriptionResponse, WebhookAck
from mindwell.schemas.common import ErrorResponse
from mindwell.schemas.user import UserResponse
from mindwell.services.billing_service import BillingService
from mindwell.services.payment_base import PaymentProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Billing"])

# Mounted by create_app() only when ENVIRONMENT != production
dev_router = APIRouter(prefix="/api", tags=["Billing"])


def get_billing_service(
    store: EntityStore = Depends(get_store),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> BillingService:
    return BillingService(store, processor)


@router.post(
    "/create-subscription",
    response_model=SubscriptionResponse,
    responses={
        400: {"description": "Already premium", "model": ErrorResponse},
        500: {"description": "Payment processor unconfigured or failing", "model": ErrorResponse},
        503: {"description": "Payment processor circuit open", "model": ErrorResponse},
    },
    summary="Start a premium purchase",
)
async def create_subscription(
    user: User = Depends(get_current_user),
    billing: BillingService = Depends(get_billing_service),
) -> SubscriptionResponse:
    client_secret = await billing.create_subscription(user)
    return SubscriptionResponse(client_secret=client_secret)


@router.post(
    "/stripe-webhook",
    response_model=WebhookAck,
    responses={400: {"description": "Bad signature or payload", "model": ErrorResponse}},
    summary="Payment processor callback",
)
async def stripe_webhook(
    request: Request,
    billing: BillingService = Depends(get_billing_service),
) -> WebhookAck:
    # Signature covers the exact bytes received, so read the raw body
    payload = await request.body()
    event = billing.processor.construct_event(payload, request.headers.get("Stripe-Signature"))
    await billing.handle_event(event)
    return WebhookAck()


@dev_router.post(
    "/mock-premium",
    response_model=UserResponse,
    summary="Grant premium without payment (development only)",
)
async def mock_premium(
    user: User = Depends(get_current_user),
    billing: BillingService = Depends(get_billing_service),
) -> User:
    return await billing.grant_without_payment(user)
