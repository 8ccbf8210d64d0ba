"""
MindWell Backend — Health Check Route
=====================================

What:  GET /health for container health checks and load balancers.

Status levels:
    - healthy:   store reachable, payment processor configured and closed
    - degraded:  store reachable, processor unconfigured or circuit open
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from mindwell import __version__
from mindwell.dependencies import get_payment_processor, get_store
from mindwell.repositories.base import EntityStore
from mindwell.schemas.common import HealthResponse
from mindwell.services.payment_base import PaymentProcessor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: EntityStore = Depends(get_store),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> HealthResponse:
    storage_status = "connected"
    overall = "healthy"

    if not await store.health_check():
        storage_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: entity store unreachable")

    payments_status = await processor.health_check()
    if payments_status != "configured" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        storage=storage_status,
        payments=payments_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
