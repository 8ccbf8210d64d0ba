"""
MindWell Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       The entity store, payment processor and clock are built here (or
       injected by tests) and kept on `app.state`.
Who:   uvicorn (`uvicorn mindwell.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware: RateLimit → RequestID → Logging → GZip → CORS│
    │                                                          │
    │  Routes:                                                 │
    │   /api/register, /api/login, /api/user                   │
    │   /api/journal-entries[/{id}]   /api/mood                │
    │   /api/mindfulness-sessions[...] /api/reflection-prompts │
    │   /api/create-subscription  /api/stripe-webhook          │
    │   /api/insights/...          /health                     │
    │                                                          │
    │  Exception Handlers: MindWellError subclasses → 4xx/5xx  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → store.initialize()
    Shutdown: store.close()
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncGenerator, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from mindwell import __version__
from mindwell.config import settings
from mindwell.exceptions import (
    CircuitBreakerOpenError,
    DatabaseError,
    DuplicateUsernameError,
    ExternalServiceError,
    ForbiddenError,
    MindWellError,
    NotFoundError,
    PaymentStateError,
    UnauthorizedError,
    ValidationError,
)
from mindwell.middleware.logging import RequestLoggingMiddleware
from mindwell.middleware.rate_limit import RateLimitMiddleware
from mindwell.middleware.request_id import RequestIDMiddleware, request_id_var
from mindwell.repositories import build_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.memory import utc_now
from mindwell.routes import auth, billing, catalog, health, insights, journal, mood
from mindwell.services.payment_base import PaymentProcessor
from mindwell.services.stripe_service import StripeService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure the root logger once, at startup."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every connection/statement at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("MindWell Backend %s starting up (%s)", __version__, settings.environment)

    # Keep serving on bad config: /health and the error bodies report it
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    store: EntityStore = app.state.store
    await store.initialize()
    logger.info("Entity store ready: %s", type(store).__name__)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("MindWell Backend shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(
    error: str, message: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body
    `{error, message, details?, request_id}`.

    `context` on MindWellError is logged, never returned; the only details
    sent to clients are retry hints and, outside production, the text of
    unexpected exceptions.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Unparseable JSON and malformed path/query parameters
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), exc.errors())
        return JSONResponse(status_code=400, content=_error_body("validation_error", "Invalid data"))

    @app.exception_handler(DuplicateUsernameError)
    async def handle_duplicate_username(request: Request, exc: DuplicateUsernameError):
        return JSONResponse(
            status_code=400, content=_error_body("duplicate_username", exc.message)
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning(
            "[%s] Validation error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return JSONResponse(status_code=400, content=_error_body("validation_error", exc.message))

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return JSONResponse(status_code=403, content=_error_body("forbidden", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(PaymentStateError)
    async def handle_payment_state(request: Request, exc: PaymentStateError):
        logger.warning("[%s] %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=409, content=_error_body("payment_state_conflict", exc.message)
        )

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=503,
            content=_error_body(
                "service_unavailable", exc.message, {"recovery_time": exc.recovery_time}
            ),
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service(request: Request, exc: ExternalServiceError):
        logger.error(
            "[%s] Payment processor error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500, content=_error_body("external_service_error", exc.message)
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(MindWellError)
    async def handle_mindwell_error(request: Request, exc: MindWellError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        details = None if settings.is_production else {"exception": str(exc)}
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                details,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    store: Optional[EntityStore] = None,
    payment_processor: Optional[PaymentProcessor] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        store: Entity store; built from STORAGE_BACKEND when omitted.
        payment_processor: Defaults to StripeService configured from settings.
        clock: Source of "now" for date-based insights; UTC wall time by default.
    """
    app = FastAPI(
        title="MindWell API",
        description=(
            "Backend for the MindWell mental-wellness app: journaling, mood tracking, "
            "mindfulness sessions, reflection prompts and premium upgrades."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.store = store or build_store()
    app.state.payment_processor = payment_processor or StripeService()
    app.state.clock = clock or utc_now

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(journal.router)
    app.include_router(mood.router)
    app.include_router(catalog.router)
    app.include_router(billing.router)
    if not settings.is_production:
        app.include_router(billing.dev_router)
    app.include_router(insights.router)
    app.include_router(health.router)

    return app


app = create_app()
