"""
OnboardTicket API - Main Application Entry Point

Flight booking backend:
- Pending bookings with unique PNRs, for accounts and guests
- Card, Stripe and PayPal payments with at most one completed payment per booking
- PDF e-tickets with a guest-lookup QR code
- Structured logging with request correlation and Prometheus metrics
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from onboard.api.middleware import RequestLoggingMiddleware
from onboard.api.router import api_router
from onboard.core.config import Settings, get_settings
from onboard.core.exceptions import register_exception_handlers
from onboard.core.logging import get_logger, setup_logging
from onboard.core.metrics import metrics_endpoint
from onboard.core.security import TokenStore, build_token_store
from onboard.infrastructure.mailer import SmtpMailer
from onboard.infrastructure.paypal_client import PayPalGateway
from onboard.infrastructure.stripe_client import StripeGateway
from onboard.services.airport_directory import get_airport_directory
from onboard.services.auth_service import ensure_system_users
from onboard.services.interfaces.storage import StorageProvider
from onboard.services.notification_service import NotificationDispatcher
from onboard.services.payment_service import PaymentOrchestrator
from onboard.services.storage_factory import build_storage_provider
from onboard.services.ticket_generator import TicketGenerator

logger = get_logger(__name__)


async def init_services(
    app: FastAPI,
    settings: Settings,
    storage: Optional[StorageProvider] = None,
    tokens: Optional[TokenStore] = None,
    mailer: Optional[SmtpMailer] = None,
) -> None:
    """
    Build every long-lived collaborator once and park it on app.state.

    Storage and tokens may be passed in; otherwise they are selected from
    settings. Nothing is re-decided per request.
    """
    directory = get_airport_directory()
    os.makedirs(settings.TICKETS_DIR, exist_ok=True)
    if storage is None:
        storage = build_storage_provider(settings, directory)
    await storage.startup()
    async with storage.session() as session:
        await ensure_system_users(session, settings)

    notifier = NotificationDispatcher(settings, mailer)
    tickets = TicketGenerator(settings, directory)

    app.state.settings = settings
    app.state.directory = directory
    app.state.storage = storage
    app.state.tokens = tokens if tokens is not None else build_token_store(settings)
    app.state.notifier = notifier
    app.state.tickets = tickets
    app.state.payments = PaymentOrchestrator(
        settings, StripeGateway(settings), PayPalGateway(settings), tickets, notifier
    )

    if settings.PAYMENTS_DEMO_MODE:
        logger.warning("payments_demo_mode", message="Stripe and PayPal calls are simulated")


async def close_services(app: FastAPI) -> None:
    await app.state.tokens.close()
    await app.state.storage.shutdown()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle: startup and shutdown hooks."""
        setup_logging()
        logger.info(
            "application_starting",
            app=settings.APP_NAME,
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
        )
        await init_services(app, settings)

        yield

        await close_services(app)
        logger.info("application_shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Flight booking API with guest checkout, payments and e-tickets",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL] if settings.ENVIRONMENT == "production" else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router)

    # Created in init_services, before the first request can reach it
    app.mount("/tickets", StaticFiles(directory=settings.TICKETS_DIR, check_dir=False), name="tickets")

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return metrics_endpoint()

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()
