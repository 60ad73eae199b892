"""
SkillVerse Backend - courses, blogs and direct messaging
Production-ready FastAPI application
"""

import logging
from contextlib import asynccontextmanager

import httpx
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from skillverse.api.v1.api import api_router
from skillverse.core.config import settings
from skillverse.core.database import close_db, init_db
from skillverse.core.exceptions import register_exception_handlers
from skillverse.core.logging import setup_logging
from skillverse.middleware import LoggingMiddleware, RequestIDMiddleware, add_rate_limiting
from skillverse.services.admin import AdminPolicy
from skillverse.services.cloudinary import CloudinaryStorage
from skillverse.services.email import EmailService
from skillverse.services.identity import GoogleIdentityVerifier
from skillverse.services.keepalive import KeepAlivePinger
from skillverse.services.payments import StripePaymentGateway

logger = logging.getLogger(__name__)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()

    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
    app.state.http_client = http_client
    app.state.payment_gateway = StripePaymentGateway(
        settings.STRIPE_SECRET_KEY, settings.STRIPE_CURRENCY
    )
    app.state.media_storage = CloudinaryStorage(settings)
    app.state.mailer = EmailService(settings)
    app.state.identity_verifier = GoogleIdentityVerifier(http_client, settings.GOOGLE_CLIENT_ID)
    app.state.admin_policy = AdminPolicy(settings.get_admin_emails())

    pinger = None
    if settings.SELF_PING_URL:
        pinger = KeepAlivePinger(http_client, settings.SELF_PING_URL, settings.SELF_PING_INTERVAL)
        pinger.start()

    yield

    # Shutdown
    logger.info("Shutting down application")
    if pinger is not None:
        await pinger.stop()
    await http_client.aclose()
    close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiting
if settings.RATE_LIMIT_ENABLED:
    add_rate_limiting(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

register_exception_handlers(app)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "description": settings.APP_DESCRIPTION,
        "docs": "/docs",
        "health": f"{settings.API_V1_STR}/health",
    }


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "skillverse.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
