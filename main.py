"""
Sheriff Security Operations Backend
===================================
FastAPI application serving:
- Public intake (contact form, AI receptionist, service requests)
- Operations dashboard API (shell, manager assistant, leads)
- Voice (Deepgram speech-to-text / text-to-speech)

Architecture:
- app/core/: Configuration, dependencies, security
- app/middleware/: Rate limiting, error handling, logging, CORS, security headers
- app/models/: Pydantic schemas
- app/services/: Business logic (llm, assistant, reports, voice)
- app/api/routes/: API endpoints

Version: 1.0.0
"""
import sys
import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI

# Startup error handling
try:
    # Import core components
    from app.core.config import settings
    from app.core.dependencies import initialize_clients, shutdown_clients

    # Import middleware
    from app.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
    from app.middleware.logging import RequestLoggingMiddleware
    from app.middleware.cors import get_cors_middleware
    from app.middleware.security_headers import SecurityHeadersMiddleware

    # Import routes
    from app.api.routes import (
        health_router,
        assistant_router,
        receptionist_router,
        voice_router,
        service_requests_router,
        contact_router,
        dashboard_router,
        branches_router,
        assignments_router,
        attendance_router,
        invoices_router,
        inventory_router,
        seo_router
    )
except Exception as e:
    print(f"🚨 FATAL STARTUP ERROR: {e}", file=sys.stderr)
    print(f"Traceback:\n{traceback.format_exc()}", file=sys.stderr)
    sys.exit(1)

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.environment == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# ============================================================================
# SENTRY ERROR TRACKING
# ============================================================================

if settings.sentry_dsn:
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
            integrations=[
                FastApiIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
            ]
        )
        logger.info("✅ Sentry error tracking initialized")
    except Exception as e:
        logger.warning(f"⚠️  Failed to initialize Sentry: {e}")
else:
    logger.info("ℹ️  Sentry not configured (SENTRY_DSN not set)")


# ============================================================================
# LIFECYCLE MANAGEMENT
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    logger.info("=" * 80)
    logger.info("Starting Sheriff Security Operations Backend")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Port: {settings.port}")
    logger.info(f"Debug: {settings.debug}")

    await initialize_clients()

    if settings.rate_limit_enabled:
        logger.info("✅ Rate limiting: Enabled (in-memory token bucket, per process)")
    else:
        logger.warning("⚠️ Rate limiting: Disabled (RATE_LIMIT_ENABLED=false)")

    logger.info("=" * 80)
    logger.info("✅ Application started successfully")
    logger.info("=" * 80)

    yield

    # Shutdown
    logger.info("Shutting down application...")

    await shutdown_clients()
    logger.info("✅ Application shutdown complete")


# ============================================================================
# APP INITIALIZATION
# ============================================================================

app = FastAPI(
    title="Sheriff Security Operations API",
    description="Public intake, AI voice agents and operations dashboard backend",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,  # Disable docs in production
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

register_exception_handlers(app)

# ============================================================================
# MIDDLEWARE
# ============================================================================

# Security headers (must be first to apply to all responses)
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.environment == "production")
logger.info("✅ Security headers enabled")

# CORS (after security headers)
cors_middleware, cors_config = get_cors_middleware()
app.add_middleware(cors_middleware, **cors_config)

# Request logging
app.add_middleware(RequestLoggingMiddleware)

# Global error handler (must be last)
app.add_middleware(ErrorHandlerMiddleware)

# ============================================================================
# ROUTES
# ============================================================================

app.include_router(health_router)
app.include_router(seo_router)
app.include_router(contact_router)
app.include_router(service_requests_router)
app.include_router(receptionist_router)
app.include_router(voice_router)
app.include_router(assistant_router)
app.include_router(dashboard_router)
app.include_router(branches_router)
app.include_router(assignments_router)
app.include_router(attendance_router)
app.include_router(invoices_router)
app.include_router(inventory_router)

# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
