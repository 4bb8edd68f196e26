"""
VocabWorld - FastAPI Application

Main entry point for the backend API.
Serves vocabulary, pronunciation audio, progress tracking, Stripe
subscriptions and the admin dashboard.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config.settings import settings
from app.infrastructure.exceptions import (
    VocabWorldError,
    ValidationError,
    NotFoundError,
    DuplicateError,
    ExternalServiceError,
    ServiceUnavailableError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _database_configured() -> bool:
    return bool(settings.database_url or settings.supabase_password)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"VocabWorld API starting in {settings.environment} mode...")

    if _database_configured():
        try:
            from app.infrastructure.db.database import init_db
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.warning(f"Database initialization skipped: {e}")

    yield

    if _database_configured():
        try:
            from app.infrastructure.db.database import close_db
            await close_db()
            logger.info("Database connection pool closed")
        except Exception as e:
            logger.warning(f"Database shutdown error: {e}")

    logger.info("VocabWorld API shutting down...")


app = FastAPI(
    title="VocabWorld API",
    description="Vocabulary, pronunciation audio and subscriptions for the VOCO apps",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(
        status_code=409,
        content=exc.to_dict(),
    )


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    return JSONResponse(
        status_code=503,
        content=exc.to_dict(),
    )


@app.exception_handler(ExternalServiceError)
async def external_service_error_handler(request: Request, exc: ExternalServiceError):
    """Upstream provider failed."""
    return JSONResponse(
        status_code=502,
        content=exc.to_dict(),
    )


@app.exception_handler(VocabWorldError)
async def general_error_handler(request: Request, exc: VocabWorldError):
    """Handle all other application errors."""
    logger.error(f"Unhandled application error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "vocabworld-api"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "VocabWorld API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from app.api.routes import (  # noqa: E402
    admin,
    audio,
    auth,
    payments,
    progress,
    subscriptions,
    tts,
    vocabulary,
    webhooks,
)

app.include_router(vocabulary.router, prefix="/api", tags=["Vocabulary"])
app.include_router(audio.router, prefix="/api", tags=["Audio"])
app.include_router(tts.router, prefix="/api", tags=["Text-to-Speech"])
app.include_router(progress.router, prefix="/api", tags=["Progress"])
app.include_router(auth.router, prefix="/api", tags=["Auth & Profiles"])
app.include_router(subscriptions.router, prefix="/api", tags=["Subscriptions"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])
app.include_router(webhooks.router, prefix="/api", tags=["Webhooks"])
app.include_router(admin.router, prefix="/api", tags=["Admin"])
