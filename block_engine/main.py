"""
Main FastAPI application for the Block Engine
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import settings, validate_required_config
from dependencies import limiter
from logging_config import logger
from services.code_validator import get_configured_validator
from services.supabase_store import get_store

# Import routers
from routers import blocks, factory, generate, projects


VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Block Engine", environment=settings.ENVIRONMENT)

    # Validate required configuration
    validate_required_config()

    # Initialize Sentry if DSN provided
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[FastApiIntegration()],
        )
        logger.info("Sentry initialized")

    # Load validation rules early so a broken rule file fails startup
    validator = get_configured_validator()

    logger.info(
        "Block Engine started",
        completion_provider=settings.COMPLETION_PROVIDER,
        generation_model=settings.GENERATION_MODEL,
        validation_ruleset=validator.version
    )

    yield

    logger.info("Shutting down Block Engine")


# Create FastAPI app
app = FastAPI(
    title="Block Engine",
    description="Website assembly and AI block generation service",
    version=VERSION,
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Parse CORS_ORIGINS from comma-separated string
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.CORS_ORIGINS.split(",")
    if origin.strip()
]

# In development, allow all origins for easier testing
if settings.ENVIRONMENT == "development" or settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,  # Cannot use credentials with wildcard origins
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _completion_configured() -> bool:
    if settings.COMPLETION_PROVIDER == "anthropic":
        return bool(settings.ANTHROPIC_API_KEY)
    return bool(settings.OPENAI_API_KEY)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Block Engine",
        "version": VERSION,
        "status": "running",
        "completion_provider": settings.COMPLETION_PROVIDER
    }


@app.get("/health")
async def health_check():
    """Comprehensive health check"""
    health = {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {}
    }

    configured = _completion_configured()
    health["checks"]["completion_api"] = {
        "provider": settings.COMPLETION_PROVIDER,
        "configured": configured,
        "status": "ok" if configured else "missing"
    }

    health["checks"]["embedding_api"] = {
        "configured": bool(settings.OPENAI_API_KEY),
        "status": "ok" if settings.OPENAI_API_KEY else "missing"
    }

    health["checks"]["database"] = {
        "status": "ok" if await get_store().ping() else "error"
    }

    # Overall status
    critical_checks = ["completion_api", "database"]
    all_critical_ok = all(
        health["checks"].get(check, {}).get("status") == "ok"
        for check in critical_checks
    )

    health["status"] = "healthy" if all_critical_ok else "degraded"

    return health


@app.get("/readiness")
async def readiness_check():
    """Kubernetes readiness probe"""
    health = await health_check()

    if health["status"] == "healthy":
        return {"status": "ready"}
    else:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": health["checks"]}
        )


# Include routers
app.include_router(projects.router, prefix="/api", tags=["Projects"])
app.include_router(generate.router, prefix="/api", tags=["Block Generation"])
app.include_router(factory.router, prefix="/api", tags=["Factory"])
app.include_router(blocks.router, prefix="/api", tags=["Block Library"])


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler with Sentry integration"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.ENVIRONMENT == "development" else None
        }
    )


if __name__ == "__main__":
    import uvicorn
    # Only enable reload in development
    reload_enabled = settings.ENVIRONMENT == "development" or settings.DEBUG
    uvicorn.run("main:app", host="0.0.0.0", port=8001, reload=reload_enabled)
