# storefront/main.py
"""
Main Application - Storefront API
=================================

Backend-for-frontend of the bilingual (Arabic/English) apparel storefront:
variant and stock resolution, the session cart, review reconciliation and
the account flows, in front of the commerce backend.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from storefront.api.routes import router as api_router
from storefront.api.services.backend_client import BackendError, StorefrontBackendClient
from storefront.api.services.cart_service import CartRegistry
from storefront.api.services.review_reconciler import ReviewReconciler
from storefront.core.config import config
from storefront.core.dependencies import get_language
from storefront.core.i18n import translate
from storefront.core.middleware.correlation import CorrelationIdFilter, CorrelationIdMiddleware
from storefront.core.rate_limit.rate_limit import limiter, rate_limit_exceeded_handler

_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.addFilter(CorrelationIdFilter())

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s',
    handlers=[_log_handler]
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages the application life cycle"""

    logger.info("=" * 60)
    logger.info("🚀 STARTING STOREFRONT API")
    logger.info("=" * 60)

    app.state.backend_client = StorefrontBackendClient()
    app.state.cart_registry = CartRegistry(
        max_carts=config.CART_MAX_ENTRIES,
        idle_seconds=config.CART_IDLE_SECONDS,
    )
    app.state.review_reconciler = ReviewReconciler(ttl_seconds=config.REVIEW_PENDING_TTL_SECONDS)

    logger.info(f"🌍 Environment: {config.ENVIRONMENT}")
    logger.info(f"🔗 Commerce backend: {config.BACKEND_API_URL}")
    logger.info(f"🗣️ Default language: {config.DEFAULT_LANGUAGE}")
    logger.info(f"🚦 Rate limiting active: {config.RATE_LIMIT_ENABLED}")

    logger.info("=" * 60)
    logger.info("✅ APPLICATION READY!")
    logger.info("=" * 60)

    yield

    # SHUTDOWN
    logger.info("=" * 60)
    logger.info("🛑 SHUTTING DOWN")
    logger.info("=" * 60)

    await app.state.backend_client.aclose()
    logger.info("✅ Backend client closed")


app = FastAPI(
    title="Storefront API",
    version=VERSION,
    docs_url="/docs" if config.DEBUG else None,
    redoc_url="/redoc" if config.DEBUG else None,
    lifespan=lifespan
)

app.add_middleware(CorrelationIdMiddleware)

# ═══════════════════════════════════════════════════════════
# RATE LIMITING
# ═══════════════════════════════════════════════════════════

app.state.limiter = limiter  # type: ignore[attr-defined]
app.add_exception_handler(
    RateLimitExceeded,
    rate_limit_exceeded_handler  # type: ignore[arg-type]
)

# ═══════════════════════════════════════════════════════════
# CORS
# ═══════════════════════════════════════════════════════════

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept-Language", config.CSRF_HEADER_NAME],
    expose_headers=["x-correlation-id"],
    max_age=3600,
)

# ═══════════════════════════════════════════════════════════
# ROUTES
# ═══════════════════════════════════════════════════════════

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    return {
        "status": "healthy",
        "version": VERSION,
        "environment": config.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ═══════════════════════════════════════════════════════════
# GLOBAL ERROR HANDLING
# ═══════════════════════════════════════════════════════════

@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    # keep the localized detail of 404s raised by the routes themselves
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = translate("not_found", get_language(request))

    return JSONResponse(
        status_code=404,
        content={"detail": detail, "path": str(request.url.path)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.error(f"❌ Internal error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": translate("internal_error", get_language(request))},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    """
    Maps commerce-backend failures onto the response.

    401 stays 401 (session expired), an unreachable backend is 503, other
    4xx keep their status and message, backend 5xx become 502.
    """
    language = get_language(request)

    if exc.status_code == 401:
        return JSONResponse(
            status_code=401,
            content={"detail": translate("session_expired", language)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    if exc.status_code == 503:
        return JSONResponse(status_code=503, content={"detail": translate("server_unreachable", language)})

    if 400 <= exc.status_code < 500:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message or translate("request_failed", language)},
        )

    logger.error(f"❌ Backend failure {exc.status_code} on {request.method} {request.url.path}")
    return JSONResponse(status_code=502, content={"detail": translate("request_failed", language)})


def main():
    uvicorn.run("storefront.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()

__all__ = ["app"]
