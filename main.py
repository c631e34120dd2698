"""Main application entry point for the Kurasi marketplace API.

Sets up the FastAPI app with security middleware, domain error handlers and the
routers for product submission, curation, customer reviews, curator onboarding,
orders, seller sales, point redemption, users and email verification.
"""
import os
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config import settings, load_settings_from_env
from routers import curators, customer_reviews, orders, products, redeemables, reviews, sellers, users, verification
from services.database import get_db
from services.error_handler import handle_exception, handle_marketplace_error
from services.errors import MarketplaceError

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"
MIN_SECRET_KEY_LENGTH = 32

app = FastAPI(
    title="Kurasi API",
    version="1.0.0",
    description="API for Kurasi - curated digital goods marketplace"
)

# Setup rate limiter
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

logger = logging.getLogger(__name__)


def is_production_environment(local_settings) -> bool:
    """Detect production from a real Supabase project, a public URL or an explicit ENV flag."""
    return any([
        bool(local_settings.SUPABASE_URL)
        and "supabase.co" in local_settings.SUPABASE_URL
        and "dummy" not in local_settings.SUPABASE_URL,

        bool(local_settings.PRODUCTION_URL.strip())
        and "localhost" not in local_settings.PRODUCTION_URL,

        os.getenv("ENVIRONMENT") == "production",
        os.getenv("ENV") == "production",
    ])


@app.on_event("startup")
async def validate_security_configuration():
    """Refuse to start with dev authentication or a weak SECRET_KEY in production.

    Raises RuntimeError for critical issues that must be fixed before running.
    """
    # Fresh settings so tests that patch the environment are observed
    local_settings = load_settings_from_env()
    is_production = is_production_environment(local_settings)

    if local_settings.TEST_MODE and is_production:
        raise RuntimeError(
            "CRITICAL SECURITY ERROR: TEST_MODE=true in production environment!\n"
            "Dev tokens would let anyone act as any user, including admins.\n"
            "Set TEST_MODE=false and restart the application.\n"
            f"Production detected from SUPABASE_URL={local_settings.SUPABASE_URL!r} "
            f"PRODUCTION_URL={local_settings.PRODUCTION_URL!r}"
        )

    if is_production:
        if local_settings.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "CRITICAL SECURITY ERROR: Default SECRET_KEY in production!\n"
                "Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )
        if len(local_settings.SECRET_KEY) < MIN_SECRET_KEY_LENGTH:
            raise RuntimeError(
                f"CRITICAL SECURITY ERROR: SECRET_KEY too short ({len(local_settings.SECRET_KEY)} chars)!\n"
                f"Production requires at least {MIN_SECRET_KEY_LENGTH} characters."
            )

    if local_settings.TEST_MODE:
        logger.warning(
            "TEST_MODE enabled - dev tokens (dev-token-<user_id>) are accepted. "
            "NEVER enable TEST_MODE in production!"
        )
    elif local_settings.SECRET_KEY == DEFAULT_SECRET_KEY:
        logger.warning("Using default SECRET_KEY in development")

    logger.info(
        f"Security configuration validated: production={is_production} "
        f"test_mode={local_settings.TEST_MODE} "
        f"secret_key_length={len(local_settings.SECRET_KEY)} "
        f"cors_origins={len(get_cors_origins())}"
    )


def get_cors_origins():
    """Build strict CORS allowlist from environment.

    Security: Never use wildcard origins with credentials.
    Production must explicitly set FRONTEND_URL and PRODUCTION_URL.
    """
    origins = set()

    if settings.FRONTEND_URL:
        origins.add(settings.FRONTEND_URL)
    if settings.PRODUCTION_URL:
        origins.add(settings.PRODUCTION_URL)

    # Local frontend dev servers
    if settings.TEST_MODE:
        origins.update({
            "https://localhost:5173",
            "https://127.0.0.1:5173",
        })

    # Additional origins via env var (comma-separated)
    extra = os.getenv("CORS_EXTRA_ORIGINS", "")
    if extra:
        origins.update(o.strip() for o in extra.split(",") if o.strip())

    return list(origins)


def get_allowed_hosts():
    """Hosts accepted by TrustedHostMiddleware (prevents host header injection)."""
    allowed_hosts = ["localhost", "127.0.0.1", "0.0.0.0"]
    # TestClient sends Host: testserver
    if settings.TEST_MODE:
        allowed_hosts.append("testserver")

    for url in (settings.PRODUCTION_URL, settings.FRONTEND_URL):
        host = url.replace("https://", "").replace("http://", "").split("/")[0].split(":")[0]
        if host and host not in allowed_hosts:
            allowed_hosts.append(host)
    return allowed_hosts


# ============================================================================
# Security Middleware
# ============================================================================

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        "frame-ancestors 'none'"
    )
    # HSTS only when served over HTTPS in production
    if not settings.TEST_MODE:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=get_allowed_hosts())

# Domain errors map to 400/403/404/409; anything else is a generic 500
app.add_exception_handler(MarketplaceError, handle_marketplace_error)
app.add_exception_handler(Exception, handle_exception)

# ============================================================================
# Root Endpoints
# ============================================================================

@app.get("/")
@limiter.limit("60/minute")
async def root(request: Request):
    """API root endpoint."""
    return {
        "message": "Kurasi API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint (no rate limit for monitoring)."""
    current_settings = load_settings_from_env()
    return {
        "status": "healthy",
        "mode": "production" if is_production_environment(current_settings) else "development",
        "test_mode": current_settings.TEST_MODE,
        "database": get_db().backend,
    }


app.include_router(products.router)
app.include_router(reviews.router)
app.include_router(customer_reviews.router)
app.include_router(curators.router)
app.include_router(orders.router)
app.include_router(redeemables.router)
app.include_router(users.router)
app.include_router(sellers.router)
app.include_router(verification.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
