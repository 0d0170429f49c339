"""
NetaTrack Backend API
Main application entry point
"""
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
import uuid

from netatrack.api.deps import get_request_context
from netatrack.api.router import api_router
from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.database import init_db
from netatrack.core.errors import AppError
from netatrack.core.logging import setup_logging, get_logger
from netatrack.core.monitoring import init_sentry, capture_exception, metrics, track_api_request

# Set up structured logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("Starting NetaTrack API...")

    # Initialize Sentry for error tracking
    init_sentry()

    # Initialize database connection
    await init_db()
    logger.info("Database initialized")

    # Initialize Redis cache (graceful: app works without it)
    from netatrack.core.cache import get_redis, close_redis
    await get_redis()

    # Shared httpx connection pool for the RSS feeds
    from netatrack.services.news import news_service
    await news_service.startup()

    yield

    # Cleanup
    await news_service.shutdown()
    await close_redis()
    logger.info("Shutting down NetaTrack API...")


# Disable OpenAPI docs in production to reduce attack surface
_is_production = settings.ENVIRONMENT == "production"

# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="API for NetaTrack - politicians, parties, promises and bills in Nepal",
    docs_url=None if _is_production else "/docs",
    redoc_url=None if _is_production else "/redoc",
    openapi_url=None if _is_production else "/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=600,  # Cache preflight for 10 minutes
)


def _error_response(request: Request, error: AppError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return JSONResponse(status_code=error.status_code, content=error.to_body(request_id), headers=headers)


# Rate limiting middleware: global + stricter limits for writes
@app.middleware("http")
async def rate_limit(request: Request, call_next):
    """Per-IP rate limiting via Redis. Passes through if Redis is down."""
    from netatrack.core.cache import get_redis

    client_ip = request.client.host if request.client else "unknown"
    r = await get_redis()
    if r is not None:
        try:
            if request.method in ("POST", "PUT", "PATCH", "DELETE"):
                write_key = f"rl:write:{client_ip}"
                write_count = await r.incr(write_key)
                if write_count == 1:
                    await r.expire(write_key, 60)
                if write_count > settings.WRITE_RATE_LIMIT_PER_MINUTE:
                    return _error_response(request, AppError(
                        "Too many write requests. Try again in a minute.", 429, "RATE_LIMITED"
                    ))

            key = f"rl:{client_ip}"
            count = await r.incr(key)
            if count == 1:
                await r.expire(key, 60)
            if count > settings.RATE_LIMIT_PER_MINUTE:
                return _error_response(request, AppError("Too many requests", 429, "RATE_LIMITED"))
        except Exception as e:
            logger.debug(f"Rate limit check skipped: {e}")  # Fail open

    return await call_next(request)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
    start_time = time.time()

    request.state.request_id = request_id

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    track_api_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms
    )

    response.headers["X-Request-ID"] = request_id

    logger.info(
        f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.2f}ms)",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
    )

    return response


# Security headers middleware
@app.middleware("http")
async def security_headers(request: Request, call_next):
    """Add standard security headers to every response."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if _is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}", extra={"request_id": getattr(request.state, "request_id", None)})
    return _error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [{"type": e.get("type"), "loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return _error_response(request, AppError.bad_request("Invalid request", code="VALIDATION_ERROR", details=details))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown routes and methods still get the uniform error body
    return _error_response(request, AppError(str(exc.detail), exc.status_code, "HTTP_ERROR"))


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', None)
    logger.error(f"Global exception: {exc}", exc_info=True, extra={"request_id": request_id})

    # Send to Sentry
    capture_exception(exc, extra={"request_id": request_id, "path": str(request.url)})

    return _error_response(request, AppError.internal())


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }


# Metrics endpoint: hidden in production and admin-only there
@app.get(f"{settings.API_PREFIX}/metrics", tags=["Monitoring"], include_in_schema=not _is_production)
async def get_metrics(ctx: RequestContext = Depends(get_request_context)):
    """Get application metrics"""
    if _is_production and not ctx.is_admin:
        raise AppError.forbidden()
    return metrics.get_all()


# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
