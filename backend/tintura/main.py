"""
Tintura SST - Main FastAPI Application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime

from tintura.api.v1 import router as api_v1_router
from tintura.core.settings import settings
from tintura.db.session import storage
from tintura.exceptions import TinturaException
from tintura.logging_config import setup_logging, get_logger

# Setup structured logging
setup_logging()
logger = get_logger(__name__)

STORAGE_MODE_HEADER = "X-Storage-Mode"


# ===================
# Middleware
# ===================

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Referrer policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # HSTS in production
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class StorageModeMiddleware(BaseHTTPMiddleware):
    """Flag every response while running on the fallback store."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if storage.degraded:
            response.headers[STORAGE_MODE_HEADER] = "degraded"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting Tintura SST API",
        extra={
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "storage_backend": settings.STORAGE_BACKEND,
        }
    )
    storage.initialize()
    if storage.degraded:
        logger.warning("Serving in DEGRADED mode (in-memory store)")
    yield
    logger.info("Shutting down Tintura SST API")


# Create FastAPI app
app = FastAPI(
    title="Tintura SST API",
    description="Manufacturing operations tracker: orders, barcodes, stock and sales",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(StorageModeMiddleware)

# Security headers middleware (outermost)
app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
    expose_headers=[STORAGE_MODE_HEADER],
)


# ===================
# Exception Handlers
# ===================

def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


@app.exception_handler(TinturaException)
async def tintura_exception_handler(request: Request, exc: TinturaException):
    logger.warning(
        f"Tintura Exception: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details, "path": request.url.path}
    )
    error_dict = exc.to_dict()
    error_dict["timestamp"] = _timestamp()
    return JSONResponse(status_code=exc.status_code, content=error_dict)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})
    logger.warning("Validation error on %s", request.url.path, extra={"errors": errors})
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
            "timestamp": _timestamp(),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=503,
        content={
            "error": "PERSISTENCE_ERROR",
            "message": "A storage error occurred. Please try again.",
            "details": {"retryable": True},
            "timestamp": _timestamp(),
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
            "timestamp": _timestamp(),
        },
    )


# Include API routes
app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "Tintura SST API", "version": settings.VERSION, "status": "online"}


@app.get("/health")
async def health_check():
    if storage.degraded:
        return {"status": "degraded", "storage": storage.mode}
    return {"status": "healthy", "storage": storage.mode}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("tintura.main:app", host="0.0.0.0", port=8001, reload=True)
