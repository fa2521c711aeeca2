"""
FastAPI application entry point for the Social Runner training API.

Wires logging, CORS, request timing, error handlers and the training plan
routers around the adaptive difficulty engine.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import adaptive_difficulty, training_plans
from core.config import settings
from core.database import check_db_connection
from core.exceptions import APIException
from core.logging import setup_logging
from models import AuditLogImmutableError
import logging
import time

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="The Social Runner Training API",
    description="Training plans with adaptive difficulty driven by workout feedback",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


@app.on_event("startup")
async def log_startup():
    """Record how this instance is configured; the database check is informational only."""
    logger.info(
        f"Training API starting ({settings.ENVIRONMENT})",
        extra={"extra_fields": {
            "environment": settings.ENVIRONMENT,
            "auto_adjust_on_feedback": settings.AUTO_ADJUST_ON_FEEDBACK,
            "database_ok": check_db_connection(),
        }},
    )


# DEBUG allows every origin; otherwise CORS_ORIGINS (comma-separated) or the local web app
if settings.DEBUG:
    allowed_origins = ["*"]
elif settings.CORS_ORIGINS:
    allowed_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
else:
    allowed_origins = ["http://localhost:5000", "http://127.0.0.1:5000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    """One log line per request with status and duration."""
    start_time = time.time()
    response = await call_next(request)
    elapsed_ms = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)",
        extra={"extra_fields": {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
        }},
    )
    response.headers["X-Process-Time"] = str(elapsed_ms)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Expose the machine-readable error code next to the message."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(AuditLogImmutableError)
async def audit_log_handler(request: Request, exc: AuditLogImmutableError):
    logger.error(f"Rejected audit log rewrite: {exc}", extra={"extra_fields": {"path": request.url.path}})
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Adjustment history cannot be changed", "error_code": "AUDIT_LOG_IMMUTABLE"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unhandled becomes a logged 500."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"extra_fields": {"method": request.method, "path": request.url.path}},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    """200 when the database answers, 503 otherwise."""
    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"},
        )
    return {"status": "healthy", "database": "ok", "timestamp": time.time()}


@app.get("/ping")
async def ping():
    """No dependencies checked."""
    return {"pong": True}


app.include_router(training_plans.router)
app.include_router(adaptive_difficulty.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
