"""
FastAPI application entry point.

This module sets up the FastAPI application with middleware, routers,
error mapping and configuration.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import arcs, check_in, children, plan, sessions
from core.config import settings
from core.database import check_db_connection, init_db
from core.logging import log_fields, setup_logging
from core.exceptions import APIException, ConflictError, NotFoundError, ValidationError, CHECK_IN_FIRST, FRIENDLY_ERROR
from services.training_engine.errors import (
    ArcNotFoundError,
    ArcTransitionError,
    InvalidInputError,
    InvariantViolation,
    NoCheckInError,
)
import logging
import time

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Youth Training Engine API",
    description="Daily check-ins, training arcs and today's plan for young soccer players",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


@app.on_event("startup")
async def create_tables():
    init_db()


# CORS middleware
# Production: set CORS_ORIGINS env var (comma-separated)
# Development: DEBUG=True allows all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        f"Response: {request.method} {request.url.path} - {response.status_code}",
        extra=log_fields(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round(process_time * 1000, 2),
        ),
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Include routers
app.include_router(children.router)
app.include_router(check_in.router)
app.include_router(sessions.router)
app.include_router(arcs.router)
app.include_router(plan.router)


# ===========================================
# ERROR MAPPING
# ===========================================

def _error_response(exc: APIException, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code, **extra},
        headers=exc.headers,
    )


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions."""
    return _error_response(exc)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.info(f"Rejected input on {request.url.path}: {exc}")
    return _error_response(ValidationError(str(exc), field=exc.field), field=exc.field)


@app.exception_handler(NoCheckInError)
async def no_check_in_handler(request: Request, exc: NoCheckInError):
    return _error_response(ConflictError(CHECK_IN_FIRST, error_code="NO_CHECK_IN"))


@app.exception_handler(ArcTransitionError)
async def arc_transition_handler(request: Request, exc: ArcTransitionError):
    return _error_response(ConflictError(str(exc), error_code="ARC_CONFLICT"))


@app.exception_handler(ArcNotFoundError)
async def arc_not_found_handler(request: Request, exc: ArcNotFoundError):
    return _error_response(NotFoundError("Arc", exc.arc_id))


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    """A collaborator handed the engine impossible state. Logged loudly, hidden from the child."""
    logger.error(
        f"Invariant violation: {exc}",
        exc_info=True,
        extra=log_fields(method=request.method, path=request.url.path),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": FRIENDLY_ERROR, "error_code": "INTERNAL_ERROR"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra=log_fields(method=request.method, path=request.url.path),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": FRIENDLY_ERROR, "error_code": "INTERNAL_ERROR"},
    )


@app.get("/health")
async def health():
    """
    Simple health check for load balancers and uptime monitors.

    Returns:
        - 200: Core systems operational
        - 503: Database unavailable
    """
    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "unavailable",
            }
        )
    return {
        "status": "healthy",
        "timestamp": time.time(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
