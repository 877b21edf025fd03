"""Main FastAPI application"""
import subprocess
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from casetrack.core.config import settings
from casetrack.core.exceptions import CaseNotFoundError, CaseStorageError, CaseValidationError
from casetrack.db.session import init_db, close_db
from casetrack.api.v1.routes import admin, analytics, cases, persons


# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def run_migrations() -> None:
    """Apply pending alembic migrations; failures are logged and startup continues"""
    logger.info("Running database migrations...")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            capture_output=True,
            text=True,
            timeout=60
        )
        if result.returncode == 0:
            logger.info("Database migrations completed successfully")
        else:
            logger.error("Database migration failed", stderr=result.stderr, stdout=result.stdout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.error("Failed to run database migrations", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    logger.info("Starting CaseTrack API", environment=settings.environment)

    if settings.run_migrations_on_startup:
        run_migrations()

    await init_db()
    logger.info("Database initialized")

    logger.info(
        "API server started",
        app_name=settings.app_name,
        environment=settings.environment,
        debug=settings.debug
    )

    yield

    # Shutdown
    logger.info("Shutting down CaseTrack API")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="CaseTrack API",
    description="""
    Criminal and civil case records.

    This API provides endpoints for:
    - Admin create, update and delete of whole cases
    - Case search and full case details
    - People and the roles they hold across cases
    - Dashboard analytics
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log all incoming requests"""
    started = time.perf_counter()
    logger.info(
        "Incoming request",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None
    )

    response = await call_next(request)

    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2)
    )

    return response


@app.exception_handler(CaseValidationError)
async def case_validation_handler(request: Request, exc: CaseValidationError):
    """Every violation of the submitted case document, not just the first"""
    return JSONResponse(
        status_code=400,
        content={
            "message": "Validation error",
            "errors": [violation.to_dict() for violation in exc.errors]
        }
    )


@app.exception_handler(CaseNotFoundError)
async def case_not_found_handler(request: Request, exc: CaseNotFoundError):
    return JSONResponse(status_code=404, content={"message": "Case not found"})


@app.exception_handler(CaseStorageError)
async def case_storage_handler(request: Request, exc: CaseStorageError):
    """A rolled-back write; storage details are only exposed in debug"""
    return JSONResponse(
        status_code=500,
        content={
            "message": f"Error {exc.operation} case",
            "error": exc.reason if settings.debug else "Internal server error"
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None)
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.exception(
        "Unhandled exception",
        method=request.method,
        url=str(request.url),
        error=str(exc)
    )

    return JSONResponse(
        status_code=500,
        content={
            "message": "An internal error occurred",
            "error": str(exc) if settings.debug else "Internal server error"
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers and monitoring"""
    return {
        "status": "healthy",
        "version": settings.version,
        "environment": settings.environment
    }


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "name": "CaseTrack API",
        "version": settings.version,
        "docs": "/docs" if settings.debug else "Documentation disabled in production"
    }


# Include API routers
app.include_router(admin.router, prefix="/api/v1")
app.include_router(cases.router, prefix="/api/v1")
app.include_router(persons.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
