"""
Main FastAPI application entry point.
"""
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from nsx_dfw.core.config import settings
from nsx_dfw.core.errors import (
    IntegrityError,
    NSXError,
    ObjectNotFound,
    RevisionConflictError,
    TemplateParseError,
)
from nsx_dfw.core.logging_config import setup_logging
from nsx_dfw.core.nsx import create_client
from nsx_dfw.api.v1.router import api_router
from nsx_dfw.middleware.request_logging import RequestLoggingMiddleware
from nsx_dfw.services.firewall import DistributedFirewall

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info("Starting up NSX DFW Manager API...")

    if getattr(app.state, "firewall", None) is None:
        client = getattr(app.state, "nsx_client", None) or create_client()
        app.state.nsx_client = client
        try:
            app.state.firewall = DistributedFirewall.initialize(client)
        except NSXError as e:
            # Don't fail startup - the first request retries, /health reports the issue
            app.state.firewall = None
            logger.warning(
                f"Could not resolve managed section '{settings.MANAGED_SECTION_NAME}' "
                f"at {settings.NSX_MANAGER_URL}: {e}"
            )

    yield

    logger.info("Shutting down NSX DFW Manager API...")
    client = getattr(app.state, "nsx_client", None)
    if client is not None and hasattr(client, "close"):
        client.close()


app = FastAPI(
    title="NSX DFW Manager API",
    description="Manage the NSX-T distributed firewall section and rules owned by this integration",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# Request logging middleware (must be added before other middleware)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


def _status_for(exc: NSXError) -> int:
    if isinstance(exc, ObjectNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, RevisionConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, TemplateParseError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_502_BAD_GATEWAY


@app.exception_handler(NSXError)
async def nsx_exception_handler(request: Request, exc: NSXError):
    """Map NSX DFW errors to HTTP responses with trace_id."""
    trace_id = getattr(request.state, "trace_id", str(uuid.uuid4()))
    status_code = _status_for(exc)
    log_level = logging.ERROR if isinstance(exc, IntegrityError) else logging.WARNING
    logger.log(log_level, f"[{trace_id}] {type(exc).__name__}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "trace_id": trace_id,
            "error": type(exc).__name__,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors with trace_id."""
    trace_id = getattr(request.state, "trace_id", str(uuid.uuid4()))

    logger.error(
        f"[{trace_id}] Unhandled exception: {type(exc).__name__}: {exc}",
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": str(exc) if settings.DEBUG else "Internal Server Error",
            "trace_id": trace_id,
            "error": type(exc).__name__,
        },
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "NSX DFW Manager API",
        "version": "1.0.0",
        "docs": "/docs",
    }
