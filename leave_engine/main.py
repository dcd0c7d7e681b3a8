"""
Leave Entitlement Engine - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from leave_engine.api.router import api_router
from leave_engine.constants import DEFAULT_VERSION
from leave_engine.core.config import settings
from leave_engine.core.errors import (
    generic_exception_handler,
    http_exception_handler,
    leave_engine_error_handler,
    validation_exception_handler,
)
from leave_engine.core.exceptions import LeaveEngineError
from leave_engine.core.logging import setup_logging
from leave_engine.db.session import SharedSessionLocal, init_shared_db, shared_engine
from leave_engine.services.tenant_store import TenantStoreLocator

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in a database URL for safe logging; show full path for sqlite."""
    parsed = urlparse(url)
    if parsed.scheme.startswith("sqlite") or not parsed.password:
        return url
    netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


app = FastAPI(
    title="Leave Entitlement Engine",
    description="Per-tenant leave balance resolution and consistency auditing",
    version=settings.VERSION or DEFAULT_VERSION,
)

# Register exception handlers
# Starlette base class so unmatched routes get the same body
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(LeaveEngineError, leave_engine_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_stores() -> None:
    """Create the registry tables and the tenant store locator."""
    logger.info("SHARED_DATABASE_URL: %s", _mask_database_url(settings.SHARED_DATABASE_URL))
    init_shared_db(shared_engine)
    app.state.shared_engine = shared_engine
    app.state.locator = TenantStoreLocator(SharedSessionLocal)


@app.on_event("shutdown")
def shutdown_stores() -> None:
    locator = getattr(app.state, "locator", None)
    if locator is not None:
        locator.dispose()
        logger.info("Tenant stores disposed")
