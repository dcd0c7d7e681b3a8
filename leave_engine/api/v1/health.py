"""
Health check endpoint
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from leave_engine.constants import SERVICE_NAME
from leave_engine.core.deps import get_locator, get_shared_engine
from leave_engine.services.tenant_store import TenantStoreLocator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    shared_engine: Engine = Depends(get_shared_engine),
    locator: TenantStoreLocator = Depends(get_locator),
):
    """
    Service status plus reachability of the shared registry store.

    Tenant stores are opened lazily, so only the count of open ones is shown.
    """
    try:
        with shared_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        registry = "ok"
    except SQLAlchemyError as exc:
        logger.error("Shared store unreachable: %s", exc)
        registry = "unreachable"

    return {
        "status": "ok" if registry == "ok" else "degraded",
        "service": SERVICE_NAME,
        "shared_store": registry,
        "open_tenant_stores": locator.open_store_count,
    }
