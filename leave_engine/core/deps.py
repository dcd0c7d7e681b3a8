"""
Dependencies for FastAPI endpoints
"""
from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from leave_engine.db.session import SharedSessionLocal
from leave_engine.services.tenant_store import TenantStore, TenantStoreLocator


def get_db() -> Generator:
    """Dependency for getting a shared-store session"""
    db = SharedSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_locator(request: Request) -> TenantStoreLocator:
    """The locator created at startup and owned by the application"""
    return request.app.state.locator


def get_shared_engine(request: Request) -> Engine:
    return request.app.state.shared_engine


def get_tenant_store(
    company_id: str,
    locator: TenantStoreLocator = Depends(get_locator),
) -> TenantStore:
    """
    Resolve the tenant store named by the {company_id} path parameter.

    Raises TenantNotFoundError (404) for unregistered companies; there is no
    fallback to the shared store.
    """
    return locator.resolve_store(company_id)
