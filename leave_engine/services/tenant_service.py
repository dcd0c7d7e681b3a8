"""
Tenant onboarding: registry entry, tenant schema, default leave types.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from leave_engine.core.exceptions import DataPlacementViolation, PolicyValidationError
from leave_engine.models.company import Company
from leave_engine.services.leave_type_service import seed_default_leave_types
from leave_engine.services.tenant_store import TenantStore, TenantStoreLocator
from leave_engine.utils.ids import looks_like_record_id, new_record_id

logger = logging.getLogger(__name__)


def register_tenant(
    shared_db: Session,
    locator: TenantStoreLocator,
    name: str,
    company_id: Optional[str] = None,
    database_url: Optional[str] = None,
) -> TenantStore:
    """
    Onboard a company and return its (ready to use) tenant store.

    Safe to re-run for an existing company: the registry row is reused, the
    schema create is a no-op and leave types are only seeded into an empty
    catalog.

    Raises:
        PolicyValidationError: blank name or malformed company id
        DataPlacementViolation: the tenant URL would point at the shared store
    """
    if not name or not name.strip():
        raise PolicyValidationError("Company name is required")
    if company_id is not None and not looks_like_record_id(company_id):
        raise PolicyValidationError(f"Company id {company_id!r} must be 24 lowercase hex characters")

    company = None
    created = False
    if company_id is not None:
        company = shared_db.query(Company).filter(Company.id == company_id).first()

    if company is None:
        company = Company(
            id=company_id or new_record_id(),
            name=name.strip(),
            database_url=database_url,
            is_active=True,
        )
        shared_db.add(company)
        shared_db.commit()
        shared_db.refresh(company)
        created = True
        logger.info("Registered company %s (%s)", company.id, company.name)
    else:
        logger.info("Company %s already registered, re-running onboarding", company.id)

    try:
        store = locator.resolve_store(company.id)
    except DataPlacementViolation:
        # Never leave a registry row that routes tenant data to the shared store
        if created:
            shared_db.delete(company)
            shared_db.commit()
        raise

    store.create_schema()
    with store.session() as db:
        seeded = seed_default_leave_types(db, company.id)
    logger.info("Tenant store ready for company %s (%d leave types seeded)", company.id, seeded)
    return store


def list_tenants(shared_db: Session, include_inactive: bool = False) -> List[Company]:
    query = shared_db.query(Company)
    if not include_inactive:
        query = query.filter(Company.is_active == True)  # noqa: E712
    return query.order_by(Company.name).all()
