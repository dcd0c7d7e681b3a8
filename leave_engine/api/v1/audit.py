"""
Consistency audit endpoint
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from leave_engine.core.deps import get_shared_engine, get_tenant_store
from leave_engine.schemas.audit import AuditReportOut
from leave_engine.services.audit_service import audit_tenant
from leave_engine.services.tenant_store import TenantStore

router = APIRouter()


@router.get("/{company_id}/audit", response_model=AuditReportOut)
def get_audit_report(
    company_id: str,
    store: TenantStore = Depends(get_tenant_store),
    shared_engine: Engine = Depends(get_shared_engine),
):
    """
    Run the consistency audit for one company.

    Findings are returned, never raised: a tenant with defects still gets 200.
    """
    report = audit_tenant(store, shared_engine)
    return AuditReportOut(is_clean=report.is_clean, **asdict(report))
