"""
Tests for the consistency auditor
"""
import pytest
from sqlalchemy.orm import Session

from leave_engine.core.exceptions import (
    AmbiguousPolicyError,
    DanglingReferenceError,
    DataPlacementViolation,
)
from leave_engine.db.base import TenantBase
from leave_engine.models import LeaveType
from leave_engine.services.audit_service import audit_tenant, count_misplaced_documents
from leave_engine.services.balance_service import resolve_balance
from leave_engine.services.leave_type_service import get_active_type


def seed_misplaced_leave_type(shared_engine, company_id, code="LEGACY"):
    """Simulate a write that went to the shared store instead of the tenant store"""
    TenantBase.metadata.create_all(bind=shared_engine, tables=[LeaveType.__table__])
    with Session(bind=shared_engine) as db:
        leave_type = LeaveType(company_id=company_id, code=code, name="Legacy Leave", annual_quota=5)
        db.add(leave_type)
        db.commit()
        return leave_type.id


def test_clean_tenant(tenant, shared_engine, emp_7884):
    report = audit_tenant(tenant, shared_engine)
    assert report.is_clean
    assert report.company_id == tenant.company_id
    report.raise_for_findings()


def test_shared_store_starts_clean(tenant, shared_engine):
    assert count_misplaced_documents(shared_engine) == 0


def test_misplaced_document_detected(tenant, shared_engine):
    record_id = seed_misplaced_leave_type(shared_engine, tenant.company_id)

    assert count_misplaced_documents(shared_engine) == 1
    report = audit_tenant(tenant, shared_engine)
    assert not report.is_clean
    assert [(d.table, d.record_id, d.company_id) for d in report.misplaced_documents] == [
        ("leave_types", record_id, tenant.company_id)
    ]
    with pytest.raises(DataPlacementViolation):
        report.raise_for_findings()


def test_other_tenants_misplaced_documents_not_attributed(tenant, shared_engine):
    seed_misplaced_leave_type(shared_engine, "6982c7cca0ceeb38da48ba02")
    assert count_misplaced_documents(shared_engine) == 1
    assert audit_tenant(tenant, shared_engine).misplaced_documents == []


def test_unowned_misplaced_document_reported_for_every_tenant(tenant, shared_engine):
    seed_misplaced_leave_type(shared_engine, "")
    report = audit_tenant(tenant, shared_engine)
    assert len(report.misplaced_documents) == 1
    assert not report.misplaced_documents[0].company_id


def test_internal_id_reference_reported_as_non_canonical(tenant, tenant_db, shared_engine, emp_7884, make_policy):
    policy = make_policy(get_active_type(tenant_db, "EARNED"), ["6982c7cca0ceeb38da48ba58"], annual_quota=20)

    report = audit_tenant(tenant, shared_engine)
    assert not report.is_clean
    assert report.unresolved_policy_references == []
    assert len(report.non_canonical_policy_references) == 1
    finding = report.non_canonical_policy_references[0]
    assert finding.policy_id == policy.id
    assert finding.employee_ref == "6982c7cca0ceeb38da48ba58"
    assert finding.employee_code == "EMP-7884"
    # Still resolvable, so not raised
    report.raise_for_findings()


@pytest.mark.parametrize("dangling", ["EMP-0404", "ffffffffffffffffffffffff"])
def test_dangling_reference_reported(tenant, tenant_db, shared_engine, emp_7884, make_policy, dangling):
    policy = make_policy(get_active_type(tenant_db, "EARNED"), ["EMP-7884", dangling], annual_quota=20)

    report = audit_tenant(tenant, shared_engine)
    assert [(r.policy_id, r.employee_ref) for r in report.unresolved_policy_references] == [(policy.id, dangling)]
    with pytest.raises(DanglingReferenceError) as exc_info:
        report.raise_for_findings()
    assert exc_info.value.employee_ref == dangling


def test_ambiguous_policies_reported(tenant, tenant_db, shared_engine, emp_7884, make_employee, make_policy):
    make_employee("EMP-1001")
    earned = get_active_type(tenant_db, "EARNED")
    a = make_policy(earned, ["EMP-7884"], annual_quota=20)
    b = make_policy(earned, ["EMP-1001", "EMP-7884"], annual_quota=25)

    report = audit_tenant(tenant, shared_engine)
    assert len(report.ambiguous_policies) == 1
    finding = report.ambiguous_policies[0]
    assert finding.employee_code == "EMP-7884"
    assert finding.leave_type_id == earned.id
    assert finding.policy_ids == tuple(sorted([a.id, b.id]))
    with pytest.raises(AmbiguousPolicyError):
        report.raise_for_findings()


def test_internal_id_overlap_is_not_ambiguous(tenant, tenant_db, shared_engine, emp_7884, make_policy):
    earned = get_active_type(tenant_db, "EARNED")
    a = make_policy(earned, ["EMP-7884"], annual_quota=20)
    b = make_policy(earned, ["6982c7cca0ceeb38da48ba58"], annual_quota=25)

    # Agrees with the resolver: only the canonical entry applies
    resolved = resolve_balance(tenant, "EMP-7884", "EARNED")
    assert resolved.custom_policy_id == a.id

    report = audit_tenant(tenant, shared_engine)
    assert report.ambiguous_policies == []
    assert [r.policy_id for r in report.non_canonical_policy_references] == [b.id]
    report.raise_for_findings()


def test_inactive_and_deleted_policies_ignored(tenant, tenant_db, shared_engine, emp_7884, make_policy):
    earned = get_active_type(tenant_db, "EARNED")
    make_policy(earned, ["EMP-7884"], annual_quota=20)
    make_policy(earned, ["EMP-7884"], annual_quota=25, is_active=False)
    make_policy(earned, ["EMP-0404"], annual_quota=25, is_deleted=True)

    assert audit_tenant(tenant, shared_engine).is_clean
