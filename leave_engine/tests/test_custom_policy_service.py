"""
Tests for custom leave policies (quota overrides)
"""
from decimal import Decimal

import pytest

from leave_engine.core.exceptions import (
    AmbiguousPolicyError,
    EmployeeNotFoundError,
    LeaveTypeNotFoundError,
    PolicyNotFoundError,
    PolicyValidationError,
)
from leave_engine.models import CustomLeavePolicy
from leave_engine.services.custom_policy_service import (
    create_custom_policy,
    delete_custom_policy,
    find_applicable_policy,
    get_custom_policy,
    get_employee_policies,
    get_employees_with_custom_policies,
    list_custom_policies,
    policy_quota,
    update_custom_policy,
)
from leave_engine.services.leave_type_service import get_active_type


@pytest.fixture
def earned(tenant_db):
    return get_active_type(tenant_db, "EARNED")


def test_create_normalizes_internal_ids(tenant, tenant_db, emp_7884, earned):
    policy = create_custom_policy(
        tenant_db, tenant.company_id, "Senior staff", earned.id,
        ["6982c7cca0ceeb38da48ba58", "EMP-7884"], 20,
    )
    assert policy.employee_ids == ["EMP-7884"]
    assert policy.annual_quota == 20
    assert policy.is_active is True
    assert policy.is_deleted is False


def test_create_requires_employees(tenant, tenant_db, earned):
    with pytest.raises(PolicyValidationError, match="At least one employee"):
        create_custom_policy(tenant_db, tenant.company_id, "Empty", earned.id, [], 20)


@pytest.mark.parametrize("quota", [0, -5, None])
def test_create_rejects_non_positive_quota(tenant, tenant_db, emp_7884, earned, quota):
    with pytest.raises(PolicyValidationError, match="greater than 0"):
        create_custom_policy(tenant_db, tenant.company_id, "Bad", earned.id, ["EMP-7884"], quota)


def test_create_rejects_unknown_employee(tenant, tenant_db, emp_7884, earned):
    with pytest.raises(PolicyValidationError, match="EMP-0404"):
        create_custom_policy(tenant_db, tenant.company_id, "Ghost", earned.id, ["EMP-7884", "EMP-0404"], 20)
    assert tenant_db.query(CustomLeavePolicy).count() == 0


def test_create_rejects_unknown_leave_type(tenant, tenant_db, emp_7884):
    with pytest.raises(LeaveTypeNotFoundError):
        create_custom_policy(tenant_db, tenant.company_id, "Nope", "ffffffffffffffffffffffff", ["EMP-7884"], 20)


def test_create_rejects_second_active_override(tenant, tenant_db, emp_7884, earned):
    create_custom_policy(tenant_db, tenant.company_id, "First", earned.id, ["EMP-7884"], 20)
    with pytest.raises(AmbiguousPolicyError):
        create_custom_policy(tenant_db, tenant.company_id, "Second", earned.id, ["6982c7cca0ceeb38da48ba58"], 25)


def test_same_employee_different_leave_types_allowed(tenant, tenant_db, emp_7884, earned):
    sick = get_active_type(tenant_db, "SICK")
    create_custom_policy(tenant_db, tenant.company_id, "Earned", earned.id, ["EMP-7884"], 20)
    create_custom_policy(tenant_db, tenant.company_id, "Sick", sick.id, ["EMP-7884"], 12)
    assert len(get_employee_policies(tenant_db, "EMP-7884")) == 2


def test_find_applicable_policy_by_either_identifier(tenant, tenant_db, emp_7884, earned):
    policy = create_custom_policy(tenant_db, tenant.company_id, "Senior", earned.id, ["EMP-7884"], 20)
    assert find_applicable_policy(tenant_db, earned.id, "EMP-7884").id == policy.id
    assert find_applicable_policy(tenant_db, earned.id, "6982c7cca0ceeb38da48ba58").id == policy.id


def test_find_applicable_policy_none(tenant_db, emp_7884, earned):
    assert find_applicable_policy(tenant_db, earned.id, "EMP-7884") is None


def test_find_applicable_policy_unknown_employee(tenant_db, earned):
    with pytest.raises(EmployeeNotFoundError):
        find_applicable_policy(tenant_db, earned.id, "ffffffffffffffffffffffff")


def test_find_ignores_inactive_and_deleted(tenant_db, emp_7884, earned, make_policy):
    make_policy(earned, ["EMP-7884"], annual_quota=20, is_active=False)
    make_policy(earned, ["EMP-7884"], annual_quota=21, is_deleted=True)
    assert find_applicable_policy(tenant_db, earned.id, "EMP-7884") is None


def test_find_raises_on_two_active_policies(tenant_db, emp_7884, earned, make_policy):
    a = make_policy(earned, ["EMP-7884"], annual_quota=20)
    b = make_policy(earned, ["EMP-7884"], annual_quota=25)
    with pytest.raises(AmbiguousPolicyError) as exc_info:
        find_applicable_policy(tenant_db, earned.id, "EMP-7884")
    assert exc_info.value.policy_ids == sorted([a.id, b.id])
    assert exc_info.value.status_code == 409


def test_policy_quota_dual_field():
    assert policy_quota(CustomLeavePolicy(annual_quota=Decimal("20"), days=Decimal("15"))) == 20
    assert policy_quota(CustomLeavePolicy(annual_quota=None, days=Decimal("15"))) == 15
    assert policy_quota(CustomLeavePolicy(annual_quota=None, days=None)) == 0
    assert policy_quota(CustomLeavePolicy(annual_quota=Decimal("0"), days=Decimal("15"))) == 0


def test_update_policy(tenant, tenant_db, emp_7884, make_employee, earned):
    make_employee("EMP-1001")
    policy = create_custom_policy(tenant_db, tenant.company_id, "Senior", earned.id, ["EMP-7884"], 20)

    updated = update_custom_policy(
        tenant_db, policy.id,
        {"annual_quota": 22, "employee_ids": ["6982c7cca0ceeb38da48ba58", "EMP-1001"], "days": 99},
        updated_by="hr-admin",
    )
    assert updated.annual_quota == 22
    assert updated.employee_ids == ["EMP-7884", "EMP-1001"]
    assert updated.days is None  # not an updatable field
    assert updated.updated_by == "hr-admin"


def test_update_validates_quota(tenant, tenant_db, emp_7884, earned):
    policy = create_custom_policy(tenant_db, tenant.company_id, "Senior", earned.id, ["EMP-7884"], 20)
    with pytest.raises(PolicyValidationError):
        update_custom_policy(tenant_db, policy.id, {"annual_quota": 0})


def test_reactivating_into_overlap_rejected(tenant, tenant_db, emp_7884, earned):
    first = create_custom_policy(tenant_db, tenant.company_id, "First", earned.id, ["EMP-7884"], 20)
    update_custom_policy(tenant_db, first.id, {"is_active": False})
    second = create_custom_policy(tenant_db, tenant.company_id, "Second", earned.id, ["EMP-7884"], 25)

    with pytest.raises(AmbiguousPolicyError):
        update_custom_policy(tenant_db, first.id, {"is_active": True})
    assert find_applicable_policy(tenant_db, earned.id, "EMP-7884").id == second.id


def test_delete_is_soft(tenant, tenant_db, emp_7884, earned):
    policy = create_custom_policy(tenant_db, tenant.company_id, "Senior", earned.id, ["EMP-7884"], 20)
    deleted = delete_custom_policy(tenant_db, policy.id, deleted_by="hr-admin")

    assert deleted.is_active is False
    assert deleted.is_deleted is True
    assert tenant_db.query(CustomLeavePolicy).filter(CustomLeavePolicy.id == policy.id).count() == 1
    with pytest.raises(PolicyNotFoundError):
        get_custom_policy(tenant_db, policy.id)


def test_list_and_reverse_lookups(tenant, tenant_db, emp_7884, make_employee, earned):
    make_employee("EMP-1001")
    make_employee("EMP-1002")
    sick = get_active_type(tenant_db, "SICK")
    create_custom_policy(tenant_db, tenant.company_id, "Earned A", earned.id, ["EMP-7884", "EMP-1001"], 20)
    create_custom_policy(tenant_db, tenant.company_id, "Sick A", sick.id, ["EMP-1002"], 12)

    assert len(list_custom_policies(tenant_db)) == 2
    assert [p.name for p in list_custom_policies(tenant_db, leave_type_id=sick.id)] == ["Sick A"]
    assert [p.name for p in list_custom_policies(tenant_db, employee_code="EMP-1001")] == ["Earned A"]
    assert get_employees_with_custom_policies(tenant_db, "earned") == ["EMP-7884", "EMP-1001"]
    assert get_employees_with_custom_policies(tenant_db, "SABBATICAL") == []
    assert [p.name for p in get_employee_policies(tenant_db, "6982c7cca0ceeb38da48ba58")] == ["Earned A"]
