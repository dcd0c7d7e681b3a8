"""
Balance Resolver - combine usage with the default or overriding quota.

Precedence:
- An applicable custom policy wins: total = policy_quota(policy), even when 0.
- Otherwise total = snapshot.total, falling back to leave_type.annual_quota, then 0.
- used comes from the employee's usage snapshot (0 if absent).
- balance = max(0, total - used).

Read-only: nothing here writes to the store, so repeated calls with unchanged
data return identical results.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from leave_engine.models.custom_leave_policy import CustomLeavePolicy
from leave_engine.models.employee import Employee
from leave_engine.models.leave_type import LeaveType
from leave_engine.services.custom_policy_service import find_applicable_policy, policy_quota
from leave_engine.services.identity_service import get_employee
from leave_engine.services.leave_type_service import list_active_types, require_active_type
from leave_engine.services.tenant_store import TenantStore

logger = logging.getLogger(__name__)

SOURCE_CUSTOM_POLICY = "custom-policy"
SOURCE_DEFAULT = "default"

ZERO = Decimal("0")


@dataclass(frozen=True)
class LeaveBalanceResult:
    employee_code: str
    leave_type_code: str
    leave_type_name: str
    total: Decimal
    used: Decimal
    balance: Decimal
    source: str
    custom_policy_id: Optional[str] = None
    custom_policy_name: Optional[str] = None


def _num(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_balance(
    used,
    default_total=None,
    snapshot_total=None,
    override: Optional[CustomLeavePolicy] = None,
) -> tuple:
    """
    Pure arithmetic core: returns (total, used, balance, source).

    Args:
        used: days consumed (None counts as 0)
        default_total: leave type's annual quota
        snapshot_total: cached total from the employee's usage snapshot
        override: applicable custom policy, if any
    """
    used_days = _num(used) or ZERO
    if override is not None:
        total = policy_quota(override)
        source = SOURCE_CUSTOM_POLICY
    else:
        total = _num(snapshot_total)
        if total is None:
            total = _num(default_total)
        if total is None:
            total = ZERO
        source = SOURCE_DEFAULT

    balance = max(ZERO, total - used_days)
    return total, used_days, balance, source


def _resolve_for_type(db: Session, employee: Employee, leave_type: LeaveType) -> LeaveBalanceResult:
    snapshot = employee.usage_snapshot(leave_type.code) or {}
    override = find_applicable_policy(db, leave_type.id, employee.employee_code)

    total, used, balance, source = compute_balance(
        used=snapshot.get("used"),
        default_total=leave_type.annual_quota,
        snapshot_total=snapshot.get("total"),
        override=override,
    )
    logger.debug(
        "Balance %s/%s: total=%s used=%s balance=%s source=%s",
        employee.employee_code, leave_type.code, total, used, balance, source,
    )
    return LeaveBalanceResult(
        employee_code=employee.employee_code,
        leave_type_code=leave_type.code,
        leave_type_name=leave_type.name,
        total=total,
        used=used,
        balance=balance,
        source=source,
        custom_policy_id=override.id if override is not None else None,
        custom_policy_name=override.name if override is not None else None,
    )


def resolve_balance(store: TenantStore, employee_ref: str, leave_type_code: str) -> LeaveBalanceResult:
    """
    Resolve {total, used, balance, source} for one employee and leave type.

    Raises:
        EmployeeNotFoundError: reference resolves to no employee
        LeaveTypeNotFoundError: no active leave type with that code
        AmbiguousPolicyError: more than one active policy applies
    """
    with store.session() as db:
        employee = get_employee(db, employee_ref)
        leave_type = require_active_type(db, leave_type_code)
        return _resolve_for_type(db, employee, leave_type)


def resolve_all_balances(store: TenantStore, employee_ref: str) -> List[LeaveBalanceResult]:
    """One result per active leave type, ordered by code."""
    with store.session() as db:
        employee = get_employee(db, employee_ref)
        leave_types = sorted(list_active_types(db), key=lambda lt: lt.code)
        return [_resolve_for_type(db, employee, lt) for lt in leave_types]
