"""
Policy Override Store - custom leave policies per tenant.

A custom policy replaces the leave type's default annual quota for the
employees it lists. employee_ids always holds canonical employee codes:
writes normalize incoming references, reads normalize the lookup key, so an
internal record id can never make a policy silently miss its employee.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from leave_engine.core.exceptions import (
    AmbiguousPolicyError,
    LeaveTypeNotFoundError,
    PolicyNotFoundError,
    PolicyValidationError,
)
from leave_engine.models.custom_leave_policy import CustomLeavePolicy
from leave_engine.services.identity_service import get_employee_by_code, to_canonical_code
from leave_engine.services.leave_type_service import get_active_type, get_type_by_id

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "leave_type_id", "annual_quota", "employee_ids", "settings", "is_active")


def _to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def policy_quota(policy: CustomLeavePolicy) -> Decimal:
    """
    Quota carried by a policy document.

    annual_quota is the canonical field and days the legacy one; either may
    carry the quota. A policy with neither still counts as an override of 0.
    """
    if policy.annual_quota is not None:
        return _to_decimal(policy.annual_quota)
    if policy.days is not None:
        return _to_decimal(policy.days)
    return Decimal("0")


def _live_policies(db: Session):
    return db.query(CustomLeavePolicy).filter(
        CustomLeavePolicy.is_active == True,  # noqa: E712
        CustomLeavePolicy.is_deleted.is_not(True),
    )


def find_applicable_policy(
    db: Session,
    leave_type_id: str,
    employee_ref: str,
) -> Optional[CustomLeavePolicy]:
    """
    Return the one active policy for (leave type, employee), or None.

    The employee reference is normalized to its canonical code first.

    Raises:
        AmbiguousPolicyError: more than one active policy matches
        EmployeeNotFoundError: the reference does not resolve
    """
    employee_code = to_canonical_code(db, employee_ref)
    candidates = _live_policies(db).filter(CustomLeavePolicy.leave_type_id == leave_type_id).all()
    matches = [p for p in candidates if employee_code in (p.employee_ids or [])]

    if len(matches) > 1:
        raise AmbiguousPolicyError(employee_code, leave_type_id, [p.id for p in matches])
    return matches[0] if matches else None


def _normalize_employee_ids(db: Session, employee_refs: Iterable[str]) -> List[str]:
    """Canonical codes, de-duplicated, input order kept. Unknown refs raise."""
    codes: List[str] = []
    for ref in employee_refs:
        code = to_canonical_code(db, ref)
        if get_employee_by_code(db, code) is None:
            raise PolicyValidationError(f"Employee {ref!r} does not exist in this company")
        if code not in codes:
            codes.append(code)
    return codes


def check_no_overlap(
    db: Session,
    leave_type_id: str,
    employee_codes: Iterable[str],
    exclude_policy_id: Optional[str] = None,
) -> None:
    """Raise AmbiguousPolicyError if another live policy for the type lists any of the codes."""
    query = _live_policies(db).filter(CustomLeavePolicy.leave_type_id == leave_type_id)
    if exclude_policy_id:
        query = query.filter(CustomLeavePolicy.id != exclude_policy_id)
    existing = query.all()
    for code in employee_codes:
        clashing = [p.id for p in existing if code in (p.employee_ids or [])]
        if clashing:
            raise AmbiguousPolicyError(code, leave_type_id, clashing + [exclude_policy_id or "<new>"])


def _validate_quota(annual_quota) -> Decimal:
    if annual_quota is None:
        raise PolicyValidationError("Annual quota must be greater than 0")
    quota = _to_decimal(annual_quota)
    if quota <= 0:
        raise PolicyValidationError("Annual quota must be greater than 0")
    return quota


def create_custom_policy(
    db: Session,
    company_id: str,
    name: str,
    leave_type_id: str,
    employee_ids: List[str],
    annual_quota,
    settings: Optional[Dict[str, Any]] = None,
    created_by: Optional[str] = None,
) -> CustomLeavePolicy:
    """
    Create a custom policy for a leave type and a set of employees.

    Raises:
        PolicyValidationError: no employees, non-positive quota, unknown employee
        LeaveTypeNotFoundError: leave type missing or deleted
        AmbiguousPolicyError: an employee already has an active policy for the type
    """
    if not employee_ids:
        raise PolicyValidationError("At least one employee must be assigned to the policy")
    quota = _validate_quota(annual_quota)
    if get_type_by_id(db, leave_type_id) is None:
        raise LeaveTypeNotFoundError(leave_type_id)

    codes = _normalize_employee_ids(db, employee_ids)
    check_no_overlap(db, leave_type_id, codes)

    policy = CustomLeavePolicy(
        company_id=company_id,
        leave_type_id=leave_type_id,
        name=name,
        annual_quota=quota,
        employee_ids=codes,
        settings=settings or {},
        is_active=True,
        is_deleted=False,
        created_by=created_by,
        updated_by=created_by,
    )
    db.add(policy)
    db.commit()
    db.refresh(policy)
    logger.info("Created custom policy %s (%s) for %d employees", policy.id, name, len(codes))
    return policy


def get_custom_policy(db: Session, policy_id: str) -> CustomLeavePolicy:
    policy = (
        db.query(CustomLeavePolicy)
        .filter(CustomLeavePolicy.id == policy_id, CustomLeavePolicy.is_deleted.is_not(True))
        .first()
    )
    if policy is None:
        raise PolicyNotFoundError(policy_id)
    return policy


def update_custom_policy(
    db: Session,
    policy_id: str,
    updates: Dict[str, Any],
    updated_by: Optional[str] = None,
) -> CustomLeavePolicy:
    """Apply allowed field updates with the same validations as create."""
    policy = get_custom_policy(db, policy_id)
    changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}

    if "leave_type_id" in changes and get_type_by_id(db, changes["leave_type_id"]) is None:
        raise LeaveTypeNotFoundError(changes["leave_type_id"])
    if "annual_quota" in changes:
        changes["annual_quota"] = _validate_quota(changes["annual_quota"])
    if "employee_ids" in changes:
        if not changes["employee_ids"]:
            raise PolicyValidationError("At least one employee must be assigned to the policy")
        changes["employee_ids"] = _normalize_employee_ids(db, changes["employee_ids"])

    will_be_active = changes.get("is_active", policy.is_active)
    if will_be_active:
        check_no_overlap(
            db,
            changes.get("leave_type_id", policy.leave_type_id),
            changes.get("employee_ids", policy.employee_ids or []),
            exclude_policy_id=policy.id,
        )

    for key, value in changes.items():
        setattr(policy, key, value)
    if updated_by:
        policy.updated_by = updated_by
    policy.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(policy)
    return policy


def delete_custom_policy(db: Session, policy_id: str, deleted_by: Optional[str] = None) -> CustomLeavePolicy:
    """Soft delete: the document stays, flagged inactive and deleted."""
    policy = get_custom_policy(db, policy_id)
    policy.is_active = False
    policy.is_deleted = True
    if deleted_by:
        policy.updated_by = deleted_by
    policy.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(policy)
    return policy


def list_custom_policies(
    db: Session,
    leave_type_id: Optional[str] = None,
    employee_code: Optional[str] = None,
) -> List[CustomLeavePolicy]:
    query = _live_policies(db)
    if leave_type_id:
        query = query.filter(CustomLeavePolicy.leave_type_id == leave_type_id)
    policies = query.order_by(CustomLeavePolicy.created_at.desc()).all()
    if employee_code:
        policies = [p for p in policies if employee_code in (p.employee_ids or [])]
    return policies


def get_employee_policies(db: Session, employee_ref: str) -> List[CustomLeavePolicy]:
    """All active policies naming this employee, oldest first."""
    code = to_canonical_code(db, employee_ref)
    policies = _live_policies(db).order_by(CustomLeavePolicy.created_at.asc()).all()
    return [p for p in policies if code in (p.employee_ids or [])]


def get_employees_with_custom_policies(db: Session, leave_type_code: str) -> List[str]:
    """Distinct employee codes covered by any active policy for the leave type."""
    leave_type = get_active_type(db, leave_type_code)
    if leave_type is None:
        return []
    seen: List[str] = []
    for policy in _live_policies(db).filter(CustomLeavePolicy.leave_type_id == leave_type.id).all():
        for code in policy.employee_ids or []:
            if code not in seen:
                seen.append(code)
    return seen
