"""
Leave Type Catalog - per-tenant leave type definitions.

Codes are stored upper-case (EARNED, SICK); lookups are case-insensitive.
Leave types are never hard-deleted.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from leave_engine.core.exceptions import DuplicateLeaveTypeError, LeaveTypeNotFoundError
from leave_engine.models.leave_type import LeaveType

logger = logging.getLogger(__name__)

# Seeded into every new tenant store
DEFAULT_LEAVE_TYPES = [
    {"code": "EARNED", "name": "Annual Leave", "annual_quota": 15, "carry_forward_allowed": True,
     "max_carry_forward_days": 5, "color": "#52c41a", "description": "Annual earned leave for employees"},
    {"code": "SICK", "name": "Sick Leave", "annual_quota": 10, "color": "#f5222d",
     "description": "Leave for illness or medical appointments"},
    {"code": "CASUAL", "name": "Casual Leave", "annual_quota": 12, "color": "#1890ff",
     "description": "Casual leave for personal reasons"},
    {"code": "MATERNITY", "name": "Maternity Leave", "annual_quota": 90, "color": "#eb2f96",
     "description": "Leave for childbirth and recovery"},
    {"code": "PATERNITY", "name": "Paternity Leave", "annual_quota": 5, "color": "#722ed1",
     "description": "Leave for new fathers"},
    {"code": "BEREAVEMENT", "name": "Bereavement Leave", "annual_quota": 3, "color": "#595959",
     "description": "Leave following the death of a family member"},
    {"code": "COMPENSATORY", "name": "Compensatory Off", "annual_quota": 0, "color": "#13c2c2",
     "description": "Time off in lieu of extra hours worked"},
    {"code": "UNPAID", "name": "Loss of Pay", "annual_quota": 0, "is_paid": False, "color": "#8c8c8c",
     "description": "Unpaid leave"},
]


def _active_query(db: Session):
    return db.query(LeaveType).filter(
        LeaveType.is_active == True,  # noqa: E712
        LeaveType.is_deleted.is_not(True),
    )


def get_active_type(db: Session, code: str) -> Optional[LeaveType]:
    """Return the active, non-deleted leave type with this code, or None."""
    if not code:
        return None
    return _active_query(db).filter(LeaveType.code == code.strip().upper()).first()


def require_active_type(db: Session, code: str) -> LeaveType:
    leave_type = get_active_type(db, code)
    if leave_type is None:
        raise LeaveTypeNotFoundError(code)
    return leave_type


def list_active_types(db: Session) -> List[LeaveType]:
    return _active_query(db).all()


def get_type_by_id(db: Session, leave_type_id: str) -> Optional[LeaveType]:
    """Any non-deleted leave type by id (active or suspended)."""
    return (
        db.query(LeaveType)
        .filter(LeaveType.id == leave_type_id, LeaveType.is_deleted.is_not(True))
        .first()
    )


def create_leave_type(
    db: Session,
    company_id: str,
    code: str,
    name: str,
    annual_quota=None,
    **extra,
) -> LeaveType:
    """
    Create a leave type.

    Raises:
        DuplicateLeaveTypeError: an active, non-deleted type already uses the code
    """
    normalized = code.strip().upper()
    if get_active_type(db, normalized) is not None:
        raise DuplicateLeaveTypeError(normalized)

    leave_type = LeaveType(
        company_id=company_id,
        code=normalized,
        name=name,
        annual_quota=Decimal(str(annual_quota)) if annual_quota is not None else None,
        is_active=True,
        is_deleted=False,
        **extra,
    )
    db.add(leave_type)
    db.commit()
    db.refresh(leave_type)
    return leave_type


def soft_delete_leave_type(db: Session, leave_type_id: str) -> LeaveType:
    leave_type = get_type_by_id(db, leave_type_id)
    if leave_type is None:
        raise LeaveTypeNotFoundError(leave_type_id)
    leave_type.is_active = False
    leave_type.is_deleted = True
    db.commit()
    db.refresh(leave_type)
    return leave_type


def seed_default_leave_types(db: Session, company_id: str) -> int:
    """
    Seed the default catalog into a tenant store.

    Only runs when the tenant has no leave types at all, so it is safe to call
    on every onboarding attempt. Returns the number of types created.
    """
    existing = db.query(LeaveType).count()
    if existing:
        logger.info("Company %s already has %d leave types, skipping seed", company_id, existing)
        return 0

    for entry in DEFAULT_LEAVE_TYPES:
        values = dict(entry)
        values["annual_quota"] = Decimal(str(values["annual_quota"]))
        if "max_carry_forward_days" in values:
            values["max_carry_forward_days"] = Decimal(str(values["max_carry_forward_days"]))
        db.add(LeaveType(company_id=company_id, is_active=True, is_deleted=False, **values))
    db.commit()
    logger.info("Seeded %d default leave types for company %s", len(DEFAULT_LEAVE_TYPES), company_id)
    return len(DEFAULT_LEAVE_TYPES)
