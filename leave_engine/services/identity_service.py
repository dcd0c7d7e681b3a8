"""
Identifier Normalizer

An employee can be referenced by its internal record id (store-assigned,
opaque) or by its canonical employee code (EMP-####). Every cross-collection
key in this engine is the canonical code.
"""
import re
from functools import lru_cache
from typing import Optional

from sqlalchemy.orm import Session

from leave_engine.core.config import settings
from leave_engine.core.exceptions import EmployeeNotFoundError
from leave_engine.models.employee import Employee
from leave_engine.utils.ids import looks_like_record_id


@lru_cache(maxsize=8)
def _code_regex(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern)


def is_canonical_code(value) -> bool:
    """True if value has the shape of a canonical employee code."""
    return isinstance(value, str) and bool(_code_regex(settings.EMPLOYEE_CODE_PATTERN).match(value))


def is_internal_id(value) -> bool:
    """True if value has the shape of an internal record identifier."""
    return looks_like_record_id(value)


def get_employee_by_code(db: Session, employee_code: str) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.employee_code == employee_code).first()


def to_canonical_code(db: Session, employee_ref: str) -> str:
    """
    Normalize an employee reference to its canonical code.

    A value already in canonical form is returned unchanged without touching
    the store, so to_canonical_code(to_canonical_code(x)) == to_canonical_code(x).
    Otherwise the reference is tried as an internal record id, then as an
    employee code of non-standard shape.

    Raises:
        EmployeeNotFoundError: neither identifier form resolves
    """
    if employee_ref is None:
        raise EmployeeNotFoundError("None")
    ref = str(employee_ref).strip()
    if is_canonical_code(ref):
        return ref

    employee = db.query(Employee).filter(Employee.id == ref).first()
    if employee is None:
        employee = get_employee_by_code(db, ref)
    if employee is None:
        raise EmployeeNotFoundError(ref)
    return employee.employee_code


def get_employee(db: Session, employee_ref: str) -> Employee:
    """Load an employee by either identifier form."""
    code = to_canonical_code(db, employee_ref)
    employee = get_employee_by_code(db, code)
    if employee is None:
        raise EmployeeNotFoundError(code)
    return employee
