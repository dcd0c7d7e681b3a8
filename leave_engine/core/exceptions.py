"""
Exception taxonomy for the Leave Entitlement Engine

Resolution-path errors abort a single call; audit findings are aggregated
into a report and only raised on request (see AuditReport.raise_for_findings).
"""
from typing import Iterable, Optional

from fastapi import status


class LeaveEngineError(Exception):
    """Base exception for engine errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class TenantNotFoundError(LeaveEngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, company_id: str) -> None:
        super().__init__(f"Company {company_id!r} is not registered")
        self.company_id = company_id


class EmployeeNotFoundError(LeaveEngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, employee_ref: str) -> None:
        super().__init__(f"Employee {employee_ref!r} not found")
        self.employee_ref = employee_ref


class LeaveTypeNotFoundError(LeaveEngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, leave_type: str) -> None:
        super().__init__(f"Active leave type {leave_type!r} not found")
        self.leave_type = leave_type


class AmbiguousPolicyError(LeaveEngineError):
    """More than one active policy applies to the same (employee, leave type) pair."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, employee_code: str, leave_type_id: str, policy_ids: Iterable[str]) -> None:
        self.employee_code = employee_code
        self.leave_type_id = leave_type_id
        self.policy_ids = sorted(policy_ids)
        super().__init__(
            f"Employee {employee_code!r} matches {len(self.policy_ids)} active policies "
            f"for leave type {leave_type_id!r}: {', '.join(self.policy_ids)}"
        )


class DataPlacementViolation(LeaveEngineError):
    """Tenant-scoped data found in (or about to be routed to) the shared store."""

    status_code = status.HTTP_409_CONFLICT


class DanglingReferenceError(LeaveEngineError):
    """A custom policy references an employee that does not resolve."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, policy_id: str, employee_ref: str) -> None:
        super().__init__(f"Policy {policy_id!r} references unknown employee {employee_ref!r}")
        self.policy_id = policy_id
        self.employee_ref = employee_ref


class DuplicateLeaveTypeError(LeaveEngineError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, code: str) -> None:
        super().__init__(f"An active leave type with code {code!r} already exists")
        self.code = code


class PolicyValidationError(LeaveEngineError):
    status_code = status.HTTP_400_BAD_REQUEST


class PolicyNotFoundError(LeaveEngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, policy_id: str) -> None:
        super().__init__(f"Custom policy {policy_id!r} not found")
        self.policy_id = policy_id
