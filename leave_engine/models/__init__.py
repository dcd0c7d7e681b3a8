"""
Database models
"""
from leave_engine.models.company import Company
from leave_engine.models.leave_type import LeaveType
from leave_engine.models.employee import Employee
from leave_engine.models.custom_leave_policy import CustomLeavePolicy

__all__ = [
    "Company",
    "LeaveType",
    "Employee",
    "CustomLeavePolicy",
]
