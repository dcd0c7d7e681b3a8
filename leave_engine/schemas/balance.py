"""
Leave balance schemas
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LeaveBalanceOut(BaseModel):
    """Resolved balance for one employee and leave type"""
    model_config = ConfigDict(from_attributes=True)

    employee_code: str = Field(..., description="Canonical employee code")
    leave_type_code: str
    leave_type_name: str
    total: Decimal = Field(..., description="Entitlement for the year")
    used: Decimal = Field(..., description="Days consumed")
    balance: Decimal = Field(..., description="max(0, total - used)")
    source: str = Field(..., description="custom-policy or default")
    custom_policy_id: Optional[str] = None
    custom_policy_name: Optional[str] = None


class EmployeeBalancesOut(BaseModel):
    """All active leave types for one employee"""
    company_id: str
    employee_code: str
    balances: List[LeaveBalanceOut]
