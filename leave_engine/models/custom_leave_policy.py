"""
Custom leave policy model (tenant store)

A policy overrides the leave type's default annual quota for the employees
listed in employee_ids. employee_ids holds canonical employee codes only.
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leave_engine.db.base import TenantBase
from leave_engine.utils.ids import new_record_id


class CustomLeavePolicy(TenantBase):
    __tablename__ = "custom_leave_policies"

    id = Column(String(24), primary_key=True, default=new_record_id)
    company_id = Column(String(24), nullable=False, index=True)
    leave_type_id = Column(String(24), ForeignKey("leave_types.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    annual_quota = Column(Numeric(6, 2), nullable=True)
    days = Column(Numeric(6, 2), nullable=True)  # Legacy alias of annual_quota
    employee_ids = Column(JSON, nullable=False, default=list)
    # {"carryForward": bool, "maxCarryForwardDays": n, "isEarnedLeave": bool}
    settings = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    leave_type = relationship("LeaveType")

    __table_args__ = (
        Index("ix_custom_leave_policies_type_active", "leave_type_id", "is_active", "is_deleted"),
    )
