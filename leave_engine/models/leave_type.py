"""
Leave type model (tenant store)
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Numeric, String, Text
from sqlalchemy.sql import func

from leave_engine.db.base import TenantBase
from leave_engine.utils.ids import new_record_id


class LeaveType(TenantBase):
    __tablename__ = "leave_types"

    id = Column(String(24), primary_key=True, default=new_record_id)
    company_id = Column(String(24), nullable=False, index=True)
    code = Column(String(30), nullable=False)  # Upper-case, e.g. EARNED, SICK
    name = Column(String, nullable=False)
    annual_quota = Column(Numeric(6, 2), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=True)
    carry_forward_allowed = Column(Boolean, nullable=False, default=False)
    max_carry_forward_days = Column(Numeric(6, 2), nullable=False, default=0)
    color = Column(String(16), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)  # Soft delete only
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        Index("ix_leave_types_code_active", "code", "is_active", "is_deleted"),
    )
