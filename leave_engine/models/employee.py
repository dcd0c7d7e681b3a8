"""
Employee model (tenant store)
"""
from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.sql import func

from leave_engine.db.base import TenantBase
from leave_engine.utils.ids import new_record_id


class Employee(TenantBase):
    __tablename__ = "employees"

    # Internal record identifier: store-assigned, immutable, not a business key
    id = Column(String(24), primary_key=True, default=new_record_id)
    # Canonical employee code (e.g. EMP-7884): the key every other collection uses
    employee_code = Column(String, unique=True, nullable=False, index=True)
    company_id = Column(String(24), nullable=False, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="Active")
    # Usage snapshot: [{"type": "earned", "used": 3, "total": 15, "balance": 12}, ...]
    # Only `used` is authoritative; total/balance are a cache.
    leave_balances = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def usage_snapshot(self, leave_type_code: str):
        """Return the snapshot entry for a leave type (case-insensitive), or None."""
        wanted = leave_type_code.lower()
        for entry in self.leave_balances or []:
            if str(entry.get("type", "")).lower() == wanted:
                return entry
        return None
