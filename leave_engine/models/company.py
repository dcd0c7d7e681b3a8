"""
Company registry model (shared store)
"""
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from leave_engine.db.base import SharedBase
from leave_engine.utils.ids import new_record_id


class Company(SharedBase):
    __tablename__ = "companies"

    id = Column(String(24), primary_key=True, default=new_record_id)
    name = Column(String, nullable=False)
    # Overrides TENANT_DATABASE_URL_TEMPLATE when set
    database_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
