"""
Company registry schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CompanyOut(BaseModel):
    """Tenant registry entry (the database URL is never exposed)"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    is_active: bool
    created_at: Optional[datetime] = None
