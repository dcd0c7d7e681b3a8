"""
Company registry endpoint
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leave_engine.core.deps import get_db
from leave_engine.schemas.company import CompanyOut
from leave_engine.services.tenant_service import list_tenants

router = APIRouter()


@router.get("", response_model=List[CompanyOut])
def get_companies(db: Session = Depends(get_db)):
    """List active registered companies"""
    return list_tenants(db)
