"""
Version and metadata endpoint
"""
from fastapi import APIRouter

from leave_engine.constants import DEFAULT_VERSION, SERVICE_NAME
from leave_engine.core.config import settings

router = APIRouter()


@router.get("/version")
async def get_version():
    """Build version, environment and the tenant routing limits this instance runs with."""
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or DEFAULT_VERSION,
        "env": settings.APP_ENV,
        "employee_code_pattern": settings.EMPLOYEE_CODE_PATTERN,
        "max_open_tenant_stores": settings.MAX_OPEN_TENANT_STORES,
    }
