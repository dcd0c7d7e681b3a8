"""
Main API router
"""
from fastapi import APIRouter

from leave_engine.api.v1 import audit, balances, companies, health, version

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
api_router.include_router(balances.router, prefix="/companies", tags=["leave-balances"])
api_router.include_router(audit.router, prefix="/companies", tags=["audit"])
