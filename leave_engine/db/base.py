"""
Declarative bases

SharedBase holds cross-tenant metadata (the company registry). TenantBase
holds every tenant-scoped kind and is only ever created on a tenant engine.
"""
from sqlalchemy.orm import declarative_base

SharedBase = declarative_base()
TenantBase = declarative_base()
