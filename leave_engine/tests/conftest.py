"""
Pytest configuration and fixtures
"""
import os

# Must be set before leave_engine.core.config is imported
os.environ["SHARED_DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "local"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from leave_engine.core.deps import get_db
from leave_engine.db.session import build_engine, init_shared_db
from leave_engine.main import app
from leave_engine.models import CustomLeavePolicy, Employee
from leave_engine.services.tenant_service import register_tenant
from leave_engine.services.tenant_store import TenantStoreLocator


COMPANY_ID = "6982c7cca0ceeb38da48ba01"
OTHER_COMPANY_ID = "6982c7cca0ceeb38da48ba02"

# The employee from the identifier repair incident
EMP_7884_ID = "6982c7cca0ceeb38da48ba58"
EMP_7884_CODE = "EMP-7884"


@pytest.fixture(scope="function")
def shared_engine():
    """Fresh in-memory shared store for each test"""
    engine = build_engine("sqlite://")
    init_shared_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def shared_session_factory(shared_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=shared_engine)


@pytest.fixture(scope="function")
def shared_db(shared_session_factory):
    db = shared_session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def tenant_url_template(tmp_path):
    return f"sqlite:///{tmp_path}/tenants/{{company_id}}.db"


@pytest.fixture(scope="function")
def locator(shared_session_factory, tenant_url_template):
    loc = TenantStoreLocator(
        shared_session_factory,
        shared_database_url="sqlite://",
        url_template=tenant_url_template,
        max_open_stores=8,
    )
    yield loc
    loc.dispose()


@pytest.fixture(scope="function")
def tenant(shared_db, locator):
    """A registered company with the default leave catalog"""
    return register_tenant(shared_db, locator, "Acme Corp", company_id=COMPANY_ID)


@pytest.fixture(scope="function")
def tenant_db(tenant):
    """Session on the tenant store for arranging test data"""
    with tenant.session() as db:
        yield db


def _add_employee(db, code, record_id=None, used=None, leave_balances=None, company_id=COMPANY_ID):
    """Insert an employee; `used` is a {leave type: days} shortcut for the usage snapshot."""
    balances = list(leave_balances or [])
    for leave_type, days in (used or {}).items():
        balances.append({"type": leave_type.lower(), "used": days})
    employee = Employee(
        employee_code=code,
        company_id=company_id,
        first_name="Test",
        last_name=code,
        leave_balances=balances,
    )
    if record_id:
        employee.id = record_id
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def _add_policy(db, leave_type, employee_ids, annual_quota=None, days=None,
                is_active=True, is_deleted=False, name="Custom Policy"):
    """Insert a policy row directly, bypassing service validation (to seed defects)."""
    policy = CustomLeavePolicy(
        company_id=leave_type.company_id,
        leave_type_id=leave_type.id,
        name=name,
        annual_quota=Decimal(str(annual_quota)) if annual_quota is not None else None,
        days=Decimal(str(days)) if days is not None else None,
        employee_ids=list(employee_ids),
        settings={},
        is_active=is_active,
        is_deleted=is_deleted,
    )
    db.add(policy)
    db.commit()
    db.refresh(policy)
    return policy


@pytest.fixture(scope="function")
def make_employee(tenant_db):
    def _make(code, **kwargs):
        return _add_employee(tenant_db, code, **kwargs)
    return _make


@pytest.fixture(scope="function")
def make_policy(tenant_db):
    def _make(leave_type, employee_ids, **kwargs):
        return _add_policy(tenant_db, leave_type, employee_ids, **kwargs)
    return _make


@pytest.fixture(scope="function")
def emp_7884(tenant_db):
    """EMP-7884 with 3 earned days used"""
    return _add_employee(
        tenant_db,
        EMP_7884_CODE,
        record_id=EMP_7884_ID,
        leave_balances=[{"type": "earned", "used": 3, "total": 15, "balance": 12}],
    )


@pytest.fixture(scope="function")
def client(shared_engine, shared_session_factory, locator):
    """Create test client with the shared store and locator overridden"""
    def override_get_db():
        db = shared_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.shared_engine = shared_engine
    app.state.locator = locator

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
