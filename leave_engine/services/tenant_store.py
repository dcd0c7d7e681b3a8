"""
Tenant Store Locator

Maps a company identifier to its isolated tenant store. The locator owns a
bounded pool of tenant engines; there is no module-level registry of open
stores and no path that hands out the shared store for tenant-scoped work.
"""
import logging
import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from leave_engine.core.config import settings
from leave_engine.core.exceptions import DataPlacementViolation, TenantNotFoundError
from leave_engine.db.base import TenantBase
from leave_engine.db.session import build_engine, is_memory_url
from leave_engine.models.company import Company

logger = logging.getLogger(__name__)


@dataclass
class TenantStore:
    """Handle to one tenant's isolated store. Thread it through call arguments."""

    company_id: str
    database_url: str
    engine: Engine
    session_factory: Callable[[], Session] = field(repr=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a tenant session; rolls back on error, always closes."""
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_schema(self) -> None:
        """Create the tenant-scoped tables on this tenant's engine."""
        import leave_engine.models  # noqa: F401  (register models)

        TenantBase.metadata.create_all(bind=self.engine)


def database_identity(url: str) -> tuple:
    """
    Key naming the physical database a URL points at.

    SQLite files compare by resolved path, so "./shared.db", "shared.db" and
    the absolute spelling are one database. Server URLs compare by backend,
    host, port and database name; driver and credentials are ignored.
    """
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    if backend == "sqlite":
        return (backend, str(Path(parsed.database).resolve()))
    return (backend, (parsed.host or "").lower(), parsed.port, parsed.database)


def _same_database(url_a: str, url_b: str) -> bool:
    # Every in-memory SQLite engine is a separate database
    if is_memory_url(url_a) or is_memory_url(url_b):
        return False
    return database_identity(url_a) == database_identity(url_b)


class TenantStoreLocator:
    """
    Resolve company ids to TenantStore handles.

    Args:
        shared_session_factory: sessionmaker bound to the shared registry store
        shared_database_url: URL of the shared store (tenant URLs must differ)
        url_template: tenant URL template containing {company_id}
        max_open_stores: engines kept open; least recently used are disposed
    """

    def __init__(
        self,
        shared_session_factory: Callable[[], Session],
        shared_database_url: Optional[str] = None,
        url_template: Optional[str] = None,
        max_open_stores: Optional[int] = None,
    ) -> None:
        self._shared_session_factory = shared_session_factory
        self._shared_url = shared_database_url or settings.SHARED_DATABASE_URL
        self._url_template = url_template or settings.TENANT_DATABASE_URL_TEMPLATE
        self._max_open = max_open_stores or settings.MAX_OPEN_TENANT_STORES
        self._stores: "OrderedDict[str, TenantStore]" = OrderedDict()
        self._lock = threading.Lock()

    def tenant_url(self, company: Company) -> str:
        return company.database_url or self._url_template.format(company_id=company.id)

    def _lookup_company(self, company_id: str) -> Company:
        db = self._shared_session_factory()
        try:
            company = (
                db.query(Company)
                .filter(Company.id == company_id, Company.is_active == True)  # noqa: E712
                .first()
            )
            if company is None:
                raise TenantNotFoundError(company_id)
            db.expunge(company)
            return company
        finally:
            db.close()

    def resolve_store(self, company_id: str) -> TenantStore:
        """
        Return the store handle for a registered company.

        Raises:
            TenantNotFoundError: company id is not registered (or inactive)
            DataPlacementViolation: the tenant URL points at the shared store
        """
        if not company_id:
            raise TenantNotFoundError(str(company_id))

        # Registry is checked on every call so deactivated tenants stop resolving
        company = self._lookup_company(company_id)
        url = self.tenant_url(company)
        if _same_database(url, self._shared_url):
            raise DataPlacementViolation(
                f"Tenant store for company {company_id!r} resolves to the shared store"
            )

        with self._lock:
            store = self._stores.get(company_id)
            if store is not None and store.database_url == url:
                self._stores.move_to_end(company_id)
                return store
            if store is not None:
                store.engine.dispose()
                del self._stores[company_id]

            engine = build_engine(url)
            store = TenantStore(
                company_id=company_id,
                database_url=url,
                engine=engine,
                session_factory=sessionmaker(autocommit=False, autoflush=False, bind=engine),
            )
            self._stores[company_id] = store
            logger.debug("Opened tenant store for company %s", company_id)

            while len(self._stores) > self._max_open:
                evicted_id, evicted = self._stores.popitem(last=False)
                evicted.engine.dispose()
                logger.debug("Disposed tenant store for company %s (pool full)", evicted_id)
        return store

    @property
    def open_store_count(self) -> int:
        with self._lock:
            return len(self._stores)

    def dispose(self) -> None:
        """Dispose every open tenant engine."""
        with self._lock:
            for store in self._stores.values():
                store.engine.dispose()
            self._stores.clear()
